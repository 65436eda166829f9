"""Strip jrnl's decorative output down to a parseable payload."""

from __future__ import annotations

import re

EMPTY_EXPORT = '{"tags": {}, "entries": []}'

# Box-drawing block is U+2500..U+257F
_BOX = "\u2500-\u257f"

_BORDER_LINE = re.compile(rf"^[{_BOX}\s]+$")
_SUMMARY_LINE = re.compile(
    rf"^[{_BOX}\s]*(?:\d+|no) entr(?:y|ies) found[{_BOX}\s]*$",
    re.IGNORECASE,
)
CONFIG_BANNER = re.compile(r"^\s*Journals defined in config")

NO_ENTRIES_MARKER = "no entries found"


def _is_noise(line: str) -> bool:
    return (
        not line.strip()
        or bool(_BORDER_LINE.match(line))
        or bool(_SUMMARY_LINE.match(line))
        or bool(CONFIG_BANNER.match(line))
    )


def clean_lines(raw: str) -> list[str]:
    """Return the lines of ``raw`` that are not decoration, summaries or blank."""
    return [line for line in raw.splitlines() if not _is_noise(line)]


def normalize_listing(raw: str) -> str:
    """Reduce raw jrnl stdout for a plain-text listing (``--tags``, ``--list``).

    Lines are cleaned as for exports, but no JSON region is extracted, so
    braces in journal paths survive.
    """
    return "\n".join(clean_lines(raw)).strip()


def normalize_output(raw: str) -> str:
    """Reduce raw jrnl stdout to its payload.

    Returns EMPTY_EXPORT when jrnl reported no entries or nothing is left
    after cleaning. When the remainder holds a brace-delimited region, only
    that region is returned. Never raises.
    """
    cleaned = "\n".join(clean_lines(raw)).strip()

    if NO_ENTRIES_MARKER in raw or not cleaned:
        return EMPTY_EXPORT

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start:end + 1]

    return cleaned
