"""Parsers for jrnl's plain-text listings.

The formats of ``jrnl --tags`` and ``jrnl --list`` are not versioned, so each
parser returns the lines it could not match alongside the parsed values.
Callers log those so format drift shows up instead of vanishing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from .models import JournalInfo
from .normalize import CONFIG_BANNER

T = TypeVar("T")

TAG_LINE = re.compile(r"^(@\w+)\s*:\s*(\d+)$")
JOURNAL_LINE = re.compile(r"^(\s*\*?\s*)(\w+)\s*->\s*(.+)$")


@dataclass
class ParsedListing(Generic[T]):
    """Values parsed from a listing plus the lines that did not match."""
    items: list[T] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _listing_lines(text: str) -> list[str]:
    return [
        line for line in text.strip().splitlines()
        if line.strip() and not CONFIG_BANNER.match(line)
    ]


def parse_tag_listing(text: str) -> ParsedListing[tuple[str, int]]:
    """Parse ``@tag : count`` lines into (tag, count) pairs."""
    result: ParsedListing[tuple[str, int]] = ParsedListing()
    for line in _listing_lines(text):
        match = TAG_LINE.match(line.strip())
        if match:
            result.items.append((match.group(1), int(match.group(2))))
        else:
            result.skipped.append(line)
    return result


def parse_journal_listing(text: str) -> ParsedListing[JournalInfo]:
    """Parse ``[*] name -> path`` lines; a leading ``*`` marks the default."""
    result: ParsedListing[JournalInfo] = ParsedListing()
    for line in _listing_lines(text):
        match = JOURNAL_LINE.match(line)
        if match:
            result.items.append(JournalInfo(
                name=match.group(2).strip(),
                path=match.group(3).strip(),
                is_default=line.strip().startswith("*"),
            ))
        else:
            result.skipped.append(line)
    return result
