"""Build jrnl argument lists from structured parameters."""

from __future__ import annotations

from typing import Optional

from .models import SearchFilters

TAG_SIGIL = "@"
EXPORT_JSON = ["--export", "json"]


def normalize_tag(tag: str) -> str:
    """Prefix the tag sigil if missing."""
    return tag if tag.startswith(TAG_SIGIL) else f"{TAG_SIGIL}{tag}"


def _journal_prefix(journal: Optional[str]) -> list[str]:
    return [journal] if journal else []


def build_search_command(filters: SearchFilters, journal: Optional[str] = None) -> list[str]:
    """Build the argument list for a filtered JSON export.

    Order: journal, -from, -to, tags, -and, -contains, -n, -starred,
    then the unconditional --export json.
    """
    args = _journal_prefix(journal)

    if filters.from_date:
        args.extend(["-from", filters.from_date])

    if filters.to_date:
        args.extend(["-to", filters.to_date])

    if filters.tags:
        args.extend(normalize_tag(tag) for tag in filters.tags)
        if filters.match_all:
            args.append("-and")

    if filters.contains:
        args.extend(["-contains", filters.contains])

    if filters.limit:
        args.extend(["-n", str(filters.limit)])

    if filters.starred:
        args.append("-starred")

    args.extend(EXPORT_JSON)
    return args


def build_tag_command(journal: Optional[str] = None) -> list[str]:
    return _journal_prefix(journal) + ["--tags"]


def build_stats_command(journal: Optional[str] = None) -> list[str]:
    # Statistics are computed in-process from a full export
    return _journal_prefix(journal) + EXPORT_JSON


def build_list_journals_command() -> list[str]:
    return ["--list"]


def build_version_command() -> list[str]:
    return ["--version"]
