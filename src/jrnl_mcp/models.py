"""Data models for jrnl entries, journals, and statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class SearchFilters:
    """Filters for a jrnl search. Dates are passed to jrnl verbatim."""
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    contains: Optional[str] = None
    limit: Optional[int] = None
    starred: bool = False
    match_all: bool = False  # -and: entries must carry every tag


@dataclass
class JournalEntry:
    """A single entry from a jrnl JSON export."""
    date: str
    time: str = ""
    title: str = ""
    body: str = ""
    tags: list[str] = field(default_factory=list)
    starred: bool = False

    @classmethod
    def from_export(cls, record: dict[str, Any]) -> "JournalEntry":
        """Build an entry from a raw export record, defaulting missing fields.

        Raises:
            TypeError: If ``tags`` is neither a list nor a single tag string.
        """
        tags = record.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        elif not isinstance(tags, list):
            raise TypeError(f"entry tags must be a list, got {type(tags).__name__}")

        return cls(
            date=record.get("date") or "",
            time=record.get("time") or "",
            title=record.get("title") or "",
            body=record.get("body") or "",
            tags=[str(tag) for tag in tags],
            starred=bool(record.get("starred") or False),
        )

    def word_count(self) -> int:
        """Whitespace-separated words in title and body."""
        return len(self.body.split()) + len(self.title.split())

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "time": self.time,
            "title": self.title,
            "body": self.body,
            "tags": self.tags,
            "starred": self.starred,
        }


@dataclass
class JournalInfo:
    """A journal as listed by ``jrnl --list``."""
    name: str
    path: str
    is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": self.path,
            "isDefault": self.is_default,
        }


@dataclass
class TimeGroupStats:
    """Entry and word counts for one time bucket."""
    period: str
    entry_count: int = 0
    word_count: int = 0

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "entryCount": self.entry_count,
            "wordCount": self.word_count,
        }


@dataclass
class TagCount:
    tag: str
    count: int

    def to_dict(self) -> dict:
        return {"tag": self.tag, "count": self.count}


@dataclass
class JournalStatistics:
    """Aggregate statistics over a journal export."""
    total_entries: int
    total_words: int
    average_words_per_entry: int
    time_grouping: Optional[list[TimeGroupStats]] = None
    top_tags: Optional[list[TagCount]] = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {
            "totalEntries": self.total_entries,
            "totalWords": self.total_words,
            "averageWordsPerEntry": self.average_words_per_entry,
        }
        if self.time_grouping is not None:
            result["timeGrouping"] = [g.to_dict() for g in self.time_grouping]
        if self.top_tags is not None:
            result["topTags"] = [t.to_dict() for t in self.top_tags]
        return result


@dataclass
class TagCooccurrence:
    """Number of entries carrying both tags of a pair."""
    tag1: str
    tag2: str
    count: int

    def to_dict(self) -> dict:
        return {"tag1": self.tag1, "tag2": self.tag2, "count": self.count}


@dataclass
class Session:
    """Per-server selection of the journal used when a call names none."""
    current_journal: Optional[str] = None
