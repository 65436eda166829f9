"""Core engine - jrnl operations built from commands, execution and parsing."""

from __future__ import annotations

import json
import logging
from datetime import date
from itertools import combinations
from typing import Any, Callable, Optional, Sequence

from .commands import (
    build_list_journals_command,
    build_search_command,
    build_stats_command,
    build_tag_command,
    build_version_command,
    normalize_tag,
)
from .errors import ErrorKind, JrnlError
from .executor import Executor, is_not_found
from .models import (
    JournalEntry,
    JournalInfo,
    JournalStatistics,
    SearchFilters,
    Session,
    TagCooccurrence,
    TagCount,
    TimeGroupStats,
)
from .normalize import normalize_listing, normalize_output
from .parsing import parse_journal_listing, parse_tag_listing

logger = logging.getLogger(__name__)

TOP_TAG_LIMIT = 10

TIME_GROUPINGS = {
    "day": "daily",
    "week": "weekly",
    "month": "monthly",
    "year": "yearly",
}


def parse_time_grouping(grouping: str) -> str:
    """Map a grouping key to its bucket scheme; unknown keys mean daily."""
    return TIME_GROUPINGS.get(grouping, "daily")


def period_key(entry_date: str, scheme: str) -> str:
    """Bucket label for an entry date (``YYYY-MM-DD``) under ``scheme``.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    day = date.fromisoformat(entry_date[:10])
    if scheme == "weekly":
        iso_year, iso_week, _ = day.isocalendar()
        return f"{iso_year}-W{iso_week}"
    if scheme == "monthly":
        return f"{day.year}-{day.month:02d}"
    if scheme == "yearly":
        return str(day.year)
    return day.isoformat()


def round_half_up(value: float) -> int:
    return int(value + 0.5)


def load_export(output: str) -> dict[str, Any]:
    """Decode a normalized jrnl JSON export.

    Raises:
        JrnlError: EXECUTION_ERROR if the payload is not a JSON object.
    """
    try:
        data = json.loads(output.strip())
    except ValueError as e:
        raise JrnlError.execution_failed(f"Failed to parse jrnl output as JSON: {e}") from e
    if not isinstance(data, dict):
        raise JrnlError.execution_failed(
            f"Unexpected jrnl export: expected an object, got {type(data).__name__}"
        )
    return data


class JrnlEngine:
    """Journal operations on top of a jrnl executor.

    The engine owns the session holding the current journal; one engine
    serves one client connection.
    """

    def __init__(self, executor: Executor, session: Optional[Session] = None):
        self.executor = executor
        self.session = session if session is not None else Session()

    async def _run(self, args: list[str], clean: Callable[[str], str] = normalize_output) -> str:
        """Execute jrnl and return its stdout passed through ``clean``.

        Raises:
            JrnlError: JRNL_NOT_FOUND if the binary is missing,
                EXECUTION_ERROR for any other failed invocation.
        """
        logger.debug("Executing jrnl with args: %s", " ".join(args))
        result = await self.executor.run(args)

        if not result.success:
            if is_not_found(result):
                raise JrnlError.not_found()
            raise JrnlError.execution_failed(
                f"jrnl command failed: {result.stderr.strip()}",
                exit_code=result.exit_code,
                stderr=result.stderr,
            )

        cleaned = clean(result.stdout)
        logger.debug("jrnl output cleaned, length: %d", len(cleaned))
        return cleaned

    async def _export(self, args: list[str]) -> dict[str, Any]:
        return load_export(await self._run(args))

    # ========== Entries ==========

    async def search_entries(
        self,
        filters: SearchFilters,
        journal: Optional[str] = None,
    ) -> tuple[list[JournalEntry], dict[str, int]]:
        """Search entries with jrnl's filters.

        Returns:
            Tuple of (entries, tag counts over the matched entries)
        """
        data = await self._export(build_search_command(filters, journal))
        try:
            entries = [JournalEntry.from_export(record) for record in data.get("entries") or []]
            tags = dict(data.get("tags") or {})
        except (AttributeError, TypeError, ValueError) as e:
            raise JrnlError.execution_failed(f"Failed to parse jrnl output: {e}") from e
        return entries, tags

    # ========== Tags ==========

    async def list_tags(self, journal: Optional[str] = None) -> dict[str, int]:
        """List tags with their usage counts."""
        output = await self._run(build_tag_command(journal), normalize_listing)
        parsed = parse_tag_listing(output)
        for line in parsed.skipped:
            logger.warning("Unrecognized line in jrnl --tags output: %r", line)
        return dict(parsed.items)

    async def analyze_tag_cooccurrence(
        self,
        tags: Sequence[str],
        journal: Optional[str] = None,
    ) -> list[TagCooccurrence]:
        """Count entries shared by each pair of the given tags.

        Pairs that never co-occur are omitted. A pair whose search fails is
        logged and skipped; a missing jrnl binary still aborts the analysis.

        Returns:
            Co-occurrences sorted by count, highest first
        """
        distinct = list(dict.fromkeys(normalize_tag(t) for t in tags))
        if len(distinct) < 2:
            return []

        cooccurrences = []
        for tag1, tag2 in combinations(distinct, 2):
            filters = SearchFilters(tags=[tag1, tag2], match_all=True)
            try:
                entries, _ = await self.search_entries(filters, journal)
            except JrnlError as e:
                if e.kind is ErrorKind.JRNL_NOT_FOUND:
                    raise
                logger.debug("Error analyzing cooccurrence for %s and %s: %s", tag1, tag2, e)
                continue

            if entries:
                cooccurrences.append(TagCooccurrence(tag1=tag1, tag2=tag2, count=len(entries)))

        cooccurrences.sort(key=lambda c: c.count, reverse=True)
        return cooccurrences

    # ========== Statistics ==========

    async def get_statistics(
        self,
        journal: Optional[str] = None,
        time_grouping: Optional[str] = None,
        include_top_tags: bool = True,
    ) -> JournalStatistics:
        """Compute statistics from a full export of the journal.

        Args:
            journal: Journal name (jrnl default if None)
            time_grouping: "day", "week", "month" or "year"; None for no buckets
            include_top_tags: Include the ten most used tags

        Returns:
            JournalStatistics
        """
        data = await self._export(build_stats_command(journal))

        try:
            entries = [JournalEntry.from_export(record) for record in data.get("entries") or []]

            total_entries = len(entries)
            total_words = sum(entry.word_count() for entry in entries)
            average = round_half_up(total_words / total_entries) if total_entries else 0

            statistics = JournalStatistics(
                total_entries=total_entries,
                total_words=total_words,
                average_words_per_entry=average,
            )

            if time_grouping:
                statistics.time_grouping = self._group_by_time(entries, parse_time_grouping(time_grouping))

            if include_top_tags:
                statistics.top_tags = self._top_tags(entries)
        except JrnlError:
            raise
        except Exception as e:
            raise JrnlError.execution_failed(f"Failed to calculate statistics: {e}") from e

        return statistics

    @staticmethod
    def _group_by_time(entries: list[JournalEntry], scheme: str) -> list[TimeGroupStats]:
        buckets: dict[str, TimeGroupStats] = {}
        for entry in entries:
            key = period_key(entry.date, scheme)
            bucket = buckets.setdefault(key, TimeGroupStats(period=key))
            bucket.entry_count += 1
            bucket.word_count += entry.word_count()
        return list(buckets.values())

    @staticmethod
    def _top_tags(entries: list[JournalEntry]) -> list[TagCount]:
        counts: dict[str, int] = {}
        for entry in entries:
            for tag in entry.tags:
                tag = normalize_tag(tag)
                counts[tag] = counts.get(tag, 0) + 1

        # sorted() is stable: equal counts keep first-seen order
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [TagCount(tag=tag, count=count) for tag, count in ranked[:TOP_TAG_LIMIT]]

    # ========== Journals ==========

    async def list_journals(self) -> list[JournalInfo]:
        """List configured journals.

        The first default journal becomes the session's current journal
        when none has been selected yet.
        """
        output = await self._run(build_list_journals_command(), normalize_listing)
        parsed = parse_journal_listing(output)
        for line in parsed.skipped:
            logger.warning("Unrecognized line in jrnl --list output: %r", line)

        if self.session.current_journal is None:
            default = next((j for j in parsed.items if j.is_default), None)
            if default is not None:
                self.session.current_journal = default.name

        return parsed.items

    def set_journal(self, journal_name: str) -> str:
        """Select the journal used when a call names none.

        The name is not checked against ``jrnl --list``.
        """
        if not journal_name:
            raise JrnlError.invalid_argument("journalName must be a non-empty string", argument="journalName")
        self.session.current_journal = journal_name
        logger.info("Current journal set to %s", journal_name)
        return journal_name

    async def version(self) -> str:
        """Return jrnl's version banner."""
        output = await self._run(build_version_command(), normalize_listing)
        return output.strip()
