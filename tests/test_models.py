"""Tests for data models."""

import pytest

from jrnl_mcp.models import JournalEntry, JournalInfo, JournalStatistics


class TestJournalEntryFromExport:
    """Tests for JournalEntry.from_export."""

    def test_list_tags(self):
        entry = JournalEntry.from_export({"date": "2024-01-01", "tags": ["@work", "@idea"]})
        assert entry.tags == ["@work", "@idea"]

    def test_single_tag_string_is_one_tag(self):
        entry = JournalEntry.from_export({"date": "2024-01-01", "tags": "@work"})
        assert entry.tags == ["@work"]

    def test_null_tags(self):
        assert JournalEntry.from_export({"date": "2024-01-01", "tags": None}).tags == []

    @pytest.mark.parametrize("tags", [{"@work": 1}, 5])
    def test_other_tag_shapes_rejected(self, tags):
        with pytest.raises(TypeError):
            JournalEntry.from_export({"date": "2024-01-01", "tags": tags})


class TestToDict:
    """Wire format uses camelCase keys."""

    def test_journal_info(self):
        assert JournalInfo("work", "/w.txt", True).to_dict() == {
            "name": "work",
            "path": "/w.txt",
            "isDefault": True,
        }

    def test_statistics_omits_unrequested_sections(self):
        stats = JournalStatistics(total_entries=2, total_words=9, average_words_per_entry=5)
        assert stats.to_dict() == {
            "totalEntries": 2,
            "totalWords": 9,
            "averageWordsPerEntry": 5,
        }
