"""Sample jrnl data served by FixtureExecutor when no jrnl binary is used."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

FIXTURE_VERSION = "jrnl version 4.2 (fixture)"
FIXTURE_CONFIG_PATH = "/fixtures/jrnl.yaml"

# name -> journal file; the first one is the default
SAMPLE_JOURNALS: dict[str, str] = {
    "default": "/fixtures/journal.txt",
    "work": "/fixtures/work.txt",
    "personal": "/fixtures/personal.txt",
}

# Tag counts as reported by ``jrnl --tags`` for the whole journal
SAMPLE_EXPORT: dict[str, Any] = {
    "tags": {
        "@work": 5,
        "@personal": 3,
        "@meeting": 2,
        "@idea": 1,
    },
    "entries": [
        {
            "date": "2024-01-15",
            "time": "09:00",
            "title": "Morning standup meeting",
            "body": "Discussed project progress with the team. @work @meeting",
            "tags": ["@work", "@meeting"],
            "starred": False,
        },
        {
            "date": "2024-01-15",
            "time": "14:30",
            "title": "New feature idea",
            "body": "Had an interesting idea about improving the search functionality. @work @idea",
            "tags": ["@work", "@idea"],
            "starred": True,
        },
        {
            "date": "2024-01-14",
            "time": "20:00",
            "title": "Evening reflection",
            "body": "Spent time reading and relaxing after work. @personal",
            "tags": ["@personal"],
            "starred": False,
        },
        {
            "date": "2024-01-13",
            "time": "10:00",
            "title": "Weekly review meeting",
            "body": "Reviewed last week's accomplishments and set goals for the coming week. @work @meeting",
            "tags": ["@work", "@meeting"],
            "starred": False,
        },
        {
            "date": "2024-01-12",
            "time": "18:00",
            "title": "Dinner with friends",
            "body": "Had a great time catching up with old friends. @personal",
            "tags": ["@personal"],
            "starred": True,
        },
        {
            "date": "2024-01-11",
            "time": "09:30",
            "title": "Project kickoff",
            "body": "Started working on the new MCP integration project. @work",
            "tags": ["@work"],
            "starred": False,
        },
        {
            "date": "2024-01-10",
            "time": "21:00",
            "title": "Reading notes",
            "body": "Finished reading an interesting book about software architecture. @personal",
            "tags": ["@personal"],
            "starred": False,
        },
    ],
}


def load_fixture_file(path: Path) -> tuple[dict[str, Any], dict[str, str]]:
    """Load fixture data from a JSON file.

    The file holds a jrnl export (``tags`` and ``entries``) and may add a
    ``journals`` object mapping names to paths.

    Returns:
        Tuple of (export_data, journals)
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError("fixture file must contain a JSON object")

    journals = data.pop("journals", None) or dict(SAMPLE_JOURNALS)
    data.setdefault("tags", {})
    data.setdefault("entries", [])
    return data, journals
