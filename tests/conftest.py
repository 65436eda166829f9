"""Shared pytest fixtures for jrnl-mcp tests."""

import copy
import logging
from typing import Optional, Sequence

import pytest

from jrnl_mcp.engine import JrnlEngine
from jrnl_mcp.executor import ExecutionResult, FixtureExecutor
from jrnl_mcp.fixtures import SAMPLE_EXPORT


class StubExecutor:
    """Executor returning canned results, one per call, and recording args."""

    def __init__(self, *results: ExecutionResult):
        self.results = list(results)
        self.calls: list[list[str]] = []

    async def run(self, args: Sequence[str], journal: Optional[str] = None) -> ExecutionResult:
        self.calls.append(list(args))
        if len(self.results) > 1:
            result = self.results.pop(0)
        else:
            result = self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


def ok(stdout: str) -> ExecutionResult:
    return ExecutionResult(stdout=stdout, stderr="", success=True, exit_code=0)


def failed(stderr: str, exit_code: Optional[int] = 1) -> ExecutionResult:
    return ExecutionResult(stdout="", stderr=stderr, success=False, exit_code=exit_code)


def make_entry(date="2024-01-01", time="12:00", title="Test entry",
               body="This is a test entry body.", tags=None, starred=False) -> dict:
    """Create an export record with default values."""
    return {
        "date": date,
        "time": time,
        "title": title,
        "body": body,
        "tags": ["@test"] if tags is None else tags,
        "starred": starred,
    }


def make_export(entries: list[dict]) -> dict:
    """Wrap records in a jrnl export, counting their tags."""
    tags: dict[str, int] = {}
    for entry in entries:
        for tag in entry["tags"]:
            tags[tag] = tags.get(tag, 0) + 1
    return {"tags": tags, "entries": entries}


@pytest.fixture
def sample_data():
    """A private copy of the built-in sample export."""
    return copy.deepcopy(SAMPLE_EXPORT)


@pytest.fixture
def executor(sample_data):
    """Fixture-backed executor over the sample export."""
    return FixtureExecutor(data=sample_data)


@pytest.fixture
def engine(executor):
    """Engine with a fresh session over the fixture executor."""
    return JrnlEngine(executor)


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
