"""Tests for the subprocess and fixture executors."""

import json
import sys

import pytest

from jrnl_mcp.config import ServerConfig
from jrnl_mcp.errors import ErrorKind, JrnlError
from jrnl_mcp.executor import (
    ExecutionResult,
    FixtureExecutor,
    SubprocessExecutor,
    is_not_found,
    make_executor,
)
from jrnl_mcp.fixtures import FIXTURE_VERSION, SAMPLE_EXPORT

from conftest import make_entry, make_export


class TestSubprocessExecutor:
    """Run the Python interpreter in place of jrnl."""

    @pytest.mark.asyncio
    async def test_captures_stdout(self):
        executor = SubprocessExecutor(command=sys.executable)
        result = await executor.run(["-c", "print('hello')"])

        assert result.success is True
        assert result.exit_code == 0
        assert result.stdout.strip() == "hello"

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_failure(self):
        executor = SubprocessExecutor(command=sys.executable)
        result = await executor.run(["-c", "import sys; sys.stderr.write('bad things'); sys.exit(3)"])

        assert result.success is False
        assert result.exit_code == 3
        assert "bad things" in result.stderr
        assert not is_not_found(result)

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        executor = SubprocessExecutor(command=sys.executable, timeout=0.5)
        result = await executor.run(["-c", "import time; time.sleep(30)"])

        assert result.success is False
        assert "timed out after 0.5s" in result.stderr

    @pytest.mark.asyncio
    async def test_timeout_keeps_earlier_stderr(self):
        executor = SubprocessExecutor(command=sys.executable, timeout=1.0)
        script = "import sys, time; sys.stderr.write('warming up\\n'); sys.stderr.flush(); time.sleep(30)"
        result = await executor.run(["-c", script])

        assert result.success is False
        assert result.stderr.startswith("warming up\n")
        assert result.stderr.endswith("\nCommand timed out after 1s")

    @pytest.mark.asyncio
    async def test_large_output_captured(self):
        """Output bigger than a pipe buffer does not block the process."""
        executor = SubprocessExecutor(command=sys.executable)
        result = await executor.run(["-c", "print('x' * 200000)"])

        assert result.success is True
        assert len(result.stdout.strip()) == 200000

    @pytest.mark.asyncio
    async def test_missing_binary_is_not_found(self):
        executor = SubprocessExecutor(command="jrnl-binary-that-does-not-exist-4a1f")
        result = await executor.run(["--version"])

        assert result.success is False
        assert result.exit_code is None
        assert is_not_found(result)

    @pytest.mark.asyncio
    async def test_stdin_not_inherited(self):
        """jrnl must never read from the MCP transport's stdin."""
        executor = SubprocessExecutor(command=sys.executable)
        result = await executor.run(["-c", "import sys; print(repr(sys.stdin.read()))"])

        assert result.success is True
        assert result.stdout.strip() == "''"


class TestIsNotFound:
    """Tests for is_not_found."""

    def test_successful_result_never_not_found(self):
        assert not is_not_found(ExecutionResult(stdout="", stderr="not found", success=True))

    def test_enoent_signature(self):
        assert is_not_found(ExecutionResult(stdout="", stderr="spawn jrnl ENOENT", success=False))


class TestFixtureExecutor:
    """Tests for the in-process jrnl stand-in."""

    @pytest.mark.asyncio
    async def test_version(self, executor):
        result = await executor.run(["--version"])
        assert result.success is True
        assert result.stdout == FIXTURE_VERSION

    @pytest.mark.asyncio
    async def test_list_uses_jrnl_format(self, executor):
        result = await executor.run(["--list"])
        lines = result.stdout.splitlines()
        assert lines[0].startswith("Journals defined in config")
        assert lines[1] == " * default -> /fixtures/journal.txt"
        assert lines[2] == "   work -> /fixtures/work.txt"

    @pytest.mark.asyncio
    async def test_tags_listing(self, executor):
        result = await executor.run(["--tags"])
        assert "@work : 5" in result.stdout.splitlines()

    @pytest.mark.asyncio
    async def test_export_all(self, executor):
        result = await executor.run(["--export", "json"])
        data = json.loads(result.stdout)
        assert len(data["entries"]) == len(SAMPLE_EXPORT["entries"])

    @pytest.mark.asyncio
    async def test_tags_are_unioned(self, executor):
        result = await executor.run(["@idea", "@personal", "--export", "json"])
        data = json.loads(result.stdout)
        assert len(data["entries"]) == 4

    @pytest.mark.asyncio
    async def test_and_intersects_tags(self, executor):
        result = await executor.run(["@work", "@meeting", "-and", "--export", "json"])
        data = json.loads(result.stdout)
        assert len(data["entries"]) == 2
        assert all({"@work", "@meeting"} <= set(e["tags"]) for e in data["entries"])

    @pytest.mark.asyncio
    async def test_starred(self, executor):
        result = await executor.run(["-starred", "--export", "json"])
        data = json.loads(result.stdout)
        assert [e["title"] for e in data["entries"]] == ["New feature idea", "Dinner with friends"]

    @pytest.mark.asyncio
    async def test_date_bounds(self, executor):
        result = await executor.run(["-from", "2024-01-12", "-to", "2024-01-14", "--export", "json"])
        data = json.loads(result.stdout)
        assert sorted(e["date"] for e in data["entries"]) == ["2024-01-12", "2024-01-13", "2024-01-14"]

    @pytest.mark.asyncio
    async def test_natural_language_dates_ignored(self, executor):
        result = await executor.run(["-from", "yesterday", "--export", "json"])
        data = json.loads(result.stdout)
        assert len(data["entries"]) == 7

    @pytest.mark.asyncio
    async def test_contains_is_case_insensitive(self, executor):
        result = await executor.run(["-contains", "MEETING", "--export", "json"])
        data = json.loads(result.stdout)
        assert len(data["entries"]) == 2

    @pytest.mark.asyncio
    async def test_limit_applies_after_filters(self, executor):
        result = await executor.run(["@personal", "-n", "2", "--export", "json"])
        data = json.loads(result.stdout)
        assert [e["date"] for e in data["entries"]] == ["2024-01-14", "2024-01-12"]

    @pytest.mark.asyncio
    async def test_tag_counts_recomputed(self, executor):
        result = await executor.run(["@meeting", "--export", "json"])
        data = json.loads(result.stdout)
        assert data["tags"] == {"@work": 2, "@meeting": 2}

    @pytest.mark.asyncio
    async def test_contains_value_not_taken_as_tag(self):
        executor = FixtureExecutor(data=make_export([
            make_entry(body="mentions @home inline", tags=["@x"]),
            make_entry(body="other", tags=["@y"]),
        ]))
        result = await executor.run(["-contains", "@home", "--export", "json"])
        data = json.loads(result.stdout)
        assert len(data["entries"]) == 1

    @pytest.mark.asyncio
    async def test_known_journal_token(self, executor):
        result = await executor.run(["work", "--tags"])
        assert result.success is True

    @pytest.mark.asyncio
    async def test_unknown_journal_fails(self, executor):
        result = await executor.run(["nosuch", "--tags"])
        assert result.success is False
        assert result.exit_code == 1
        assert not is_not_found(result)

    @pytest.mark.asyncio
    async def test_journal_option_recorded(self, executor):
        await executor.run(["--tags"], journal="work")
        assert executor.calls[-1] == ["--journal", "work", "--tags"]

    @pytest.mark.asyncio
    async def test_bad_limit_fails(self, executor):
        result = await executor.run(["-n", "many", "--export", "json"])
        assert result.success is False


class TestMakeExecutor:
    """Tests for make_executor."""

    def test_subprocess_by_default(self):
        executor = make_executor(ServerConfig(jrnl_command="/usr/local/bin/jrnl", timeout=5))
        assert isinstance(executor, SubprocessExecutor)
        assert executor.command == "/usr/local/bin/jrnl"
        assert executor.timeout == 5

    def test_builtin_fixtures(self):
        executor = make_executor(ServerConfig(use_fixtures=True))
        assert isinstance(executor, FixtureExecutor)
        assert executor.data is SAMPLE_EXPORT

    def test_fixture_file(self, tmp_path):
        path = tmp_path / "fixture.json"
        path.write_text(json.dumps({
            "entries": [make_entry()],
            "journals": {"only": "/only.txt"},
        }))

        executor = make_executor(ServerConfig(use_fixtures=True, fixture_path=path))
        assert isinstance(executor, FixtureExecutor)
        assert executor.journals == {"only": "/only.txt"}
        assert executor.data["tags"] == {}
        assert len(executor.data["entries"]) == 1

    def test_bad_fixture_file(self, tmp_path):
        path = tmp_path / "fixture.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(JrnlError) as exc_info:
            make_executor(ServerConfig(use_fixtures=True, fixture_path=path))
        assert exc_info.value.kind is ErrorKind.CONFIGURATION_ERROR

    def test_missing_fixture_file(self, tmp_path):
        with pytest.raises(JrnlError) as exc_info:
            make_executor(ServerConfig(use_fixtures=True, fixture_path=tmp_path / "nope.json"))
        assert exc_info.value.kind is ErrorKind.CONFIGURATION_ERROR
