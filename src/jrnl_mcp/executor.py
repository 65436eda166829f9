"""Run jrnl and capture its output.

``SubprocessExecutor`` spawns the real binary. ``FixtureExecutor`` answers
the same argument lists from in-process sample data so the rest of the
server can run where jrnl is not installed.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from .config import ServerConfig
from .errors import JrnlError
from .fixtures import (
    FIXTURE_CONFIG_PATH,
    FIXTURE_VERSION,
    SAMPLE_EXPORT,
    SAMPLE_JOURNALS,
    load_fixture_file,
)

logger = logging.getLogger(__name__)

# stderr substrings meaning the binary itself could not be started
NOT_FOUND_SIGNATURES = ("No such file or directory", "not found", "ENOENT")

# seconds to finish reading pipes after the process exits
DRAIN_TIMEOUT = 5.0

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class ExecutionResult:
    """Captured output of one jrnl invocation."""
    stdout: str
    stderr: str
    success: bool
    exit_code: Optional[int] = None


def is_not_found(result: ExecutionResult) -> bool:
    """Check whether a failed result means the jrnl binary is missing."""
    return not result.success and any(sig in result.stderr for sig in NOT_FOUND_SIGNATURES)


class Executor(Protocol):
    async def run(self, args: Sequence[str], journal: Optional[str] = None) -> ExecutionResult:
        ...


def _with_journal(args: Sequence[str], journal: Optional[str]) -> list[str]:
    if journal:
        return ["--journal", journal, *args]
    return list(args)


class SubprocessExecutor:
    """Executes the jrnl binary as a subprocess."""

    def __init__(self, command: str = "jrnl", timeout: float = 30.0):
        self.command = command
        self.timeout = timeout

    async def run(self, args: Sequence[str], journal: Optional[str] = None) -> ExecutionResult:
        """Run jrnl with ``args``.

        Never raises for process-level problems: spawn errors and timeouts
        come back as unsuccessful results with the reason in stderr.

        Args:
            args: jrnl arguments
            journal: Optional journal passed as ``--journal <name>``

        Returns:
            ExecutionResult
        """
        command_args = _with_journal(args, journal)
        logger.debug("Executing %s %s", self.command, " ".join(command_args))

        try:
            process = await asyncio.create_subprocess_exec(
                self.command,
                *command_args,
                # stdin belongs to the MCP transport
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.debug("jrnl process error: %s", e)
            return ExecutionResult(stdout="", stderr=f"\n{e}", success=False)

        # Readers run alongside the process; output written before a timeout
        # survives the kill
        stdout_task = asyncio.ensure_future(process.stdout.read())
        stderr_task = asyncio.ensure_future(process.stderr.read())

        try:
            await asyncio.wait_for(process.wait(), timeout=self.timeout)
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            _, stderr = await _drain(stdout_task, stderr_task)
            logger.debug("jrnl timed out after %ss", self.timeout)
            return ExecutionResult(
                stdout="",
                stderr=f"{stderr}\nCommand timed out after {self.timeout:g}s",
                success=False,
                exit_code=process.returncode,
            )

        stdout, stderr = await _drain(stdout_task, stderr_task)
        return ExecutionResult(
            stdout=stdout,
            stderr=stderr,
            success=process.returncode == 0,
            exit_code=process.returncode,
        )


async def _drain(stdout_task: asyncio.Future, stderr_task: asyncio.Future) -> tuple[str, str]:
    """Collect both pipe readers once the process has exited.

    A grandchild still holding a pipe open keeps its reader waiting; readers
    unfinished after DRAIN_TIMEOUT seconds are cancelled and count as empty.
    """
    done, pending = await asyncio.wait({stdout_task, stderr_task}, timeout=DRAIN_TIMEOUT)
    for task in pending:
        task.cancel()

    def text(task: asyncio.Future) -> str:
        if task not in done:
            return ""
        return task.result().decode("utf-8", errors="replace")

    return text(stdout_task), text(stderr_task)


class FixtureExecutor:
    """In-process stand-in for jrnl backed by sample data.

    Reproduces the subset of jrnl's command line the server issues:
    ``--version``, ``--list``, ``--tags`` and filtered ``--export json``
    searches, each optionally preceded by a journal name.
    """

    def __init__(
        self,
        data: Optional[dict[str, Any]] = None,
        journals: Optional[dict[str, str]] = None,
    ):
        self.data = data if data is not None else SAMPLE_EXPORT
        self.journals = journals if journals is not None else dict(SAMPLE_JOURNALS)
        self.calls: list[list[str]] = []

    async def run(self, args: Sequence[str], journal: Optional[str] = None) -> ExecutionResult:
        command_args = _with_journal(args, journal)
        self.calls.append(command_args)
        logger.debug("Fixture jrnl %s", " ".join(command_args))

        args = list(args)
        if args and not args[0].startswith(("-", "@")):
            journal = args.pop(0)
        if journal and journal not in self.journals:
            return self._fail(f"Error: journal '{journal}' is not defined in the config")

        if "--version" in args:
            return self._ok(FIXTURE_VERSION)

        if "--list" in args:
            return self._ok(self._journal_listing())

        if "--tags" in args:
            return self._ok("\n".join(
                f"{tag} : {count}" for tag, count in self.data.get("tags", {}).items()
            ))

        if "--export" in args and "json" in args:
            try:
                return self._ok(json.dumps(self._search(args)))
            except ValueError as e:
                return self._fail(f"Error: {e}", exit_code=2)

        return self._ok(json.dumps(self.data))

    @staticmethod
    def _ok(stdout: str) -> ExecutionResult:
        return ExecutionResult(stdout=stdout, stderr="", success=True, exit_code=0)

    @staticmethod
    def _fail(stderr: str, exit_code: int = 1) -> ExecutionResult:
        return ExecutionResult(stdout="", stderr=stderr, success=False, exit_code=exit_code)

    def _journal_listing(self) -> str:
        lines = [f"Journals defined in config ({FIXTURE_CONFIG_PATH})"]
        for i, (name, path) in enumerate(self.journals.items()):
            marker = "*" if i == 0 else " "
            lines.append(f" {marker} {name} -> {path}")
        return "\n".join(lines)

    def _search(self, args: list[str]) -> dict[str, Any]:
        """Apply jrnl search filters to the fixture entries."""
        tags: list[str] = []
        options: dict[str, Optional[str]] = {}
        match_all = False
        starred = False

        tokens = iter(args)
        for token in tokens:
            if token in ("-from", "-to", "-contains", "-n", "--export"):
                options[token] = next(tokens, None)
            elif token == "-and":
                match_all = True
            elif token == "-starred":
                starred = True
            elif token.startswith("@"):
                tags.append(token)

        entries = list(self.data.get("entries", []))

        if tags:
            combine = all if match_all else any
            entries = [e for e in entries if combine(t in e.get("tags", []) for t in tags)]

        if starred:
            entries = [e for e in entries if e.get("starred")]

        # Only ISO dates are compared; natural-language dates are ignored
        from_date = options.get("-from")
        if from_date and _ISO_DATE.match(from_date):
            entries = [e for e in entries if e.get("date", "") >= from_date]

        to_date = options.get("-to")
        if to_date and _ISO_DATE.match(to_date):
            entries = [e for e in entries if e.get("date", "") <= to_date]

        contains = options.get("-contains")
        if contains:
            needle = contains.lower()
            entries = [
                e for e in entries
                if needle in e.get("title", "").lower() or needle in e.get("body", "").lower()
            ]

        limit = options.get("-n")
        if limit is not None:
            entries = entries[:int(limit)]

        tag_counts: dict[str, int] = {}
        for entry in entries:
            for tag in entry.get("tags", []):
                tag_counts[tag] = tag_counts.get(tag, 0) + 1

        return {"tags": tag_counts, "entries": entries}


def make_executor(config: ServerConfig) -> Executor:
    """Create the executor selected by the configuration.

    Raises:
        JrnlError: CONFIGURATION_ERROR if the fixture file cannot be loaded
    """
    if not config.use_fixtures:
        return SubprocessExecutor(command=config.jrnl_command, timeout=config.timeout)

    if config.fixture_path is None:
        logger.info("Using built-in jrnl fixtures")
        return FixtureExecutor()

    try:
        data, journals = load_fixture_file(config.fixture_path)
    except (OSError, ValueError) as e:
        raise JrnlError.configuration(f"Cannot load fixtures from {config.fixture_path}: {e}") from e
    logger.info("Using jrnl fixtures from %s", config.fixture_path)
    return FixtureExecutor(data=data, journals=journals)
