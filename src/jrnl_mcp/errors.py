"""Error type for jrnl-mcp operations.

A single exception class carries an ``ErrorKind`` tag plus a details dict,
so callers match on ``error.kind`` instead of on subclasses.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(Enum):
    """Kinds of failure a tool call can report."""
    JRNL_NOT_FOUND = "JRNL_NOT_FOUND"
    EXECUTION_ERROR = "JRNL_EXECUTION_ERROR"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    JOURNAL_NOT_FOUND = "JOURNAL_NOT_FOUND"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"


class JrnlError(Exception):
    """Failure raised anywhere below the tool dispatcher."""

    def __init__(self, kind: ErrorKind, message: str, **details: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def code(self) -> str:
        return self.kind.value

    def describe(self) -> str:
        """Render as ``CODE: message`` for tool responses."""
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"JrnlError({self.kind.name}, {self.message!r}, details={self.details!r})"

    # ========== Constructors ==========

    @classmethod
    def not_found(cls, message: str = "jrnl command not found") -> "JrnlError":
        return cls(ErrorKind.JRNL_NOT_FOUND, message)

    @classmethod
    def execution_failed(
        cls,
        message: str,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> "JrnlError":
        return cls(ErrorKind.EXECUTION_ERROR, message, exit_code=exit_code, stderr=stderr)

    @classmethod
    def invalid_argument(cls, message: str, argument: Optional[str] = None) -> "JrnlError":
        return cls(ErrorKind.INVALID_ARGUMENT, message, argument=argument)

    @classmethod
    def configuration(cls, message: str) -> "JrnlError":
        return cls(ErrorKind.CONFIGURATION_ERROR, message)

    @classmethod
    def journal_not_found(cls, journal: str) -> "JrnlError":
        return cls(ErrorKind.JOURNAL_NOT_FOUND, f"Journal '{journal}' not found", journal=journal)

    @classmethod
    def unknown_tool(cls, tool: str) -> "JrnlError":
        return cls(ErrorKind.UNKNOWN_TOOL, f"Unknown tool: {tool}", tool=tool)
