"""MCP tool definitions wrapping the jrnl engine."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .engine import JrnlEngine
from .errors import ErrorKind, JrnlError
from .models import SearchFilters

logger = logging.getLogger(__name__)

JOURNAL_PROPERTY = {
    "type": "string",
    "description": "Journal name (uses current/default if not specified)",
}

# error kind -> (error_type, suggestion); must cover every ErrorKind
ERROR_RESPONSES: dict[ErrorKind, tuple[str, Optional[str]]] = {
    ErrorKind.JRNL_NOT_FOUND: (
        "jrnl_not_found",
        "Install jrnl (https://jrnl.sh) and make sure it is on PATH, or set JRNL_MCP_USE_MOCK=true",
    ),
    ErrorKind.EXECUTION_ERROR: (
        "jrnl_execution_error",
        "Check the journal name and filters; jrnl's stderr is included in the message",
    ),
    ErrorKind.INVALID_ARGUMENT: ("invalid_argument", None),
    ErrorKind.CONFIGURATION_ERROR: ("configuration_error", None),
    ErrorKind.JOURNAL_NOT_FOUND: (
        "journal_not_found",
        "Use list_journals to see available journals",
    ),
    ErrorKind.UNKNOWN_TOOL: ("unknown_tool", None),
}


def make_tools() -> dict[str, dict]:
    """Create MCP tool definitions for the jrnl engine.

    Returns:
        Dict mapping tool names to their definitions.
    """

    tools = {}

    # ========== search_entries ==========
    tools["search_entries"] = {
        "name": "search_entries",
        "description": "Search and filter journal entries",
        "inputSchema": {
            "type": "object",
            "properties": {
                "from": {
                    "type": "string",
                    "description": 'Start date (e.g., "yesterday", "2024-01-01")',
                },
                "to": {
                    "type": "string",
                    "description": "End date",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Tags to filter by",
                },
                "contains": {
                    "type": "string",
                    "description": "Text to search for",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 0,
                    "description": "Maximum number of entries",
                },
                "starred": {
                    "type": "boolean",
                    "description": "Only show starred entries",
                },
                "journal": JOURNAL_PROPERTY,
            },
        },
    }

    # ========== list_tags ==========
    tools["list_tags"] = {
        "name": "list_tags",
        "description": "List all tags with their usage counts",
        "inputSchema": {
            "type": "object",
            "properties": {
                "journal": JOURNAL_PROPERTY,
            },
        },
    }

    # ========== analyze_tag_cooccurrence ==========
    tools["analyze_tag_cooccurrence"] = {
        "name": "analyze_tag_cooccurrence",
        "description": "Analyze which tags frequently appear together (pairwise counts)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 2,
                    "description": "Tags to analyze for co-occurrence",
                },
                "journal": JOURNAL_PROPERTY,
            },
            "required": ["tags"],
        },
    }

    # ========== get_statistics ==========
    tools["get_statistics"] = {
        "name": "get_statistics",
        "description": "Get journal statistics and analytics",
        "inputSchema": {
            "type": "object",
            "properties": {
                "journal": JOURNAL_PROPERTY,
                "timeGrouping": {
                    "type": "string",
                    "enum": ["day", "week", "month", "year"],
                    "description": "Group statistics by time period",
                },
                "includeTopTags": {
                    "type": "boolean",
                    "description": "Include top tags in statistics (default: true)",
                    "default": True,
                },
            },
        },
    }

    # ========== list_journals ==========
    tools["list_journals"] = {
        "name": "list_journals",
        "description": "List all available journals",
        "inputSchema": {
            "type": "object",
            "properties": {},
        },
    }

    # ========== set_journal ==========
    tools["set_journal"] = {
        "name": "set_journal",
        "description": "Set the active journal for subsequent operations",
        "inputSchema": {
            "type": "object",
            "properties": {
                "journalName": {
                    "type": "string",
                    "description": "Name of the journal to set as active",
                },
            },
            "required": ["journalName"],
        },
    }

    return tools


def _optional_str(arguments: dict[str, Any], key: str) -> Optional[str]:
    value = arguments.get(key)
    return value if isinstance(value, str) and value else None


def _string_list(arguments: dict[str, Any], key: str) -> list[str]:
    value = arguments.get(key)
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def _limit(arguments: dict[str, Any]) -> Optional[int]:
    value = arguments.get("limit")
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise JrnlError.invalid_argument(f"limit must be an integer, got {value!r}", argument="limit")
    if value < 0:
        raise JrnlError.invalid_argument(f"limit must be non-negative, got {value}", argument="limit")
    return value


def error_response(error: JrnlError) -> dict[str, Any]:
    """Convert a JrnlError into a failed tool result."""
    error_type, suggestion = ERROR_RESPONSES[error.kind]
    result: dict[str, Any] = {
        "success": False,
        "error": error.describe(),
        "error_type": error_type,
    }
    if suggestion:
        result["suggestion"] = suggestion
    return result


async def execute_tool(engine: JrnlEngine, name: str, arguments: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Execute a jrnl tool and return the result.

    Args:
        engine: JrnlEngine instance
        name: Tool name
        arguments: Tool arguments

    Returns:
        Result dict with success status and data or error
    """
    arguments = arguments or {}

    try:
        # Calls without a journal fall back to the session's current journal
        journal = _optional_str(arguments, "journal") or engine.session.current_journal

        if name == "search_entries":
            filters = SearchFilters(
                from_date=_optional_str(arguments, "from"),
                to_date=_optional_str(arguments, "to"),
                tags=_string_list(arguments, "tags"),
                contains=_optional_str(arguments, "contains"),
                limit=_limit(arguments),
                starred=arguments.get("starred") is True,
            )
            entries, tags = await engine.search_entries(filters, journal)
            return {
                "success": True,
                "entries": [entry.to_dict() for entry in entries],
                "tags": tags,
            }

        elif name == "list_tags":
            tags = await engine.list_tags(journal)
            return {
                "success": True,
                "tags": tags,
            }

        elif name == "analyze_tag_cooccurrence":
            cooccurrences = await engine.analyze_tag_cooccurrence(
                _string_list(arguments, "tags"),
                journal,
            )
            return {
                "success": True,
                "cooccurrences": [c.to_dict() for c in cooccurrences],
            }

        elif name == "get_statistics":
            include_top_tags = arguments.get("includeTopTags")
            statistics = await engine.get_statistics(
                journal=journal,
                time_grouping=_optional_str(arguments, "timeGrouping"),
                include_top_tags=include_top_tags if isinstance(include_top_tags, bool) else True,
            )
            return {
                "success": True,
                "statistics": statistics.to_dict(),
            }

        elif name == "list_journals":
            journals = await engine.list_journals()
            result: dict[str, Any] = {
                "success": True,
                "journals": [j.to_dict() for j in journals],
            }
            if engine.session.current_journal is not None:
                result["currentJournal"] = engine.session.current_journal
            return result

        elif name == "set_journal":
            current = engine.set_journal(_optional_str(arguments, "journalName") or "")
            return {
                "success": True,
                "currentJournal": current,
            }

        else:
            raise JrnlError.unknown_tool(name)

    except JrnlError as e:
        logger.error("Tool %s failed: %s", name, e.describe())
        return error_response(e)

    except Exception as e:
        logger.error("Tool %s failed unexpectedly: %s", name, e)
        logger.debug("Traceback for tool %s", name, exc_info=True)
        return {
            "success": False,
            "error": str(e),
            "error_type": "unexpected_error",
        }
