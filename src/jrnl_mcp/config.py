"""Configuration loading for jrnl-mcp.

Settings are layered, lowest precedence first:
1. Dataclass defaults
2. Config file (.toml or .json)
3. Environment variables
4. Command-line flags (applied by the server entry point)
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python <3.11

from .errors import JrnlError

ENV_USE_MOCK = "JRNL_MCP_USE_MOCK"
ENV_DEBUG = "JRNL_MCP_DEBUG"
ENV_COMMAND = "JRNL_MCP_COMMAND"
ENV_TIMEOUT = "JRNL_MCP_TIMEOUT"


@dataclass
class ServerConfig:
    """Configuration for a jrnl-mcp server."""

    # External binary
    jrnl_command: str = "jrnl"
    timeout: float = 30.0  # seconds per jrnl invocation

    # Journal selected before any set_journal call
    default_journal: Optional[str] = None

    # Fixture mode replaces the jrnl binary with in-process sample data
    use_fixtures: bool = False
    fixture_path: Optional[Path] = None

    debug: bool = False


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise JrnlError.configuration(f"Invalid timeout: {value!r}")
    if timeout <= 0:
        raise JrnlError.configuration(f"Timeout must be positive, got {timeout}")
    return timeout


def dict_to_config(data: dict[str, Any], base_dir: Optional[Path] = None) -> ServerConfig:
    """Convert dictionary to ServerConfig.

    Relative fixture paths are resolved against ``base_dir`` (the directory
    holding the config file).
    """
    config = ServerConfig()

    if "jrnl" in data:
        jrnl = data["jrnl"]
        if "command" in jrnl:
            config.jrnl_command = str(jrnl["command"])
        if "timeout" in jrnl:
            config.timeout = _parse_timeout(jrnl["timeout"])

    if "session" in data:
        session = data["session"]
        if session.get("journal"):
            config.default_journal = str(session["journal"])

    if "fixtures" in data:
        fixtures = data["fixtures"]
        if "enabled" in fixtures:
            config.use_fixtures = bool(fixtures["enabled"])
        if fixtures.get("path"):
            path = Path(fixtures["path"])
            if not path.is_absolute() and base_dir is not None:
                path = base_dir / path
            config.fixture_path = path

    if "logging" in data:
        if "debug" in data["logging"]:
            config.debug = bool(data["logging"]["debug"])

    return config


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() == "true"


def apply_environment(config: ServerConfig, environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """Apply environment variable overrides in place and return the config."""
    if environ is None:
        environ = os.environ

    if _env_flag(environ, ENV_USE_MOCK):
        config.use_fixtures = True
    if _env_flag(environ, ENV_DEBUG) or _env_flag(environ, "DEBUG"):
        config.debug = True
    if environ.get(ENV_COMMAND):
        config.jrnl_command = environ[ENV_COMMAND]
    if environ.get(ENV_TIMEOUT):
        config.timeout = _parse_timeout(environ[ENV_TIMEOUT])

    return config


def find_config_file(directory: Path) -> Optional[Path]:
    """Find configuration file in a directory.

    Search order:
    1. jrnl_mcp.toml
    2. jrnl_mcp.json
    3. .jrnl_mcp.toml
    4. .jrnl_mcp.json
    """
    candidates = [
        "jrnl_mcp.toml",
        "jrnl_mcp.json",
        ".jrnl_mcp.toml",
        ".jrnl_mcp.json",
    ]

    for name in candidates:
        path = directory / name
        if path.exists():
            return path

    return None


def load_config(
    directory: Optional[Path] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """Load server configuration.

    Args:
        directory: Directory searched for a config file (default: cwd)
        config_path: Optional explicit path to config file
        environ: Environment mapping (default: os.environ)

    Returns:
        ServerConfig instance

    Raises:
        JrnlError: CONFIGURATION_ERROR for unreadable or invalid files
    """
    if config_path is None:
        config_path = find_config_file(directory or Path.cwd())

    if config_path is None:
        return apply_environment(ServerConfig(), environ)

    suffix = config_path.suffix.lower()

    try:
        if suffix == ".toml":
            config_dict = load_toml_config(config_path)
        elif suffix == ".json":
            config_dict = load_json_config(config_path)
        else:
            raise JrnlError.configuration(f"Unsupported config file type: {suffix}")
    except (OSError, ValueError) as e:
        # TOMLDecodeError and JSONDecodeError are both ValueErrors
        raise JrnlError.configuration(f"Cannot load config {config_path}: {e}") from e

    if not isinstance(config_dict, dict):
        raise JrnlError.configuration(f"Config {config_path} must be a table/object")

    config = dict_to_config(config_dict, base_dir=config_path.parent)
    return apply_environment(config, environ)
