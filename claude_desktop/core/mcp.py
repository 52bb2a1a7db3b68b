"""MCP (Model Context Protocol) server registry and its JSON configuration.

The configuration file is shared with the official desktop app::

    {"mcpServers": {"<name>": {"command": "npx", "args": ["-y", "..."]}}}

The file on disk is authoritative; :func:`refresh_servers` rebuilds the
in-memory registry from it.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .config import get_settings
from .errors import ConfigError, ParseError
from .logger import get_logger, perf_timer
from .state import AppState
from .system import SystemOps

logger = get_logger("mcp")

__all__ = [
    "DEFAULT_CONFIG",
    "McpServer",
    "ServerType",
    "config_path",
    "expand_path",
    "load_config",
    "parse_config",
    "refresh_servers",
    "save_config",
    "start_server",
    "stop_server",
]


DEFAULT_CONFIG = """{
  "mcpServers": {
    "filesystem": {
      "command": "npx",
      "args": [
        "-y",
        "@modelcontextprotocol/server-filesystem",
        "/home/$USER/Documents"
      ]
    }
  }
}"""


class ServerType(str, Enum):
    """Runtime a server command needs."""

    NODEJS = "nodejs"
    PYTHON = "python"
    BINARY = "binary"

    @classmethod
    def detect(cls, command: str) -> "ServerType":
        if command in ("npx", "node"):
            return cls.NODEJS
        if command in ("python", "python3"):
            return cls.PYTHON
        return cls.BINARY


@dataclass(slots=True)
class McpServer:
    """One configured server; ``process`` is runtime-only and never persisted."""

    name: str
    command: str = ""
    args: list[str] = field(default_factory=list)
    process: int | None = None

    @property
    def server_type(self) -> ServerType:
        return ServerType.detect(self.command)

    def copy(self) -> "McpServer":
        return McpServer(name=self.name, command=self.command, args=list(self.args), process=self.process)

    def to_payload(self) -> dict[str, Any]:
        return {"command": self.command, "args": list(self.args)}

    @classmethod
    def from_payload(cls, name: str, payload: dict[str, Any]) -> "McpServer":
        command = payload.get("command")
        raw_args = payload.get("args")
        args = [a for a in raw_args if isinstance(a, str)] if isinstance(raw_args, list) else []
        return cls(name=name, command=command if isinstance(command, str) else "", args=args)


def config_path(sys: SystemOps) -> Path:
    config_dir = sys.config_dir()
    if config_dir is None:
        raise ConfigError("Cannot find config directory")
    settings = get_settings()
    return config_dir / settings.app_namespace / settings.mcp_config_file


async def load_config(sys: SystemOps) -> str:
    """Return the raw config text, or the built-in default when no file exists.

    The default is not written to disk.
    """
    with perf_timer("load_mcp_config", get_settings().perf_threshold_ms):
        path = config_path(sys)
        if not await sys.exists(path):
            logger.debug("No MCP config at %s, using default", path)
            return DEFAULT_CONFIG
        return await sys.read_to_string(path)


async def save_config(sys: SystemOps, config: str) -> None:
    """Write ``config`` verbatim; it is not validated here."""
    with perf_timer("save_mcp_config", get_settings().perf_threshold_ms):
        path = config_path(sys)
        await sys.write(path, config)
    logger.info("Saved MCP config to %s", path)


def parse_config(config_json: str) -> list[McpServer]:
    """Parse the document into server descriptors.

    Output order is not guaranteed to follow document order.
    """
    try:
        config = json.loads(config_json)
    except json.JSONDecodeError as exc:
        raise ParseError(str(exc)) from exc

    if not isinstance(config, dict):
        return []
    mcp_servers = config.get("mcpServers")
    if not isinstance(mcp_servers, dict):
        return []

    return [
        McpServer.from_payload(name, server_config)
        for name, server_config in mcp_servers.items()
        if isinstance(server_config, dict)
    ]


async def refresh_servers(state: AppState) -> list[McpServer]:
    """Load and parse the config, then replace the registry wholesale.

    A failure leaves the registry as it was.
    """
    servers = parse_config(await load_config(state.sys))
    await state.replace_servers(servers)
    logger.info("Loaded %d MCP server(s)", len(servers))
    return servers


def expand_path(value: str, *, user: str | None = None, home: str | Path | None = None) -> str:
    """Substitute ``$USER`` and a leading ``~``; never applied implicitly."""
    if user is None:
        user = os.environ.get("USER", "")
    value = value.replace("$USER", user)
    if value.startswith("~"):
        if home is None:
            home = Path.home()
        value = str(home) + value[1:]
    return value


async def start_server(state: AppState, name: str) -> None:
    # Placeholder: process supervision is not implemented.
    if await state.get_server(name) is None:
        logger.warning("Start requested for unknown MCP server: %s", name)
        return
    logger.info("Starting MCP server: %s", name)


async def stop_server(state: AppState, name: str) -> None:
    # Placeholder: process supervision is not implemented.
    if await state.get_server(name) is None:
        logger.warning("Stop requested for unknown MCP server: %s", name)
        return
    logger.info("Stopping MCP server: %s", name)
