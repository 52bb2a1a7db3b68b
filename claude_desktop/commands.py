"""Commands invoked by the desktop shell (web view, tray, CLI).

Each command is an independent coroutine taking the shared :class:`AppState`.
:func:`invoke` runs one by name and turns failures into an error payload the
UI can display.
"""

from __future__ import annotations

import platform
import sys
from typing import Any, Awaitable, Callable, Dict

from pydantic import ValidationError

from claude_desktop import __version__
from claude_desktop.core import auth, mcp, voice
from claude_desktop.core.config import get_settings
from claude_desktop.core.errors import AppError, ConfigError, ParseError, UnknownError, error_response
from claude_desktop.core.logger import get_logger
from claude_desktop.core.state import AppState
from claude_desktop.core.system import SystemOps
from claude_desktop.core.trace import trace_scope

logger = get_logger("commands")


def create_state(ops: SystemOps | None = None) -> AppState:
    """Build the process-wide state; production I/O unless ``ops`` is given."""
    if ops is None:
        from claude_desktop.core.system import RealSystemOps

        ops = RealSystemOps()
    return AppState(ops)


# Authentication

async def check_auth(state: AppState) -> bool:
    return await auth.is_authenticated(state.sys)


async def login(state: AppState) -> str:
    session = auth.session_path(state.sys)
    message = await auth.login(state.sys)
    await state.set_session(str(session))
    return message


async def logout(state: AppState) -> None:
    await auth.logout(state.sys)
    await state.set_session(None)


# MCP servers

async def get_mcp_servers(state: AppState) -> list[str]:
    return await state.server_names()


async def reload_mcp_servers(state: AppState) -> list[str]:
    servers = await mcp.refresh_servers(state)
    return [s.name for s in servers]


async def start_mcp_server(state: AppState, name: str) -> None:
    await mcp.start_server(state, name)


async def stop_mcp_server(state: AppState, name: str) -> None:
    await mcp.stop_server(state, name)


async def load_mcp_config(state: AppState) -> str:
    return await mcp.load_config(state.sys)


async def save_mcp_config(state: AppState, config: str) -> None:
    await mcp.save_config(state.sys, config)


# App info

async def get_app_version(state: AppState) -> str:
    return __version__


async def get_system_info(state: AppState) -> str:
    return f"OS: {platform.system().lower()}, Arch: {platform.machine()}"


async def open_config_dir(state: AppState) -> None:
    config_dir = state.sys.config_dir()
    if config_dir is None:
        raise ConfigError("Cannot find config directory")
    settings = get_settings()
    config_dir = config_dir / settings.app_namespace

    if not await state.sys.exists(config_dir):
        await state.sys.create_dir_all(config_dir)

    if sys.platform.startswith("linux"):
        await state.sys.run_command(settings.open_command, [str(config_dir)])


# Voice

async def save_conversation(state: AppState, entry: voice.ConversationEntry | dict[str, Any]) -> None:
    try:
        if not isinstance(entry, voice.ConversationEntry):
            entry = voice.ConversationEntry.model_validate(entry)
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc
    await voice.save_conversation(state.sys, entry)


async def load_conversations(state: AppState) -> list[voice.ConversationEntry]:
    return await voice.load_conversations(state.sys)


async def clear_conversations(state: AppState) -> None:
    await voice.clear_conversations(state.sys)


async def get_voice_settings(state: AppState) -> voice.VoiceSettings:
    return await voice.load_voice_settings(state.sys)


async def save_voice_settings(state: AppState, settings: voice.VoiceSettings | dict[str, Any]) -> None:
    try:
        if not isinstance(settings, voice.VoiceSettings):
            settings = voice.VoiceSettings.model_validate(settings)
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc
    await voice.save_voice_settings(state.sys, settings)


Command = Callable[..., Awaitable[Any]]

COMMANDS: Dict[str, Command] = {
    "check_auth": check_auth,
    "login": login,
    "logout": logout,
    "get_mcp_servers": get_mcp_servers,
    "reload_mcp_servers": reload_mcp_servers,
    "start_mcp_server": start_mcp_server,
    "stop_mcp_server": stop_mcp_server,
    "load_mcp_config": load_mcp_config,
    "save_mcp_config": save_mcp_config,
    "get_app_version": get_app_version,
    "get_system_info": get_system_info,
    "open_config_dir": open_config_dir,
    "save_conversation": save_conversation,
    "load_conversations": load_conversations,
    "clear_conversations": clear_conversations,
    "get_voice_settings": get_voice_settings,
    "save_voice_settings": save_voice_settings,
}


def _to_payload(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if isinstance(value, list):
        return [_to_payload(v) for v in value]
    return value


async def invoke(state: AppState, command_name: str, **kwargs: Any) -> Dict[str, Any]:
    """Run command ``command_name`` and return ``{"result": ...}`` or an error payload."""
    with trace_scope() as tid:
        command = COMMANDS.get(command_name)
        if command is None:
            logger.warning("Unknown command: %s", command_name)
            return error_response("unknown_command", f"Unknown command: {command_name}", trace_id=tid)
        try:
            result = await command(state, **kwargs)
        except AppError as exc:
            logger.error("Command %s failed: %s", command_name, exc)
            return error_response(exc.code, str(exc), trace_id=tid)
        except Exception as exc:
            logger.exception("Command %s crashed", command_name)
            err = UnknownError(str(exc))
            return error_response(err.code, str(err), trace_id=tid)
        logger.debug("Command %s done", command_name)
        return {"result": _to_payload(result), "trace_id": tid}
