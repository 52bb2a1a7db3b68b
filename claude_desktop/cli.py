from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, Optional

import typer

from claude_desktop import commands
from claude_desktop.core.config import get_settings
from claude_desktop.core.logger import init_logging, log_system_info
from claude_desktop.core.state import AppState

cli = typer.Typer(name="claude-desktop", help="Claude Desktop native helpers")
auth_cli = typer.Typer(help="CLI login session")
mcp_cli = typer.Typer(help="MCP server configuration")
voice_cli = typer.Typer(help="Voice history and settings")
config_cli = typer.Typer(help="Application settings")

cli.add_typer(auth_cli, name="auth")
cli.add_typer(mcp_cli, name="mcp")
cli.add_typer(voice_cli, name="voice")
cli.add_typer(config_cli, name="config")

# Swapped in tests to run against an in-memory SystemOps.
state_factory: Callable[[], AppState] = commands.create_state


@cli.callback()
def _main(log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING...")) -> None:
    init_logging(log_level)


def _run(command_name: str, **kwargs: Any) -> Any:
    async def _invoke() -> dict[str, Any]:
        return await commands.invoke(state_factory(), command_name, **kwargs)

    response = asyncio.run(_invoke())
    if "error" in response:
        typer.echo(response["error"]["message"], err=True)
        raise typer.Exit(code=1)
    return response["result"]


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(value, ensure_ascii=False, indent=2))


@cli.command()
def info() -> None:
    """Version and platform."""
    log_system_info()
    typer.echo(f"Claude Desktop {_run('get_app_version')}")
    typer.echo(_run("get_system_info"))


@auth_cli.command("status")
def auth_status() -> None:
    typer.echo("logged in" if _run("check_auth") else "logged out")


@auth_cli.command("login")
def auth_login() -> None:
    typer.echo(_run("login"))


@auth_cli.command("logout")
def auth_logout() -> None:
    _run("logout")
    typer.echo("logged out")


@mcp_cli.command("config")
def mcp_config() -> None:
    """Print the MCP config document (default one when none is saved)."""
    typer.echo(_run("load_mcp_config"))


@mcp_cli.command("servers")
def mcp_servers() -> None:
    for name in _run("reload_mcp_servers"):
        typer.echo(name)


@mcp_cli.command("save")
def mcp_save(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file to store")) -> None:
    text = path.read_text(encoding="utf-8")
    try:
        json.loads(text)
    except ValueError as exc:
        typer.echo(f"Invalid JSON: {exc}", err=True)
        raise typer.Exit(code=1)
    _run("save_mcp_config", config=text)
    typer.echo("saved")


@mcp_cli.command("start")
def mcp_start(name: str) -> None:
    _run("start_mcp_server", name=name)


@mcp_cli.command("stop")
def mcp_stop(name: str) -> None:
    _run("stop_mcp_server", name=name)


@mcp_cli.command("open-dir")
def mcp_open_dir() -> None:
    _run("open_config_dir")


@voice_cli.command("history")
def voice_history(limit: int = typer.Option(0, "--limit", help="Only the last N entries (0 = all)")) -> None:
    entries = _run("load_conversations")
    if limit > 0:
        entries = entries[-limit:]
    _echo_json(entries)


@voice_cli.command("clear")
def voice_clear() -> None:
    _run("clear_conversations")
    typer.echo("cleared")


@voice_cli.command("settings")
def voice_settings() -> None:
    _echo_json(_run("get_voice_settings"))


@voice_cli.command("set")
def voice_set(
    input_language: Optional[str] = typer.Option(None, "--language"),
    output_voice: Optional[str] = typer.Option(None, "--voice"),
    output_speed: Optional[float] = typer.Option(None, "--speed"),
    auto_play: Optional[bool] = typer.Option(None, "--auto-play/--no-auto-play"),
    history_limit: Optional[int] = typer.Option(None, "--history-limit", min=0),
) -> None:
    """Update selected voice settings, keeping the others."""
    current = _run("get_voice_settings")
    updates = {
        "input_language": input_language,
        "output_voice": output_voice,
        "output_speed": output_speed,
        "auto_play": auto_play,
        "history_limit": history_limit,
    }
    current.update({k: v for k, v in updates.items() if v is not None})
    _run("save_voice_settings", settings=current)
    _echo_json(current)


@config_cli.command("print")
def config_print() -> None:
    _echo_json(get_settings().model_dump())


if __name__ == "__main__":  # pragma: no cover
    cli()
