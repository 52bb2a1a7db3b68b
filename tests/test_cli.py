from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from claude_desktop import cli as cli_module
from claude_desktop.core.memory_ops import InMemorySystemOps
from claude_desktop.core.state import AppState


runner = CliRunner()


@pytest.fixture
def mock(monkeypatch) -> InMemorySystemOps:
    ops = InMemorySystemOps()
    monkeypatch.setattr(cli_module, "state_factory", lambda: AppState(ops))
    return ops


def test_cli_help():
    result = runner.invoke(cli_module.cli, ["--help"])
    assert result.exit_code == 0
    assert "auth" in result.output and "mcp" in result.output and "voice" in result.output


def test_auth_status_and_login(mock):
    result = runner.invoke(cli_module.cli, ["auth", "status"])
    assert result.exit_code == 0
    assert "logged out" in result.output

    result = runner.invoke(cli_module.cli, ["auth", "login"])
    assert result.exit_code == 0
    assert "Login successful!" in result.output
    assert mock.commands == [("claude", ["auth", "login"])]


def test_auth_login_failure(mock):
    mock.with_command_output("claude", False, "", "Auth error")
    result = runner.invoke(cli_module.cli, ["auth", "login"])
    assert result.exit_code == 1
    assert "Auth error" in result.output


def test_mcp_config_prints_default(mock):
    result = runner.invoke(cli_module.cli, ["mcp", "config"])
    assert result.exit_code == 0
    assert '"filesystem"' in result.output


def test_mcp_save_and_servers(mock, tmp_path: Path):
    doc = tmp_path / "mcp.json"
    doc.write_text(json.dumps({"mcpServers": {"memory": {"command": "npx", "args": []}}}), encoding="utf-8")

    result = runner.invoke(cli_module.cli, ["mcp", "save", str(doc)])
    assert result.exit_code == 0

    result = runner.invoke(cli_module.cli, ["mcp", "servers"])
    assert result.exit_code == 0
    assert "memory" in result.output


def test_mcp_save_rejects_invalid_json(mock, tmp_path: Path):
    doc = tmp_path / "broken.json"
    doc.write_text("{", encoding="utf-8")
    result = runner.invoke(cli_module.cli, ["mcp", "save", str(doc)])
    assert result.exit_code == 1
    assert mock.files == {}


def test_voice_set_history_and_clear(mock):
    result = runner.invoke(cli_module.cli, ["voice", "set", "--history-limit", "3", "--language", "en-US"])
    assert result.exit_code == 0

    result = runner.invoke(cli_module.cli, ["voice", "settings"])
    assert result.exit_code == 0
    assert '"history_limit": 3' in result.output
    assert '"en-US"' in result.output

    result = runner.invoke(cli_module.cli, ["voice", "history"])
    assert result.exit_code == 0
    assert "[]" in result.output

    result = runner.invoke(cli_module.cli, ["voice", "clear"])
    assert result.exit_code == 0
    assert "cleared" in result.output


def test_info(mock):
    result = runner.invoke(cli_module.cli, ["info"])
    assert result.exit_code == 0
    assert "Claude Desktop" in result.output
