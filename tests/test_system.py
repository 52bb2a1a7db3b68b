from __future__ import annotations

import sys
from pathlib import Path

import pytest

from claude_desktop.core.errors import IoError, NotFoundError
from claude_desktop.core.system import RealSystemOps


@pytest.mark.asyncio
async def test_write_creates_parent_dirs(tmp_path: Path) -> None:
    ops = RealSystemOps()
    target = tmp_path / "a" / "b" / "config.json"
    await ops.write(target, '{"x": 1}')
    assert target.read_text(encoding="utf-8") == '{"x": 1}'
    assert await ops.read_to_string(target) == '{"x": 1}'


@pytest.mark.asyncio
async def test_read_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        await RealSystemOps().read_to_string(tmp_path / "nope.txt")
    assert isinstance(excinfo.value, IoError)
    assert isinstance(excinfo.value.os_error, FileNotFoundError)


@pytest.mark.asyncio
async def test_read_invalid_utf8_is_io_error(tmp_path: Path) -> None:
    target = tmp_path / "conversations.json"
    target.write_bytes(b'[{"id": "\xff"}]')
    with pytest.raises(IoError) as excinfo:
        await RealSystemOps().read_to_string(target)
    assert not isinstance(excinfo.value, NotFoundError)
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_exists_and_remove(tmp_path: Path) -> None:
    ops = RealSystemOps()
    nested = tmp_path / "session" / "inner"
    await ops.create_dir_all(nested)
    (nested / "token").write_text("t", encoding="utf-8")
    assert await ops.exists(nested / "token")

    await ops.remove_file(nested / "token")
    assert not await ops.exists(nested / "token")

    await ops.remove_dir_all(tmp_path / "session")
    assert not await ops.exists(tmp_path / "session")


@pytest.mark.asyncio
async def test_remove_missing_file_is_error(tmp_path: Path) -> None:
    with pytest.raises(IoError):
        await RealSystemOps().remove_file(tmp_path / "missing")


def test_config_dir_honours_xdg(monkeypatch, tmp_path: Path) -> None:
    if not sys.platform.startswith("linux"):
        pytest.skip("XDG lookup is Linux only")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert RealSystemOps().config_dir() == tmp_path
    monkeypatch.delenv("XDG_CONFIG_HOME")
    assert RealSystemOps().config_dir() == Path.home() / ".config"


@pytest.mark.asyncio
async def test_run_command_captures_output() -> None:
    ops = RealSystemOps()
    ok = await ops.run_command(sys.executable, ["-c", "print('hi')"])
    assert ok.success is True
    assert ok.stdout_text.strip() == "hi"

    failed = await ops.run_command(
        sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
    )
    assert failed.success is False
    assert failed.stderr == b"boom"


@pytest.mark.asyncio
async def test_run_missing_executable() -> None:
    with pytest.raises(IoError):
        await RealSystemOps().run_command("definitely-not-a-real-binary-xyz", [])
