"""System operations (filesystem, processes, directories) behind one interface.

Every component that touches the operating system goes through
:class:`SystemOps`, so tests can swap in
:class:`claude_desktop.core.memory_ops.InMemorySystemOps`.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from .errors import IoError, NotFoundError


@dataclass(frozen=True, slots=True)
class CommandOutput:
    """Result of a finished external process."""

    success: bool
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def stdout_text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    @property
    def stderr_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


def _wrap(exc: OSError) -> IoError:
    if isinstance(exc, FileNotFoundError):
        return NotFoundError.from_os_error(exc)
    return IoError.from_os_error(exc)


class SystemOps(ABC):
    """Abstract filesystem, directory and process primitives."""

    @abstractmethod
    async def read_to_string(self, path: Path) -> str:
        """Read a UTF-8 file; raises :class:`NotFoundError` when missing."""

    @abstractmethod
    async def write(self, path: Path, content: str) -> None:
        """Write ``content`` to ``path``, replacing previous content."""

    @abstractmethod
    async def create_dir_all(self, path: Path) -> None:
        ...

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        """Never raises; a failed probe counts as missing."""

    @abstractmethod
    async def remove_file(self, path: Path) -> None:
        ...

    @abstractmethod
    async def remove_dir_all(self, path: Path) -> None:
        ...

    @abstractmethod
    def home_dir(self) -> Path | None:
        ...

    @abstractmethod
    def config_dir(self) -> Path | None:
        ...

    @abstractmethod
    async def run_command(self, command: str, args: Sequence[str]) -> CommandOutput:
        """Run ``command`` to completion and capture its output."""


class RealSystemOps(SystemOps):
    """Implementation backed by the real filesystem and processes."""

    async def read_to_string(self, path: Path) -> str:
        try:
            return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except OSError as exc:
            raise _wrap(exc) from exc
        except UnicodeDecodeError as exc:
            raise IoError(f"{path}: {exc}") from exc

    async def write(self, path: Path, content: str) -> None:
        path = Path(path)
        parent = path.parent
        if not await self.exists(parent):
            await self.create_dir_all(parent)
        try:
            await asyncio.to_thread(path.write_text, content, encoding="utf-8")
        except OSError as exc:
            raise _wrap(exc) from exc

    async def create_dir_all(self, path: Path) -> None:
        try:
            await asyncio.to_thread(Path(path).mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise _wrap(exc) from exc

    async def exists(self, path: Path) -> bool:
        try:
            return await asyncio.to_thread(Path(path).exists)
        except OSError:
            return False

    async def remove_file(self, path: Path) -> None:
        try:
            await asyncio.to_thread(Path(path).unlink)
        except OSError as exc:
            raise _wrap(exc) from exc

    async def remove_dir_all(self, path: Path) -> None:
        try:
            await asyncio.to_thread(shutil.rmtree, Path(path))
        except OSError as exc:
            raise _wrap(exc) from exc

    def home_dir(self) -> Path | None:
        try:
            return Path.home()
        except RuntimeError:
            return None

    def config_dir(self) -> Path | None:
        if sys.platform.startswith("win"):
            appdata = os.environ.get("APPDATA")
            return Path(appdata) if appdata else None
        home = self.home_dir()
        if sys.platform == "darwin":
            return home / "Library" / "Application Support" if home else None
        xdg = os.environ.get("XDG_CONFIG_HOME")
        if xdg and os.path.isabs(xdg):
            return Path(xdg)
        return home / ".config" if home else None

    async def run_command(self, command: str, args: Sequence[str]) -> CommandOutput:
        try:
            proc = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            raise _wrap(exc) from exc
        return CommandOutput(success=proc.returncode == 0, stdout=stdout or b"", stderr=stderr or b"")
