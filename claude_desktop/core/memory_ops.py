"""In-memory :class:`SystemOps` for deterministic tests."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Sequence

from .errors import NotFoundError
from .system import CommandOutput, SystemOps

MOCK_HOME = Path("/home/mockuser")
MOCK_CONFIG = MOCK_HOME / ".config"


class InMemorySystemOps(SystemOps):
    """Files live in a dict, commands answer from a table of canned outputs.

    Directories are tracked only when created explicitly; a path also exists
    when some stored file lives underneath it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.files: dict[Path, str] = {}
        self.dirs: set[Path] = set()
        # command -> (success, stdout, stderr)
        self.command_outputs: dict[str, tuple[bool, str, str]] = {}
        self.commands: list[tuple[str, list[str]]] = []

    def with_file(self, path: str | Path, content: str) -> "InMemorySystemOps":
        with self._lock:
            self.files[Path(path)] = content
        return self

    def with_command_output(self, command: str, success: bool, stdout: str = "", stderr: str = "") -> "InMemorySystemOps":
        with self._lock:
            self.command_outputs[command] = (success, stdout, stderr)
        return self

    async def read_to_string(self, path: Path) -> str:
        with self._lock:
            try:
                return self.files[Path(path)]
            except KeyError:
                raise NotFoundError(f"File not found: {path}") from None

    async def write(self, path: Path, content: str) -> None:
        with self._lock:
            self.files[Path(path)] = content

    async def create_dir_all(self, path: Path) -> None:
        with self._lock:
            self.dirs.add(Path(path))

    async def exists(self, path: Path) -> bool:
        path = Path(path)
        with self._lock:
            if path in self.files or path in self.dirs:
                return True
            return any(stored.is_relative_to(path) for stored in self.files)

    async def remove_file(self, path: Path) -> None:
        with self._lock:
            self.files.pop(Path(path), None)

    async def remove_dir_all(self, path: Path) -> None:
        root = Path(path)
        with self._lock:
            self.files = {p: c for p, c in self.files.items() if not p.is_relative_to(root)}
            self.dirs = {d for d in self.dirs if not d.is_relative_to(root)}

    def home_dir(self) -> Path | None:
        return MOCK_HOME

    def config_dir(self) -> Path | None:
        return MOCK_CONFIG

    async def run_command(self, command: str, args: Sequence[str]) -> CommandOutput:
        with self._lock:
            self.commands.append((command, list(args)))
            canned = self.command_outputs.get(command)
        if canned is None:
            return CommandOutput(success=True)
        success, stdout, stderr = canned
        return CommandOutput(success=success, stdout=stdout.encode("utf-8"), stderr=stderr.encode("utf-8"))
