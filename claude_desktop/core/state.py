"""Process-wide application state shared by the host commands."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, Iterable

from .system import SystemOps

if TYPE_CHECKING:
    from .mcp import McpServer


class ReadWriteLock:
    """Many concurrent readers or one exclusive writer.

    Waiting writers block new readers, so a steady stream of reads cannot
    starve a write.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writing(self) -> bool:
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(lambda: not self._writer and self._waiting_writers == 0)
            self._readers += 1
        try:
            yield
        finally:
            async with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._waiting_writers += 1
            try:
                await self._cond.wait_for(lambda: not self._writer and self._readers == 0)
            finally:
                self._waiting_writers -= 1
                if not self._waiting_writers:
                    self._cond.notify_all()
            self._writer = True
        try:
            yield
        finally:
            async with self._cond:
                self._writer = False
                self._cond.notify_all()


class AppState:
    """Session token, MCP server registry and the active :class:`SystemOps`.

    Build exactly one per process and pass it to every command. Fields are only
    reachable through the accessors below; server descriptors are copied on
    the way in and out.
    """

    def __init__(self, sys: SystemOps) -> None:
        self._sys = sys
        self._lock = ReadWriteLock()
        self._session: str | None = None
        self._mcp_servers: list[McpServer] = []

    @property
    def sys(self) -> SystemOps:
        return self._sys

    async def get_session(self) -> str | None:
        async with self._lock.read():
            return self._session

    async def set_session(self, session: str | None) -> None:
        async with self._lock.write():
            self._session = session

    async def list_servers(self) -> list[McpServer]:
        async with self._lock.read():
            return [s.copy() for s in self._mcp_servers]

    async def server_names(self) -> list[str]:
        async with self._lock.read():
            return [s.name for s in self._mcp_servers]

    async def get_server(self, name: str) -> McpServer | None:
        async with self._lock.read():
            for server in self._mcp_servers:
                if server.name == name:
                    return server.copy()
        return None

    async def replace_servers(self, servers: Iterable[McpServer]) -> None:
        fresh = [s.copy() for s in servers]
        async with self._lock.write():
            self._mcp_servers = fresh

    async def set_server_process(self, name: str, pid: int | None) -> bool:
        """Record the runtime pid of a registered server; False if unknown."""
        async with self._lock.write():
            for server in self._mcp_servers:
                if server.name == name:
                    server.process = pid
                    return True
        return False
