"""Per-command trace ids attached to log records and error payloads."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator


_trace_id: ContextVar[str | None] = ContextVar("claude_desktop_trace_id", default=None)


def new_trace_id() -> str:
    return uuid.uuid4().hex[:12]


def get_trace_id() -> str | None:
    return _trace_id.get()


@contextmanager
def trace_scope(tid: str | None = None) -> Iterator[str]:
    """Bind a trace id for the duration of one host command."""
    tid = tid or new_trace_id()
    token = _trace_id.set(tid)
    try:
        yield tid
    finally:
        _trace_id.reset(token)
