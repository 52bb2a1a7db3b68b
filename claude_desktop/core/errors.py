"""Error kinds surfaced by the desktop core."""

from __future__ import annotations

from typing import Any, Dict


class AppError(Exception):
    """Base error; ``str(err)`` is the text shown to the user."""

    code = "unknown"
    label = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class IoError(AppError):
    """Filesystem or process failure, wrapping the underlying ``OSError``."""

    code = "io"
    label = "I/O error"

    def __init__(self, message: str, *, os_error: OSError | None = None) -> None:
        super().__init__(message)
        self.os_error = os_error

    @classmethod
    def from_os_error(cls, exc: OSError) -> "IoError":
        err = cls(str(exc), os_error=exc)
        err.__cause__ = exc
        return err


class NotFoundError(IoError):
    """Requested path does not exist."""

    code = "not_found"


class ConfigError(AppError):
    """A required directory or setting could not be resolved."""

    code = "config"
    label = "Configuration error"


class ParseError(AppError):
    """A persisted JSON document is malformed."""

    code = "parse"
    label = "JSON error"


class AuthError(AppError):
    """The external login flow reported failure."""

    code = "auth"
    label = "Authentication error"


class UnknownError(AppError):
    """Anything not otherwise classified."""

    code = "unknown"
    label = "Unknown error"


def error_response(code: str, message: str, *, details: Any | None = None, trace_id: str | None = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details is not None:
        payload["error"]["details"] = details
    if trace_id is not None:
        payload["error"]["trace_id"] = trace_id
    return payload
