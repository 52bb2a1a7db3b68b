"""Login status and the external CLI login flow.

The session marker is just a directory under the home folder; its presence
means "logged in" for UI purposes and nothing more.
"""

from __future__ import annotations

from pathlib import Path

from .config import get_settings
from .errors import AuthError, ConfigError
from .logger import get_logger
from .system import SystemOps

logger = get_logger("auth")


def session_path(sys: SystemOps) -> Path:
    home = sys.home_dir()
    if home is None:
        raise ConfigError("Cannot find home directory")
    return home / get_settings().session_dir_name


async def is_authenticated(sys: SystemOps) -> bool:
    return await sys.exists(session_path(sys))


async def login(sys: SystemOps) -> str:
    """Run the external login command; success is its exit status alone."""
    settings = get_settings()
    logger.info("Starting login: %s %s", settings.login_command, " ".join(settings.login_args))
    output = await sys.run_command(settings.login_command, settings.login_args)

    if output.success:
        logger.info("Login succeeded")
        return "Login successful!"

    logger.warning("Login failed")
    raise AuthError(f"Login failed: {output.stderr_text}")


async def logout(sys: SystemOps) -> None:
    path = session_path(sys)
    if await sys.exists(path):
        await sys.remove_dir_all(path)
        logger.info("Session removed")
