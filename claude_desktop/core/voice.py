"""Conversation history and voice settings storage.

History is bounded: every save keeps only the newest ``history_limit``
entries. The read-modify-write is not locked, so two concurrent saves can
lose one of the updates (last write wins).
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .config import get_settings
from .errors import ConfigError, ParseError
from .logger import get_logger
from .system import SystemOps

logger = get_logger("voice")


class ConversationEntry(BaseModel):
    """One voice exchange; entries are appended and never edited."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: str
    timestamp: int
    user_input: str
    assistant_response: str
    voice_used: bool
    played_back: bool


class VoiceSettings(BaseModel):
    model_config = ConfigDict(strict=True)

    input_language: str = "cs-CZ"
    output_voice: str = "default"
    output_speed: float = 1.0
    auto_play: bool = False
    history_limit: int = Field(default=100, ge=0)


_ENTRIES = TypeAdapter(list[ConversationEntry])


async def voice_dir(sys: SystemOps) -> Path:
    """Directory holding voice data, created when missing."""
    config_dir = sys.config_dir()
    if config_dir is None:
        raise ConfigError("Cannot find config directory")

    settings = get_settings()
    path = config_dir / settings.app_namespace / settings.voice_dir_name
    if not await sys.exists(path):
        await sys.create_dir_all(path)
    return path


async def conversations_path(sys: SystemOps) -> Path:
    return await voice_dir(sys) / get_settings().conversations_file


async def settings_path(sys: SystemOps) -> Path:
    return await voice_dir(sys) / get_settings().voice_settings_file


def retain_recent(entries: list[ConversationEntry], limit: int) -> list[ConversationEntry]:
    """Keep the ``limit`` most recently appended entries, in append order."""
    if len(entries) <= limit:
        return entries
    return entries[len(entries) - limit:]


async def load_conversations(sys: SystemOps) -> list[ConversationEntry]:
    path = await conversations_path(sys)
    if not await sys.exists(path):
        return []

    content = await sys.read_to_string(path)
    try:
        return _ENTRIES.validate_json(content)
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc


async def save_conversation(sys: SystemOps, entry: ConversationEntry) -> None:
    conversations = await load_conversations(sys)
    conversations.append(entry)

    settings = await load_voice_settings(sys)
    conversations = retain_recent(conversations, settings.history_limit)

    path = await conversations_path(sys)
    payload = _ENTRIES.dump_json(conversations, indent=2).decode("utf-8")
    await sys.write(path, payload)

    logger.info("Saved conversation entry %s (%d stored)", entry.id, len(conversations))


async def clear_conversations(sys: SystemOps) -> None:
    path = await conversations_path(sys)
    if await sys.exists(path):
        await sys.remove_file(path)
    logger.info("Cleared conversation history")


async def load_voice_settings(sys: SystemOps) -> VoiceSettings:
    path = await settings_path(sys)
    if not await sys.exists(path):
        return VoiceSettings()

    content = await sys.read_to_string(path)
    try:
        document = json.loads(content)
    except ValueError as exc:
        raise ParseError(str(exc)) from exc
    if not isinstance(document, dict):
        raise ParseError("Voice settings must be a JSON object")
    # A stored file carries every field; defaults only apply when there is no file.
    missing = sorted(set(VoiceSettings.model_fields) - set(document))
    if missing:
        raise ParseError(f"Voice settings missing fields: {', '.join(missing)}")

    try:
        return VoiceSettings.model_validate_json(content)
    except ValidationError as exc:
        raise ParseError(str(exc)) from exc


async def save_voice_settings(sys: SystemOps, settings: VoiceSettings) -> None:
    path = await settings_path(sys)
    await sys.write(path, settings.model_dump_json(indent=2))
    logger.info("Saved voice settings")
