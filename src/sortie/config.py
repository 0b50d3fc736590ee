"""Configuration loading and management for sortie.

The organizer configuration maps each swipe direction to an action. It is
stored as JSON in the sortie home directory (``$SORTIE_HOME`` or
``~/.sortie``) and written atomically.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from sortie.errors import ConfigurationError, ErrorContext
from sortie.logging import get_logger
from sortie.models.action import (
    DeleteAction,
    MoveAction,
    SkipAction,
    SwipeAction,
    normalize_action_data,
)
from sortie.models.direction import Direction

logger = get_logger(__name__)

ORGANIZER_CONFIG_FILENAME = "organizer_config.json"


class SwipeConfig(BaseModel):
    """Mapping of swipe direction to action."""

    up: SwipeAction = Field(default_factory=SkipAction)
    down: SwipeAction = Field(default_factory=DeleteAction)
    left: SwipeAction = Field(default_factory=lambda: MoveAction(target="B-Roll"))
    right: SwipeAction = Field(default_factory=lambda: MoveAction(target="A-Roll"))

    @field_validator("up", "down", "left", "right", mode="before")
    @classmethod
    def _accept_legacy_actions(cls, value):
        return normalize_action_data(value)

    def action_for(self, direction: Direction) -> SwipeAction:
        """Get the action configured for ``direction``."""
        return getattr(self, Direction(direction).value)

    def with_action(self, direction: Direction, action: SwipeAction) -> "SwipeConfig":
        """Return a copy with ``direction`` remapped to ``action``."""
        return self.model_copy(update={Direction(direction).value: action})


class OrganizerConfig(BaseModel):
    """Persistent organizer settings."""

    swipe: SwipeConfig = Field(default_factory=SwipeConfig)


def get_app_dir() -> Path:
    """Get the sortie home directory.

    ``$SORTIE_HOME`` wins; otherwise ``~/.sortie``.
    """
    override = os.environ.get("SORTIE_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".sortie"


def get_organizer_config_path() -> Path:
    """Get the path of the organizer config file."""
    return get_app_dir() / ORGANIZER_CONFIG_FILENAME


def load_organizer_config(config_path: Path | None = None) -> OrganizerConfig:
    """Load organizer configuration from JSON.

    Args:
        config_path: Config file; defaults to the one in the sortie home

    Returns:
        The stored configuration, or defaults when the file does not exist

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    config_path = config_path or get_organizer_config_path()
    if not config_path.exists():
        logger.info("Organizer config not found, using defaults", extra={"path": str(config_path)})
        return OrganizerConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read config: {e}", context={"path": str(config_path)}
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Failed to parse config: {e}", context={"path": str(config_path)}
        ) from e

    try:
        config = OrganizerConfig(**data)
    except (PydanticValidationError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid organizer config: {e}", context={"path": str(config_path)}
        ) from e

    logger.debug("Loaded organizer config", extra={"path": str(config_path)})
    return config


def save_organizer_config(config: OrganizerConfig, config_path: Path | None = None) -> Path:
    """Save organizer configuration with atomic write.

    Args:
        config: Configuration to save
        config_path: Config file; defaults to the one in the sortie home

    Returns:
        Path to the saved config file

    Raises:
        ConfigurationError: If the file cannot be written
    """
    config_path = config_path or get_organizer_config_path()
    temp_path = config_path.with_suffix(".tmp")

    try:
        with ErrorContext(
            "save organizer config",
            rollback=lambda: temp_path.unlink(missing_ok=True),
            context={"path": str(config_path)},
        ):
            config_path.parent.mkdir(parents=True, exist_ok=True)
            # Atomic write: write to temp file, then rename
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2)
            temp_path.replace(config_path)
    except OSError as e:
        raise ConfigurationError(
            f"Failed to save config: {e}", context={"path": str(config_path)}
        ) from e

    logger.info("Saved organizer config", extra={"path": str(config_path)})
    return config_path


class ConfigProvider:
    """Supplies the direction-to-action mapping to a review session.

    The file is read again for every lookup, so a mapping saved while a
    session is running applies to the next decision.
    """

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path

    def load(self) -> OrganizerConfig:
        return load_organizer_config(self.config_path)

    def save(self, config: OrganizerConfig) -> Path:
        return save_organizer_config(config, self.config_path)

    def action_for(self, direction: Direction) -> SwipeAction:
        """Resolve the action for ``direction`` from the latest saved config."""
        return self.load().swipe.action_for(direction)
