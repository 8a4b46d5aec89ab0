"""Environment settings and file-backed configuration.

Settings come from environment variables, optionally seeded from a ``.env``
file at the repo root:

    NDF_PARSER_BINARY      Path to the external ndf-parser binary
    WARNO_SPEED_MODIFIERS  Speed-modifier JSON file
    WARNO_UNIT_CARDS       Unit-card JSON table
    WARNO_LOG_LEVEL        Logging level (default: INFO)
    WARNO_LOG_DIR          Directory for the rotating log file (optional)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import orjson
from dotenv import load_dotenv
from pydantic import TypeAdapter, ValidationError

from warno_descriptor_extractor.inputs import SpeedModifier

from .paths import get_repo_root

logger = logging.getLogger(__name__)

_SPEED_MODIFIERS_ADAPTER = TypeAdapter(list[SpeedModifier])


class ConfigError(Exception):
    """A configuration file is missing or does not match its schema."""


@dataclass(frozen=True)
class Settings:
    parser_binary: Path | None = None
    speed_modifiers_path: Path | None = None
    unit_cards_path: Path | None = None
    log_level: str = "INFO"
    log_dir: Path | None = None


def _env_path(name: str) -> Path | None:
    raw = os.environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else None


def load_env(env_file: Path | None = None) -> bool:
    """Load ``.env`` into the process environment without overriding it."""
    env_file = env_file or get_repo_root(Path(__file__)) / ".env"
    loaded = load_dotenv(env_file)
    if loaded:
        logger.debug(f"Loaded environment from {env_file}")
    return loaded


def load_settings() -> Settings:
    return Settings(
        parser_binary=_env_path("NDF_PARSER_BINARY"),
        speed_modifiers_path=_env_path("WARNO_SPEED_MODIFIERS"),
        unit_cards_path=_env_path("WARNO_UNIT_CARDS"),
        log_level=os.environ.get("WARNO_LOG_LEVEL", "INFO").upper(),
        log_dir=_env_path("WARNO_LOG_DIR"),
    )


def load_speed_modifiers(path: str | Path | None) -> list[SpeedModifier]:
    """Load and validate the terrain speed-modifier list.

    Returns an empty list when no path is configured.

    Raises:
        ConfigError: If the file is missing, not JSON, or fails validation
    """
    if path is None:
        logger.info("No speed modifiers configured; terrain speeds will be empty")
        return []

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Speed modifier file not found: {path}")

    try:
        modifiers = _SPEED_MODIFIERS_ADAPTER.validate_python(orjson.loads(path.read_bytes()))
    except orjson.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Invalid speed modifiers in {path}: {e}") from e

    logger.info(f"Loaded {len(modifiers)} speed modifiers from {path.name}")
    return modifiers
