"""
Settings
========

Runtime settings read from the environment, overridable from the CLI.

Environment variables:
    AF_PRODUCE_DELAY: Seconds the producer pauses after each push (default: 0)
    AF_IDLE_WAIT: Max seconds the consumer waits after an empty drain (default: 1)
    AF_LOG_LEVEL: debug, info, warning, error or critical (default: info)
    AF_ITEMS_FILE: JSON file with the items to produce (default: built-in batch)
"""

import json
import os
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ItemsFileError
from .models import PriorityItem
from .producer import days_from_now

_DEFAULT_PRODUCE_DELAY = 0.0
_DEFAULT_IDLE_WAIT = 1.0
_DEFAULT_LOG_LEVEL = "info"

# Longest accepted pause or idle wait (seconds)
MAX_WAIT = 3600.0

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


class Settings(BaseModel):
    """Validated runtime settings."""
    produce_delay: float = Field(
        default=_DEFAULT_PRODUCE_DELAY, ge=0, le=MAX_WAIT, allow_inf_nan=False
    )
    idle_wait: float = Field(
        default=_DEFAULT_IDLE_WAIT, gt=0, le=MAX_WAIT, allow_inf_nan=False
    )
    log_level: str = _DEFAULT_LOG_LEVEL
    items_file: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return value


def load_settings(**overrides: Any) -> Settings:
    """Build Settings from AF_* environment variables.

    Keyword overrides (e.g. parsed CLI flags) win over the environment;
    overrides set to None are ignored.

    Raises:
        ValueError: If a value is invalid.
    """
    values = {
        "produce_delay": os.getenv("AF_PRODUCE_DELAY", _DEFAULT_PRODUCE_DELAY),
        "idle_wait": os.getenv("AF_IDLE_WAIT", _DEFAULT_IDLE_WAIT),
        "log_level": os.getenv("AF_LOG_LEVEL", _DEFAULT_LOG_LEVEL),
        "items_file": os.getenv("AF_ITEMS_FILE") or None,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)


def load_items(path: str) -> List[PriorityItem]:
    """Load items from a JSON file.

    The file holds a list of objects with ``description``, ``priority`` and
    either ``due`` (ISO-8601) or ``days_from_now``.

    Raises:
        ItemsFileError: If the file is unreadable or an entry is malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ItemsFileError(f"Cannot read items file {path}: {e}") from e

    if not isinstance(raw, list):
        raise ItemsFileError(f"Items file {path} must contain a JSON list")

    items: List[PriorityItem] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ItemsFileError(f"Entry {i} in {path} is not an object")
        entry = dict(entry)
        if "days_from_now" in entry:
            try:
                entry["due"] = days_from_now(float(entry.pop("days_from_now")))
            except (TypeError, ValueError, OverflowError) as e:
                raise ItemsFileError(f"Entry {i} in {path}: bad days_from_now: {e}") from e
        try:
            items.append(PriorityItem.deserialize(entry))
        except ValidationError as e:
            raise ItemsFileError(f"Entry {i} in {path}: {e}") from e
    return items
