"""User preferences and logging setup for Cadence."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cadence.fileio import read_yaml, write_yaml_atomic
from cadence.habits import parse_positive_integer
from cadence.workspace import config_path

DEFAULT_POSTPONE_MINUTES = 15
DEFAULT_REMINDER_THROTTLE_MINUTES = 5

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Preferences:
    default_postpone_minutes: int = DEFAULT_POSTPONE_MINUTES
    reminder_throttle_minutes: int = DEFAULT_REMINDER_THROTTLE_MINUTES

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Preferences:
        """Non-positive or unparseable values fall back to the defaults."""
        if not d or not isinstance(d, dict):
            return cls()
        return cls(
            default_postpone_minutes=parse_positive_integer(
                d.get("default_postpone_minutes"), DEFAULT_POSTPONE_MINUTES
            ),
            reminder_throttle_minutes=parse_positive_integer(
                d.get("reminder_throttle_minutes"), DEFAULT_REMINDER_THROTTLE_MINUTES
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_postpone_minutes": self.default_postpone_minutes,
            "reminder_throttle_minutes": self.reminder_throttle_minutes,
        }


def load_preferences(root: Path | None = None) -> Preferences:
    """Load config.yaml into Preferences (defaults if missing)."""
    return Preferences.from_dict(read_yaml(config_path(root)))


def save_preferences(prefs: Preferences, root: Path | None = None) -> None:
    write_yaml_atomic(config_path(root), prefs.to_dict())


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from *level* or CADENCE_LOG_LEVEL (default INFO)."""
    name = (level or os.environ.get("CADENCE_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
