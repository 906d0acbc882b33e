"""Calculation debug log."""
from __future__ import annotations

import logging
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

from heloc.presets import DEBUG_ENV_VAR, DEBUG_LOG_MAX_ENTRIES

logger = logging.getLogger("heloc.debug")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class LogEntry:
    level: str
    category: str
    message: str
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class CalculationLog:
    """In-memory log the engines write to when one is passed as ``log=``.

    Entries beyond ``max_entries`` push out the oldest ones. Every record is
    also forwarded to the ``heloc.debug`` logger. A disabled log records
    nothing.
    """

    def __init__(self, enabled: bool = True, max_entries: int = DEBUG_LOG_MAX_ENTRIES) -> None:
        self.enabled = enabled
        self.entries: Deque[LogEntry] = deque(maxlen=max_entries)

    @classmethod
    def from_env(cls, environ=None) -> "CalculationLog":
        """Enabled when ``HELOC_DEBUG`` is set to 1/true/yes/on."""
        env = os.environ if environ is None else environ
        flag = str(env.get(DEBUG_ENV_VAR, "")).strip().lower()
        return cls(enabled=flag in ("1", "true", "yes", "on"))

    def log(self, level: str, category: str, message: str, data: Optional[Dict[str, Any]] = None) -> None:
        if not self.enabled:
            return
        if level not in _LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.entries.append(LogEntry(level=level, category=category, message=message, data=data))
        logger.log(_LEVELS[level], "[%s] %s", category, message, extra={"data": data})

    def filter(self, level: Optional[str] = None, category: Optional[str] = None) -> List[LogEntry]:
        return [
            e for e in self.entries
            if (level is None or e.level == level) and (category is None or e.category == category)
        ]

    def clear(self) -> None:
        self.entries.clear()

    def as_dict(self) -> List[dict]:
        """Return log entries as dictionaries for export or inspection."""
        return [
            {
                "level": e.level,
                "category": e.category,
                "message": e.message,
                "data": e.data,
                "timestamp": e.timestamp.isoformat(),
            }
            for e in self.entries
        ]
