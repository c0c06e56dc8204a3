# src/common/records.py

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Optional, Tuple

from src.common.attributes import Attribute


class Level(IntEnum):
    """Severity of a record. The member name is what lands in the payload."""

    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def parse(cls, text: Optional[str]) -> "Level":
        """
        Maps free-form level text to a Level.

        Matching is case-insensitive. Empty, missing, or unrecognized text
        falls back to INFO rather than failing the request.
        """
        if not text:
            return cls.INFO
        try:
            return cls[text.strip().upper()]
        except KeyError:
            return cls.INFO


@dataclass(frozen=True)
class LogRecord:
    """A single log call: created by the caller, never mutated afterwards."""

    level: Level
    message: str
    attributes: Tuple[Attribute, ...] = ()
    time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        # Callers may hand in a list; freeze it so the record stays immutable.
        object.__setattr__(self, "attributes", tuple(self.attributes))

    @property
    def timestamp_millis(self) -> int:
        """Record time as epoch milliseconds, the unit CloudWatch expects."""
        return int(self.time.timestamp() * 1000)


@dataclass(frozen=True)
class LogTarget:
    """
    Where a record goes.

    Carries the destination log group and, optionally, the retention to apply
    when the group is created for the first time.
    """

    log_group: str
    retention_days: Optional[int] = None
