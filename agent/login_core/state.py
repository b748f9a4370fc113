"""
AttemptOutcome: the persisted result of the most recent executed attempt.

Exactly one outcome is live at a time: writes overwrite, never append.
Timestamps never move backwards: a write older than the stored outcome is
clamped to the stored timestamp.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from .config import log, read_json, atomic_write_json, STATE_FILE
from .constants import STATE_LAST_SUCCESS, STATE_LAST_ATTEMPT


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_ts(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_ts(value) -> Optional[datetime]:
    """ISO-8601 (``Z`` or offset) → aware UTC datetime. None if unparseable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@dataclass(frozen=True)
class AttemptOutcome:
    success: bool
    timestamp: datetime

    def to_dict(self):
        return {
            STATE_LAST_SUCCESS: self.success,
            STATE_LAST_ATTEMPT: format_ts(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data):
        """Build from persisted keys. None when either key is missing or malformed."""
        if not isinstance(data, dict):
            return None
        success = data.get(STATE_LAST_SUCCESS)
        ts = parse_ts(data.get(STATE_LAST_ATTEMPT))
        if not isinstance(success, bool) or ts is None:
            return None
        return cls(success=success, timestamp=ts)


def _monotonic(previous: Optional[AttemptOutcome], outcome: AttemptOutcome) -> AttemptOutcome:
    if previous is not None and outcome.timestamp < previous.timestamp:
        log.warning(
            "Clock went backwards (%s < %s): keeping stored timestamp",
            format_ts(outcome.timestamp), format_ts(previous.timestamp),
        )
        return AttemptOutcome(success=outcome.success, timestamp=previous.timestamp)
    return outcome


class OutcomeStore(Protocol):
    def read(self) -> Optional[AttemptOutcome]: ...

    def write(self, outcome: AttemptOutcome) -> AttemptOutcome: ...


class JsonOutcomeStore:
    """Outcome Store backed by state.json (atomic replace on every write)."""

    def __init__(self, path=STATE_FILE):
        self.path = Path(path)

    def read(self):
        return AttemptOutcome.from_dict(read_json(self.path))

    def write(self, outcome):
        outcome = _monotonic(self.read(), outcome)
        data = read_json(self.path) or {}
        data.update(outcome.to_dict())
        atomic_write_json(self.path, data)
        return outcome


class MemoryOutcomeStore:
    def __init__(self, outcome: Optional[AttemptOutcome] = None):
        self.outcome = outcome
        self.writes = 0

    def read(self):
        return self.outcome

    def write(self, outcome):
        self.outcome = _monotonic(self.outcome, outcome)
        self.writes += 1
        return self.outcome
