"""
Attempt policy: should this scheduler tick run the workflow at all?

The scheduler fires on a fixed interval. A successful session is presumed
valid for SUCCESS_COOLDOWN_SEC, so ticks inside that window are skipped.
Failures are never cooled down: the next tick always retries.
"""

from datetime import datetime, timedelta
from typing import Optional

from .constants import SUCCESS_COOLDOWN_SEC
from .state import AttemptOutcome

COOLDOWN = timedelta(seconds=SUCCESS_COOLDOWN_SEC)


def should_attempt(outcome: Optional[AttemptOutcome], now: datetime, forced: bool = False) -> bool:
    if forced:
        return True
    if outcome is None:
        return True
    if outcome.success and now - outcome.timestamp < COOLDOWN:
        return False
    return True


def minutes_since(outcome: AttemptOutcome, now: datetime) -> int:
    return int((now - outcome.timestamp).total_seconds() // 60)
