"""Behavior profile derivation from transaction history"""

import math
from datetime import datetime, timedelta
from typing import Dict, Sequence

from pesa_shield.domain.models import Transaction, UserBehaviorProfile

FREQUENCY_WINDOW_DAYS = 30


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_profile(
    history: Sequence[Transaction],
    now: datetime,
    previous: UserBehaviorProfile | None = None,
) -> UserBehaviorProfile:
    """
    Recompute the profile from the full history.

    - Average absolute amount over all history
    - Every hour of day seen, deduplicated
    - Usage count per platform
    - Typical daily frequency over the trailing 30 days, rounded half up

    Location patterns are not derived from history; they are carried over
    from the previous profile unchanged.
    """
    previous = previous or UserBehaviorProfile()
    if not history:
        return UserBehaviorProfile(location_patterns=list(previous.location_patterns))

    average = sum(t.absolute_amount for t in history) / len(history)
    hours = sorted({t.timestamp.hour for t in history})

    platforms: Dict[str, int] = {}
    for txn in history:
        platforms[txn.platform] = platforms.get(txn.platform, 0) + 1

    window_start = now - timedelta(days=FREQUENCY_WINDOW_DAYS)
    recent_count = sum(1 for t in history if t.timestamp >= window_start)

    return UserBehaviorProfile(
        average_transaction_amount=average,
        common_transaction_hours=hours,
        preferred_platforms=platforms,
        typical_frequency=_round_half_up(recent_count / FREQUENCY_WINDOW_DAYS),
        location_patterns=list(previous.location_patterns),
    )
