"""Anomaly factor calculators - each maps a transaction to a score in [0, 1]"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Sequence

from pesa_shield.domain.models import UNKNOWN, Transaction, UserBehaviorProfile

NIGHT_HOURS = frozenset({23, 0, 1, 2, 3, 4, 5, 6})
TYPICAL_HOUR_TOLERANCE = 2
FREQUENCY_WINDOW = timedelta(hours=24)
DEFAULT_TYPICAL_FREQUENCY = 5
RARE_PLATFORM_SHARE = 0.1
SUSPICIOUS_NETWORK_MARKERS = ("vpn", "tor")


@dataclass(frozen=True)
class ScoringContext:
    """Read-only view of engine state shared by all calculators"""

    profile: UserBehaviorProfile
    device_fingerprint: str
    now: datetime
    history: Sequence[Transaction] = field(default_factory=tuple)


def amount_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    """
    Deviation of the amount from the historical average.

    Amounts above 3x the average count double.
    """
    if not context.history:
        return 0.0

    avg_amount = sum(t.absolute_amount for t in context.history) / len(context.history)
    amount = transaction.absolute_amount
    normalized_deviation = abs(amount - avg_amount) / (avg_amount + 1)

    if amount > avg_amount * 3:
        return min(1.0, normalized_deviation * 2)
    return min(1.0, normalized_deviation)


def time_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    """Night hours are always risky; otherwise compare against the user's usual hours"""
    hour = transaction.timestamp.hour
    if hour in NIGHT_HOURS:
        return 0.8

    common_hours = context.profile.common_transaction_hours
    if common_hours:
        is_typical = any(abs(h - hour) <= TYPICAL_HOUR_TOLERANCE for h in common_hours)
        return 0.1 if is_typical else 0.6

    return 0.3


def location_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    location = transaction.metadata.location_or_unknown
    if location == UNKNOWN:
        return 0.5

    known_locations = context.profile.location_patterns
    if not known_locations:
        return 0.3

    return 0.1 if location in known_locations else 0.7


def frequency_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    """
    Transactions in the trailing 24 hours against the typical daily frequency.

    The count includes the transaction being scored. A profile frequency of
    zero means "not established yet" and falls back to the default.
    """
    window_start = context.now - FREQUENCY_WINDOW
    recent = sum(1 for t in [*context.history, transaction] if t.timestamp >= window_start)

    typical = context.profile.typical_frequency or DEFAULT_TYPICAL_FREQUENCY

    if recent > typical * 3:
        return 0.9
    if recent > typical * 2:
        return 0.6
    return 0.2


def device_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    if transaction.metadata.device_id_or_unknown != context.device_fingerprint:
        return 0.8
    return 0.1


def network_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    network_type = transaction.metadata.network_type_or_unknown.lower()

    if any(marker in network_type for marker in SUSPICIOUS_NETWORK_MARKERS):
        return 0.9
    if network_type == UNKNOWN:
        return 0.5
    return 0.2


def behavioral_anomaly(transaction: Transaction, context: ScoringContext) -> float:
    """Rarely used platforms are suspicious"""
    platforms = context.profile.preferred_platforms
    total_usage = sum(platforms.values())
    if not platforms or total_usage == 0:
        return 0.3

    share = platforms.get(transaction.platform, 0) / total_usage
    return 0.7 if share < RARE_PLATFORM_SHARE else 0.2


FactorCalculator = Callable[[Transaction, ScoringContext], float]

# Order is the order factors appear in an assessment
FACTOR_CALCULATORS: Dict[str, FactorCalculator] = {
    "amount_anomaly": amount_anomaly,
    "time_anomaly": time_anomaly,
    "location_anomaly": location_anomaly,
    "frequency_anomaly": frequency_anomaly,
    "device_anomaly": device_anomaly,
    "network_anomaly": network_anomaly,
    "behavioral_anomaly": behavioral_anomaly,
}

FACTOR_NAMES: List[str] = list(FACTOR_CALCULATORS)

FACTOR_DISPLAY_NAMES = {
    "amount_anomaly": "Amount Anomaly",
    "time_anomaly": "Time Pattern Anomaly",
    "location_anomaly": "Location Anomaly",
    "frequency_anomaly": "Transaction Frequency",
    "device_anomaly": "Device Mismatch",
    "network_anomaly": "Network Anomaly",
    "behavioral_anomaly": "Behavioral Pattern",
}


def calculate_factors(transaction: Transaction, context: ScoringContext) -> Dict[str, float]:
    """Run every calculator against the same context"""
    return {name: calculator(transaction, context) for name, calculator in FACTOR_CALCULATORS.items()}
