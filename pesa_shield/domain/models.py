"""Domain models - pure Python dataclasses representing business entities"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional, Tuple

from pesa_shield.utils.currency import format_amount_with_decimals, is_high_value, is_very_high_value

UNKNOWN = "unknown"

PLATFORMS = ("M-Pesa", "Airtel Money", "HaloPesa", "Tigo Pesa", "T-Pesa", "Ezy Pesa")

TRANSACTION_TYPE_NAMES = {
    "send": "Send Money",
    "receive": "Receive Money",
    "pay": "Pay Bill",
    "withdraw": "Withdraw Cash",
    "deposit": "Deposit Cash",
    "buy_airtime": "Buy Airtime",
    "pay_merchant": "Pay Merchant",
}

TRANSACTION_STATUSES = ("pending", "completed", "failed", "blocked")


@dataclass(frozen=True)
class TransactionMetadata:
    """Optional context attached to a transaction by the importing channel"""

    location: Optional[str] = None
    device_id: Optional[str] = None
    network_type: Optional[str] = None
    sender_platform: Optional[str] = None
    fee: Optional[float] = None
    reference: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def location_or_unknown(self) -> str:
        return self.location or UNKNOWN

    @property
    def device_id_or_unknown(self) -> str:
        return self.device_id or UNKNOWN

    @property
    def network_type_or_unknown(self) -> str:
        return self.network_type or UNKNOWN


@dataclass(frozen=True)
class Transaction:
    """One mobile-money movement; amount may be signed"""

    transaction_id: str
    amount: float
    platform: str  # "M-Pesa", "Airtel Money", "HaloPesa", ...
    type: str  # "send", "receive", "pay", "withdraw", "deposit", "buy_airtime", "pay_merchant"
    timestamp: datetime
    status: str = "completed"  # "pending", "completed", "failed" or "blocked"
    recipient_id: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_phone: Optional[str] = None
    metadata: TransactionMetadata = field(default_factory=TransactionMetadata)

    @property
    def absolute_amount(self) -> float:
        return abs(self.amount)

    @property
    def formatted_amount(self) -> str:
        return format_amount_with_decimals(self.absolute_amount)

    @property
    def type_display_name(self) -> str:
        return TRANSACTION_TYPE_NAMES.get(self.type.lower(), self.type.upper())

    @property
    def is_high_value(self) -> bool:
        return is_high_value(self.amount)

    @property
    def is_very_high_value(self) -> bool:
        return is_very_high_value(self.amount)

    @property
    def is_cross_platform(self) -> bool:
        sender = self.metadata.sender_platform
        return sender is not None and sender != self.platform

    @property
    def is_suspicious(self) -> bool:
        """Basic rule-of-thumb check, independent of the scoring engine"""
        if self.is_very_high_value:
            return True

        hour = self.timestamp.hour
        if (hour >= 23 or hour <= 5) and self.absolute_amount > 100_000:
            return True

        return self.is_cross_platform and self.absolute_amount > 200_000


@dataclass
class UserBehaviorProfile:
    """Rolling summary of historical transaction behavior"""

    average_transaction_amount: float = 0.0
    common_transaction_hours: List[int] = field(default_factory=list)
    preferred_platforms: Dict[str, int] = field(default_factory=dict)
    typical_frequency: int = 0
    location_patterns: List[str] = field(default_factory=list)

    def to_document(self) -> Dict[str, Any]:
        """Flat JSON-compatible document for key-value storage"""
        return {
            "average_transaction_amount": self.average_transaction_amount,
            "common_transaction_hours": list(self.common_transaction_hours),
            "preferred_platforms": dict(self.preferred_platforms),
            "typical_frequency": self.typical_frequency,
            "location_patterns": list(self.location_patterns),
        }

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserBehaviorProfile":
        """
        Rebuild a profile from its stored document.

        Missing keys fall back to defaults.

        Raises:
            ValueError, TypeError: On values of the wrong shape or range
            OverflowError: On an infinite count
        """
        if not isinstance(document, dict):
            raise TypeError(f"profile document must be an object, got {type(document).__name__}")

        hours = [int(h) for h in document.get("common_transaction_hours", [])]
        if any(h < 0 or h > 23 for h in hours):
            raise ValueError(f"hour out of range in {hours}")

        platforms = document.get("preferred_platforms", {})
        if not isinstance(platforms, dict):
            raise TypeError("preferred_platforms must be an object")
        platform_counts = {str(k): int(v) for k, v in platforms.items()}
        if any(count < 0 for count in platform_counts.values()):
            raise ValueError(f"negative platform count in {platform_counts}")

        average = float(document.get("average_transaction_amount", 0.0))
        if not math.isfinite(average) or average < 0:
            raise ValueError(f"average_transaction_amount must be finite and non-negative, got {average}")

        typical_frequency = int(document.get("typical_frequency", 0))
        if typical_frequency < 0:
            raise ValueError(f"typical_frequency must be non-negative, got {typical_frequency}")

        return cls(
            average_transaction_amount=average,
            common_transaction_hours=sorted(set(hours)),
            preferred_platforms=platform_counts,
            typical_frequency=typical_frequency,
            location_patterns=[str(loc) for loc in document.get("location_patterns", [])],
        )

    def copy(self) -> "UserBehaviorProfile":
        return UserBehaviorProfile.from_document(self.to_document())


class RiskLevel(IntEnum):
    """Ordered risk classification: LOW < MEDIUM < HIGH < CRITICAL"""

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def display_name(self) -> str:
        return f"{self.name.capitalize()} Risk"

    @property
    def description(self) -> str:
        return _RISK_LEVEL_DESCRIPTIONS[self]

    @property
    def severity(self) -> float:
        return (self.value + 1) / 4

    @classmethod
    def from_label(cls, label: str) -> "RiskLevel":
        return cls[label.upper()]


_RISK_LEVEL_DESCRIPTIONS = {
    RiskLevel.LOW: "Transaction appears legitimate with minimal risk indicators",
    RiskLevel.MEDIUM: "Transaction shows some suspicious patterns, requires monitoring",
    RiskLevel.HIGH: "Transaction displays multiple fraud indicators, verification recommended",
    RiskLevel.CRITICAL: "Transaction poses severe fraud risk, immediate action required",
}


class AlertType(str, Enum):
    CRITICAL = "critical"
    SUSPICIOUS = "suspicious"
    WARNING = "warning"
    INFO = "info"
    RESOLVED = "resolved"

    @property
    def display_name(self) -> str:
        return _ALERT_TYPE_NAMES[self]

    @property
    def priority(self) -> int:
        return _ALERT_TYPE_PRIORITY[self]


_ALERT_TYPE_NAMES = {
    AlertType.CRITICAL: "Critical Alert",
    AlertType.SUSPICIOUS: "Suspicious Activity",
    AlertType.WARNING: "Warning",
    AlertType.INFO: "Information",
    AlertType.RESOLVED: "Resolved",
}

_ALERT_TYPE_PRIORITY = {
    AlertType.CRITICAL: 5,
    AlertType.SUSPICIOUS: 4,
    AlertType.WARNING: 3,
    AlertType.INFO: 2,
    AlertType.RESOLVED: 1,
}


@dataclass(frozen=True)
class RiskAssessment:
    """Output of scoring one transaction"""

    transaction_id: str
    risk_score: float
    risk_level: RiskLevel
    risk_factors: Dict[str, float]
    timestamp: datetime
    recommendations: List[str]

    @property
    def formatted_risk_score(self) -> str:
        return f"{self.risk_score * 100:.1f}%"

    @property
    def sorted_risk_factors(self) -> List[Tuple[str, float]]:
        return sorted(self.risk_factors.items(), key=lambda item: item[1], reverse=True)

    @property
    def primary_risk_factor(self) -> Tuple[str, float]:
        return self.sorted_risk_factors[0]

    @property
    def requires_immediate_action(self) -> bool:
        return self.risk_level == RiskLevel.CRITICAL or self.risk_score >= 0.9

    @property
    def requires_manual_review(self) -> bool:
        return self.risk_level >= RiskLevel.HIGH or self.risk_score >= 0.7

    @property
    def top_recommendations(self) -> List[str]:
        return self.recommendations[:3]


@dataclass
class FraudAlert:
    """
    Notification-worthy event raised for medium-or-higher assessments.

    State machine: unread -> read -> resolved. Resolving implies read,
    and nothing leaves the resolved state.
    """

    alert_id: str
    transaction: Transaction
    risk_assessment: RiskAssessment
    alert_type: AlertType
    message: str
    timestamp: datetime
    is_read: bool = False
    is_resolved: bool = False
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolution: Optional[str] = None

    def mark_as_read(self) -> None:
        self.is_read = True

    def resolve(self, resolved_by: str, resolution: str, resolved_at: datetime) -> None:
        # Caller guards against resolving twice
        self.is_read = True
        self.is_resolved = True
        self.resolved_by = resolved_by
        self.resolution = resolution
        self.resolved_at = resolved_at
        self.alert_type = AlertType.RESOLVED

    def snapshot(self) -> "FraudAlert":
        return replace(self)

    @property
    def priority(self) -> int:
        return self.alert_type.priority

    @property
    def should_notify(self) -> bool:
        return not self.is_read and not self.is_resolved and self.priority >= 3

    @property
    def notification_priority(self) -> int:
        return 0 if self.is_resolved else self.priority

    @property
    def summary(self) -> str:
        return (
            f"{self.alert_type.display_name}: {self.transaction.platform} "
            f"transaction of {self.transaction.formatted_amount}"
        )

    def is_urgent(self, now: datetime) -> bool:
        if self.alert_type == AlertType.CRITICAL:
            return True
        return self.alert_type == AlertType.SUSPICIOUS and now - self.timestamp < timedelta(minutes=30)


@dataclass(frozen=True)
class FraudStats:
    """Aggregate counters over the scored history"""

    total_transactions: int = 0
    fraud_rate: float = 0.0
    blocked_transactions: int = 0
    alerts_generated: int = 0
