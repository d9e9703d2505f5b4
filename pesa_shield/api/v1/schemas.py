"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from pesa_shield.domain.factors import FACTOR_DISPLAY_NAMES
from pesa_shield.domain.models import (
    PLATFORMS,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPE_NAMES,
    FraudAlert,
    FraudStats,
    RiskAssessment,
    Transaction,
    TransactionMetadata,
    UserBehaviorProfile,
)

_NAMED_METADATA_KEYS = ("location", "device_id", "network_type", "sender_platform", "fee", "reference")


class TransactionRequest(BaseModel):
    """Request body for POST /v1/transactions/analyze"""

    transaction_id: str = Field(..., min_length=1, description="Unique transaction identifier")
    amount: float = Field(..., description="Signed amount in TSh; the magnitude is scored")
    platform: str
    type: str
    timestamp: datetime
    status: str = "completed"
    recipient_id: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_phone: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("platform")
    @classmethod
    def check_platform(cls, value: str) -> str:
        return _one_of(value, PLATFORMS, "platform")

    @field_validator("type")
    @classmethod
    def check_type(cls, value: str) -> str:
        return _one_of(value, tuple(TRANSACTION_TYPE_NAMES), "type")

    @field_validator("status")
    @classmethod
    def check_status(cls, value: str) -> str:
        return _one_of(value, TRANSACTION_STATUSES, "status")

    def to_domain(self) -> Transaction:
        metadata = dict(self.metadata)
        fee = _optional_float(metadata.pop("fee", None))
        named = {key: _optional_str(metadata.pop(key, None)) for key in _NAMED_METADATA_KEYS if key != "fee"}

        return Transaction(
            transaction_id=self.transaction_id,
            amount=self.amount,
            platform=self.platform,
            type=self.type,
            timestamp=self.timestamp,
            status=self.status,
            recipient_id=self.recipient_id,
            recipient_name=self.recipient_name,
            recipient_phone=self.recipient_phone,
            metadata=TransactionMetadata(fee=fee, extra=metadata, **named),
        )


def _one_of(value: str, allowed: tuple, field_name: str) -> str:
    if value not in allowed:
        raise ValueError(f"{field_name} must be one of {', '.join(allowed)}")
    return value


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _optional_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class TransactionSchema(BaseModel):
    transaction_id: str
    amount: float
    platform: str
    type: str
    timestamp: datetime
    status: str
    recipient_id: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_phone: Optional[str] = None
    metadata: Dict[str, Any]
    formatted_amount: str

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionSchema":
        meta = transaction.metadata
        metadata = {key: getattr(meta, key) for key in _NAMED_METADATA_KEYS if getattr(meta, key) is not None}
        metadata.update(meta.extra)
        return cls(
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
            platform=transaction.platform,
            type=transaction.type,
            timestamp=transaction.timestamp,
            status=transaction.status,
            recipient_id=transaction.recipient_id,
            recipient_name=transaction.recipient_name,
            recipient_phone=transaction.recipient_phone,
            metadata=metadata,
            formatted_amount=transaction.formatted_amount,
        )


class AssessmentResponse(BaseModel):
    """Response for POST /v1/transactions/analyze"""

    transaction_id: str
    risk_score: float
    risk_level: str
    risk_factors: Dict[str, float]
    timestamp: datetime
    recommendations: List[str]
    formatted_risk_score: str
    risk_level_display: str
    primary_risk_factor: str
    requires_manual_review: bool
    requires_immediate_action: bool
    alert_generated: bool = False

    @classmethod
    def from_domain(cls, assessment: RiskAssessment, alert_generated: bool = False) -> "AssessmentResponse":
        return cls(
            transaction_id=assessment.transaction_id,
            risk_score=assessment.risk_score,
            risk_level=assessment.risk_level.label,
            risk_factors=assessment.risk_factors,
            timestamp=assessment.timestamp,
            recommendations=assessment.recommendations,
            formatted_risk_score=assessment.formatted_risk_score,
            risk_level_display=assessment.risk_level.display_name,
            primary_risk_factor=FACTOR_DISPLAY_NAMES[assessment.primary_risk_factor[0]],
            requires_manual_review=assessment.requires_manual_review,
            requires_immediate_action=assessment.requires_immediate_action,
            alert_generated=alert_generated,
        )


class AlertResponse(BaseModel):
    """Single fraud alert"""

    alert_id: str
    alert_type: str
    message: str
    summary: str
    timestamp: datetime
    is_read: bool
    is_resolved: bool
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolution: Optional[str] = None
    priority: int
    transaction: TransactionSchema
    risk_assessment: AssessmentResponse

    @classmethod
    def from_domain(cls, alert: FraudAlert) -> "AlertResponse":
        return cls(
            alert_id=alert.alert_id,
            alert_type=alert.alert_type.value,
            message=alert.message,
            summary=alert.summary,
            timestamp=alert.timestamp,
            is_read=alert.is_read,
            is_resolved=alert.is_resolved,
            resolved_by=alert.resolved_by,
            resolved_at=alert.resolved_at,
            resolution=alert.resolution,
            priority=alert.notification_priority,
            transaction=TransactionSchema.from_domain(alert.transaction),
            risk_assessment=AssessmentResponse.from_domain(alert.risk_assessment, alert_generated=True),
        )


class ResolveAlertRequest(BaseModel):
    """Request body for POST /v1/alerts/{alert_id}/resolve"""

    resolved_by: str = Field(..., min_length=1)
    resolution: str = Field(..., min_length=1)


class StatsResponse(BaseModel):
    """Response for GET /v1/stats"""

    total_transactions: int
    fraud_rate: float
    blocked_transactions: int
    alerts_generated: int

    @classmethod
    def from_domain(cls, stats: FraudStats) -> "StatsResponse":
        return cls(
            total_transactions=stats.total_transactions,
            fraud_rate=stats.fraud_rate,
            blocked_transactions=stats.blocked_transactions,
            alerts_generated=stats.alerts_generated,
        )


class ProfileResponse(BaseModel):
    """Response for GET /v1/profile"""

    average_transaction_amount: float
    common_transaction_hours: List[int]
    preferred_platforms: Dict[str, int]
    typical_frequency: int
    location_patterns: List[str]

    @classmethod
    def from_domain(cls, profile: UserBehaviorProfile) -> "ProfileResponse":
        return cls(**profile.to_document())


class ThresholdsSchema(BaseModel):
    """Request/response body for PUT /v1/settings/thresholds"""

    medium: float = Field(..., ge=0.0, le=1.0)
    high: float = Field(..., ge=0.0, le=1.0)
    critical: float = Field(..., ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_order(self) -> "ThresholdsSchema":
        if not self.medium <= self.high <= self.critical:
            raise ValueError("thresholds must satisfy medium <= high <= critical")
        return self
