"""Fraud alert construction for qualifying assessments"""

import uuid
from datetime import datetime

from pesa_shield.domain.models import AlertType, FraudAlert, RiskAssessment, RiskLevel, Transaction
from pesa_shield.utils.currency import format_amount

ALERT_MIN_LEVEL = RiskLevel.MEDIUM

ALERT_TYPES = {
    RiskLevel.CRITICAL: AlertType.CRITICAL,
    RiskLevel.HIGH: AlertType.SUSPICIOUS,
    RiskLevel.MEDIUM: AlertType.WARNING,
    RiskLevel.LOW: AlertType.INFO,
}


def should_alert(assessment: RiskAssessment) -> bool:
    return assessment.risk_level >= ALERT_MIN_LEVEL


def alert_type_for(risk_level: RiskLevel) -> AlertType:
    return ALERT_TYPES[risk_level]


def build_alert_message(transaction: Transaction, assessment: RiskAssessment) -> str:
    platform = transaction.platform
    amount = format_amount(transaction.absolute_amount)
    score = assessment.formatted_risk_score

    if assessment.risk_level == RiskLevel.CRITICAL:
        return f"CRITICAL FRAUD ALERT: Suspicious {platform} transaction of {amount} detected. Risk Score: {score}"
    elif assessment.risk_level == RiskLevel.HIGH:
        return f"HIGH RISK: {platform} transaction of {amount} requires verification. Risk Score: {score}"
    elif assessment.risk_level == RiskLevel.MEDIUM:
        return f"MEDIUM RISK: {platform} transaction of {amount} flagged for monitoring. Risk Score: {score}"
    else:
        return f"LOW RISK: {platform} transaction of {amount} processed safely."


def create_alert(transaction: Transaction, assessment: RiskAssessment, created_at: datetime) -> FraudAlert:
    return FraudAlert(
        alert_id=f"alert_{uuid.uuid4().hex}",
        transaction=transaction,
        risk_assessment=assessment,
        alert_type=alert_type_for(assessment.risk_level),
        message=build_alert_message(transaction, assessment),
        timestamp=created_at,
    )
