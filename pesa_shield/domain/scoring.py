"""Risk scoring engine - weighted aggregation of anomaly factors"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List

from pesa_shield.domain.exceptions import InvalidThresholdsError
from pesa_shield.domain.factors import ScoringContext, calculate_factors
from pesa_shield.domain.models import RiskAssessment, RiskLevel, Transaction

# Fixed linear model; weights sum to 1.0
RISK_WEIGHTS: Dict[str, float] = {
    "amount_anomaly": 0.25,
    "time_anomaly": 0.20,
    "location_anomaly": 0.15,
    "frequency_anomaly": 0.15,
    "device_anomaly": 0.10,
    "network_anomaly": 0.10,
    "behavioral_anomaly": 0.05,
}

FACTOR_RECOMMENDATION_CUTOFF = 0.5

LEVEL_RECOMMENDATIONS: Dict[RiskLevel, List[str]] = {
    RiskLevel.CRITICAL: [
        "BLOCK TRANSACTION IMMEDIATELY",
        "Initiate manual verification process",
        "Contact customer directly via registered phone number",
        "Flag account for enhanced monitoring",
    ],
    RiskLevel.HIGH: [
        "Require additional authentication",
        "Implement transaction delay (cooling period)",
        "Send SMS verification to registered number",
        "Review customer's recent transaction history",
    ],
    RiskLevel.MEDIUM: [
        "Send push notification for confirmation",
        "Log transaction for further analysis",
        "Monitor subsequent transactions closely",
    ],
    RiskLevel.LOW: [
        "Process transaction normally",
    ],
}

# Checked in this order, at most one extra recommendation each
FACTOR_RECOMMENDATIONS = [
    ("amount_anomaly", "Verify transaction amount with customer"),
    ("device_anomaly", "Verify device ownership"),
    ("location_anomaly", "Verify customer location"),
]


@dataclass(frozen=True)
class RiskThresholds:
    """Inclusive lower bounds for each risk level above LOW"""

    medium: float = 0.60
    high: float = 0.80
    critical: float = 0.95

    def __post_init__(self) -> None:
        if not 0.0 <= self.medium <= self.high <= self.critical <= 1.0:
            raise InvalidThresholdsError(
                f"thresholds must satisfy 0 <= medium <= high <= critical <= 1, "
                f"got medium={self.medium} high={self.high} critical={self.critical}"
            )


def calculate_risk_score(risk_factors: Dict[str, float]) -> float:
    """
    Weighted sum of factor scores, in [0.0, 1.0].

    Weights:
    - 25%: amount   - 20%: time     - 15%: location
    - 15%: frequency - 10%: device  - 10%: network
    - 5%:  behavioral
    """
    score = sum(risk_factors.get(name, 0.0) * weight for name, weight in RISK_WEIGHTS.items())
    return max(0.0, min(score, 1.0))


def determine_risk_level(score: float, thresholds: RiskThresholds = RiskThresholds()) -> RiskLevel:
    """Step function evaluated from the highest level down; first match wins"""
    if score >= thresholds.critical:
        return RiskLevel.CRITICAL
    elif score >= thresholds.high:
        return RiskLevel.HIGH
    elif score >= thresholds.medium:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def generate_recommendations(risk_level: RiskLevel, risk_factors: Dict[str, float]) -> List[str]:
    recommendations = list(LEVEL_RECOMMENDATIONS[risk_level])

    for factor, recommendation in FACTOR_RECOMMENDATIONS:
        if risk_factors.get(factor, 0.0) > FACTOR_RECOMMENDATION_CUTOFF:
            recommendations.append(recommendation)

    return recommendations


def assess_transaction(
    transaction: Transaction,
    context: ScoringContext,
    thresholds: RiskThresholds = RiskThresholds(),
    assessed_at: datetime | None = None,
) -> RiskAssessment:
    """
    Main entry point: score a transaction against the current engine state.

    Pure function - the caller owns history, profile and alert side effects.
    """
    risk_factors = calculate_factors(transaction, context)
    score = calculate_risk_score(risk_factors)
    risk_level = determine_risk_level(score, thresholds)

    return RiskAssessment(
        transaction_id=transaction.transaction_id,
        risk_score=score,
        risk_level=risk_level,
        risk_factors=risk_factors,
        timestamp=assessed_at or context.now,
        recommendations=generate_recommendations(risk_level, risk_factors),
    )
