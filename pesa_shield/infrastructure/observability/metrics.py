"""Prometheus metrics for monitoring risk levels, alerts, and storage health"""

from typing import Dict

from prometheus_client import Counter, Histogram

# Scoring metrics
assessment_counter = Counter(
    "pesa_shield_assessments_total",
    "Total transactions assessed",
    ["risk_level"],  # low | medium | high | critical
)

alert_counter = Counter(
    "pesa_shield_alerts_total",
    "Fraud alerts emitted",
    ["alert_type"],  # warning | suspicious | critical
)

factor_score_histogram = Histogram(
    "pesa_shield_factor_score",
    "Distribution of individual anomaly factor scores",
    ["factor"],
    buckets=[0.1, 0.2, 0.3, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
)

scoring_latency_histogram = Histogram(
    "pesa_shield_scoring_latency_seconds",
    "Time spent scoring a transaction, including profile persistence",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

# Degraded-path metrics
profile_persist_failures_counter = Counter(
    "pesa_shield_profile_persist_failures_total",
    "Failed behavior profile writes",
)

fingerprint_fallback_counter = Counter(
    "pesa_shield_fingerprint_fallbacks_total",
    "Device fingerprints that fell back to the unknown sentinel",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_assessment(risk_level: str, risk_factors: Dict[str, float], alert_type: str | None) -> None:
    """Record scoring metrics for monitoring risk distribution"""
    assessment_counter.labels(risk_level=risk_level).inc()

    for factor, score in risk_factors.items():
        factor_score_histogram.labels(factor=factor).observe(score)

    if alert_type is not None:
        alert_counter.labels(alert_type=alert_type).inc()
