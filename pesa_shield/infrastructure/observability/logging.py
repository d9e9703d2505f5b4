"""Structured JSON logging for the scoring engine and API"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

logger = logging.getLogger("pesa_shield.audit")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds UTC timestamp, level and service name to every record"""

    def __init__(self, *args, service_name: str = "pesa-shield", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "pesa-shield") -> None:
    """Route every logger through one JSON handler on stdout"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name)
    )
    root.addHandler(handler)


def log_assessment(
    transaction_id: str,
    platform: str,
    risk_score: float,
    risk_level: str,
    alert_generated: bool,
    duration_ms: float,
) -> None:
    """One record per scored transaction"""
    logger.info(
        "Transaction assessed",
        extra={
            "transaction_id": transaction_id,
            "platform": platform,
            "step": "assessment_complete",
            "risk_score": round(risk_score, 4),
            "risk_level": risk_level,
            "alert_generated": alert_generated,
            "duration_ms": round(duration_ms, 3),
        },
    )


def log_alert_event(event: str, alert_id: str, alert_type: str, actor: Optional[str] = None) -> None:
    """Alert lifecycle record: emitted, read or resolved"""
    extra = {"step": f"alert_{event}", "alert_id": alert_id, "alert_type": alert_type}
    if actor:
        extra["actor"] = actor
    logger.info(f"Alert {event}", extra=extra)
