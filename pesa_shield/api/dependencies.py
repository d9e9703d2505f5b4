"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from pesa_shield.config import Settings
from pesa_shield.domain.scoring import RiskThresholds
from pesa_shield.infrastructure.database.session import init_db, make_engine, make_session_factory
from pesa_shield.infrastructure.device.fingerprint import DeviceFingerprintGenerator
from pesa_shield.infrastructure.notifications.broadcaster import AlertBroadcaster
from pesa_shield.infrastructure.profile_store import ProfileStore
from pesa_shield.services.fraud_detection import FraudDetectionService
from pesa_shield.utils.date_utils import local_clock


def build_fraud_service(app_settings: Settings) -> FraudDetectionService:
    """Composition root: wire storage, fingerprinting and the alert feed into one engine"""
    engine = make_engine(app_settings.database_url)
    init_db(engine)

    return FraudDetectionService(
        profile_store=ProfileStore(make_session_factory(engine), app_settings.profile_storage_key),
        fingerprint_generator=DeviceFingerprintGenerator(override=app_settings.device_fingerprint_override),
        broadcaster=AlertBroadcaster(),
        thresholds=RiskThresholds(
            medium=app_settings.medium_risk_threshold,
            high=app_settings.high_risk_threshold,
            critical=app_settings.critical_risk_threshold,
        ),
        max_recent_alerts=app_settings.max_recent_alerts,
        clock=local_clock(app_settings.timezone),
        timezone=app_settings.timezone,
    )


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_fraud_service(request: Request) -> FraudDetectionService:
    """Provide the engine owned by the application"""
    return request.app.state.fraud_service
