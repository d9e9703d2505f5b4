"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from pesa_shield.api.main import create_app
from pesa_shield.config import Settings
from pesa_shield.domain.models import Transaction, TransactionMetadata
from pesa_shield.infrastructure.database.session import init_db, make_engine, make_session_factory
from pesa_shield.infrastructure.device.fingerprint import DeviceFingerprintGenerator
from pesa_shield.infrastructure.profile_store import ProfileStore
from pesa_shield.services.fraud_detection import FraudDetectionService

FIXED_NOW = datetime(2026, 3, 10, 14, 0)
DEVICE_FINGERPRINT = "3f1c9a7e" * 8
PROFILE_KEY = "user_behavior_profile"


class FakeClock:
    """Settable clock so recency windows are deterministic"""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """SQLite database in a temporary directory"""
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    try:
        yield make_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture
def profile_store(session_factory: sessionmaker) -> ProfileStore:
    return ProfileStore(session_factory, PROFILE_KEY)


@pytest.fixture
def fingerprint_generator() -> DeviceFingerprintGenerator:
    return DeviceFingerprintGenerator(override=DEVICE_FINGERPRINT)


@pytest.fixture
def fraud_service(
    profile_store: ProfileStore,
    fingerprint_generator: DeviceFingerprintGenerator,
    clock: FakeClock,
) -> FraudDetectionService:
    return FraudDetectionService(
        profile_store=profile_store,
        fingerprint_generator=fingerprint_generator,
        clock=clock,
    )


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Factory for transactions; defaults describe an ordinary daytime M-Pesa send"""

    def factory(
        transaction_id: str = "tx_1",
        amount: float = 10_000,
        platform: str = "M-Pesa",
        timestamp: datetime = FIXED_NOW,
        location: str | None = "Dar es Salaam",
        device_id: str | None = DEVICE_FINGERPRINT,
        network_type: str | None = "wifi",
        **kwargs,
    ) -> Transaction:
        return Transaction(
            transaction_id=transaction_id,
            amount=amount,
            platform=platform,
            type=kwargs.pop("type", "send"),
            timestamp=timestamp,
            metadata=TransactionMetadata(location=location, device_id=device_id, network_type=network_type),
            **kwargs,
        )

    return factory


@pytest.fixture
def suspicious_transaction(make_transaction) -> Transaction:
    """Large night-time HaloPesa send over VPN from another device"""
    return make_transaction(
        transaction_id="tx_suspicious",
        amount=500_000,
        platform="HaloPesa",
        timestamp=FIXED_NOW.replace(hour=2),
        location=None,
        device_id="unrecognized-handset",
        network_type="vpn",
    )


@pytest.fixture
def client(tmp_path, fraud_service: FraudDetectionService) -> TestClient:
    """Create FastAPI test client around the test engine"""
    app_settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'api.db'}",
        device_fingerprint_override=DEVICE_FINGERPRINT,
        log_level="WARNING",
    )
    app = create_app(app_settings, fraud_service=fraud_service)
    return TestClient(app)
