"""Fraud detection service - the stateful risk-scoring engine"""

import logging
import threading
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from pesa_shield.domain.alerts import create_alert, should_alert
from pesa_shield.domain.exceptions import AlertAlreadyResolvedError, AlertNotFoundError
from pesa_shield.domain.factors import ScoringContext
from pesa_shield.domain.models import FraudAlert, FraudStats, RiskAssessment, RiskLevel, Transaction, UserBehaviorProfile
from pesa_shield.domain.scoring import RiskThresholds, assess_transaction
from pesa_shield.infrastructure.device.fingerprint import UNKNOWN_DEVICE, DeviceFingerprintGenerator
from pesa_shield.infrastructure.notifications.broadcaster import AlertBroadcaster, AlertCallback, Subscription
from pesa_shield.infrastructure.observability.logging import log_alert_event, log_assessment
from pesa_shield.infrastructure.observability.metrics import record_assessment, scoring_latency_histogram
from pesa_shield.infrastructure.profile_store import ProfileStore
from pesa_shield.utils.date_utils import to_local_naive

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECENT_ALERTS = 50
DEFAULT_TIMEZONE = "Africa/Dar_es_Salaam"


class FraudDetectionService:
    """
    Scores transactions against a rolling behavior profile.

    Owns the transaction history, the behavior profile and the bounded
    recent-alerts list. All of them are guarded by one lock, so concurrent
    callers are serialized.

    Flow of analyze_transaction:
    1. Initialize lazily if an earlier attempt failed or never ran
    2. Run the seven factor calculators and aggregate the risk score
    3. For MEDIUM and above, record and broadcast a FraudAlert
    4. Append the transaction to history and rebuild + persist the profile
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        fingerprint_generator: DeviceFingerprintGenerator,
        broadcaster: Optional[AlertBroadcaster] = None,
        thresholds: RiskThresholds = RiskThresholds(),
        max_recent_alerts: int = DEFAULT_MAX_RECENT_ALERTS,
        clock: Callable[[], datetime] = datetime.now,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self.profile_store = profile_store
        self.fingerprint_generator = fingerprint_generator
        self.broadcaster = broadcaster or AlertBroadcaster()
        self.default_thresholds = thresholds
        self.max_recent_alerts = max_recent_alerts
        self.clock = clock
        self.timezone = timezone

        self._lock = threading.RLock()
        self._thresholds = thresholds
        self._is_initialized = False
        self._device_fingerprint: Optional[str] = None
        self._history: List[Transaction] = []
        self._recent_alerts: List[FraudAlert] = []
        self._alerts_generated = 0
        self._critical_alerts = 0

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def device_fingerprint(self) -> str:
        return self._device_fingerprint or UNKNOWN_DEVICE

    @property
    def thresholds(self) -> RiskThresholds:
        return self._thresholds

    def initialize(self) -> bool:
        """
        Generate the device fingerprint and load the stored profile.

        Safe to call repeatedly; only the first successful call does work.
        A failure is logged and leaves the service uninitialized so the
        next scoring call retries.
        """
        with self._lock:
            if self._is_initialized:
                return True

            try:
                self._device_fingerprint = self.fingerprint_generator.fingerprint()
                self.profile_store.load()
                self._is_initialized = True
                logger.info("Fraud detection service initialized")
            except Exception as e:
                logger.error(f"Error initializing fraud detection service: {e}")

            return self._is_initialized

    def analyze_transaction(self, transaction: Transaction) -> RiskAssessment:
        start_time = time.perf_counter()
        transaction = self._to_local_time(transaction)

        with self._lock:
            if not self._is_initialized:
                self.initialize()

            now = self.clock()
            context = ScoringContext(
                profile=self.profile_store.profile,
                device_fingerprint=self.device_fingerprint,
                now=now,
                history=tuple(self._history),
            )
            assessment = assess_transaction(transaction, context, self._thresholds)

            alert = None
            if should_alert(assessment):
                alert = create_alert(transaction, assessment, now)
                self._remember_alert(alert)
                self.broadcaster.publish(alert.snapshot())
                log_alert_event("emitted", alert.alert_id, alert.alert_type.value)

            self._history.append(transaction)
            self.profile_store.update(self._history, now)

        duration = time.perf_counter() - start_time
        scoring_latency_histogram.observe(duration)
        record_assessment(
            assessment.risk_level.label,
            assessment.risk_factors,
            alert.alert_type.value if alert else None,
        )
        log_assessment(
            transaction.transaction_id,
            transaction.platform,
            assessment.risk_score,
            assessment.risk_level.label,
            alert is not None,
            duration * 1000,
        )
        return assessment

    def _to_local_time(self, transaction: Transaction) -> Transaction:
        """History and the clock are naive local wall-clock times; aware timestamps are converted"""
        if transaction.timestamp.tzinfo is None:
            return transaction
        return replace(transaction, timestamp=to_local_naive(transaction.timestamp, self.timezone))

    def _remember_alert(self, alert: FraudAlert) -> None:
        self._recent_alerts.insert(0, alert)
        del self._recent_alerts[self.max_recent_alerts:]

        self._alerts_generated += 1
        if alert.risk_assessment.risk_level == RiskLevel.CRITICAL:
            self._critical_alerts += 1

    def subscribe(self, callback: AlertCallback) -> Subscription:
        """Receive alerts emitted from now on; earlier alerts are not replayed"""
        return self.broadcaster.subscribe(callback)

    def get_recent_alerts(self) -> List[FraudAlert]:
        """Snapshot of recent alerts, newest first"""
        with self._lock:
            return [alert.snapshot() for alert in self._recent_alerts]

    def get_alert(self, alert_id: str) -> FraudAlert:
        with self._lock:
            return self._find_alert(alert_id).snapshot()

    def mark_alert_read(self, alert_id: str) -> FraudAlert:
        with self._lock:
            alert = self._find_alert(alert_id)
            if not alert.is_read:
                alert.mark_as_read()
                log_alert_event("read", alert_id, alert.alert_type.value)
            return alert.snapshot()

    def resolve_alert(self, alert_id: str, resolved_by: str, resolution: str) -> FraudAlert:
        """
        Raises:
            AlertNotFoundError: Unknown or evicted alert id
            AlertAlreadyResolvedError: Alert was resolved before
        """
        with self._lock:
            alert = self._find_alert(alert_id)
            if alert.is_resolved:
                raise AlertAlreadyResolvedError(f"Alert {alert_id} is already resolved")
            alert.resolve(resolved_by, resolution, self.clock())
            log_alert_event("resolved", alert_id, alert.alert_type.value, actor=resolved_by)
            return alert.snapshot()

    def _find_alert(self, alert_id: str) -> FraudAlert:
        for alert in self._recent_alerts:
            if alert.alert_id == alert_id:
                return alert
        raise AlertNotFoundError(f"Alert {alert_id} not found")

    def get_fraud_stats(self) -> FraudStats:
        """
        Aggregates over all scored transactions.

        fraud_rate = critical-level alerts / transactions scored. Counters
        are cumulative, so evicting old alerts does not change them.
        """
        with self._lock:
            total = len(self._history)
            if total == 0:
                return FraudStats()

            return FraudStats(
                total_transactions=total,
                fraud_rate=self._critical_alerts / total,
                blocked_transactions=self._critical_alerts,
                alerts_generated=self._alerts_generated,
            )

    def get_profile(self) -> UserBehaviorProfile:
        with self._lock:
            return self.profile_store.profile.copy()

    def get_transaction_history(self) -> List[Transaction]:
        with self._lock:
            return list(self._history)

    def update_thresholds(self, thresholds: RiskThresholds) -> None:
        with self._lock:
            self._thresholds = thresholds
        logger.info(
            "Risk thresholds updated",
            extra={"medium": thresholds.medium, "high": thresholds.high, "critical": thresholds.critical},
        )

    def erase_all_data(self) -> None:
        """Drop history, alerts and the stored profile; restore default thresholds"""
        with self._lock:
            self._history.clear()
            self._recent_alerts.clear()
            self._alerts_generated = 0
            self._critical_alerts = 0
            self._thresholds = self.default_thresholds
            self.profile_store.clear()
        logger.warning("All fraud detection data erased")
