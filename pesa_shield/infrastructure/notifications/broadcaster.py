"""Live fan-out feed of fraud alerts"""

import logging
import threading
from typing import Callable, List

from pesa_shield.domain.models import FraudAlert

logger = logging.getLogger(__name__)

AlertCallback = Callable[[FraudAlert], None]


class Subscription:
    """Handle returned by AlertBroadcaster.subscribe"""

    def __init__(self, broadcaster: "AlertBroadcaster", callback: AlertCallback):
        self._broadcaster = broadcaster
        self.callback = callback

    def cancel(self) -> None:
        self._broadcaster.unsubscribe(self)


class AlertBroadcaster:
    """
    Publish/subscribe registry with at-most-once delivery and no replay.

    Only subscribers registered at publish time receive an alert. A
    failing subscriber is logged and skipped.
    """

    def __init__(self) -> None:
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: AlertCallback) -> Subscription:
        subscription = Subscription(self, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.info(f"Alert subscriber added. Total: {len(self._subscriptions)}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
        logger.info(f"Alert subscriber removed. Total: {len(self._subscriptions)}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, alert: FraudAlert) -> int:
        """Deliver to current subscribers; returns how many received it"""
        with self._lock:
            subscribers = list(self._subscriptions)

        delivered = 0
        for subscription in subscribers:
            try:
                subscription.callback(alert)
                delivered += 1
            except Exception as e:
                logger.error(f"Alert subscriber failed: {e}", extra={"alert_id": alert.alert_id})
        return delivered
