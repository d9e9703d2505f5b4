"""Installation fingerprint used to spot transactions from other devices"""

import hashlib
import logging
import platform
import socket
import uuid
from typing import Callable, Optional, Sequence

from pesa_shield.infrastructure.observability.metrics import fingerprint_fallback_counter

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE = "unknown_device"


def device_model() -> str:
    return platform.machine() or "generic"


def vendor_id() -> str:
    return f"{uuid.getnode():012x}"


def os_version() -> str:
    return f"{platform.system()} {platform.release()}"


def connectivity_class() -> str:
    """Coarse network class from interface names: wifi, mobile, ethernet or none"""
    names = [name for _, name in socket.if_nameindex() if name != "lo"]
    if any(name.startswith(("wl", "wlan")) for name in names):
        return "wifi"
    if any(name.startswith(("wwan", "rmnet", "ppp")) for name in names):
        return "mobile"
    return "ethernet" if names else "none"


DEFAULT_COLLECTORS: Sequence[Callable[[], str]] = (device_model, vendor_id, os_version, connectivity_class)


class DeviceFingerprintGenerator:
    """
    Computes a SHA-256 fingerprint of the device once per process.

    Any failure while gathering identifiers falls back to
    UNKNOWN_DEVICE so scoring is never blocked.
    """

    def __init__(
        self,
        collectors: Sequence[Callable[[], str]] = DEFAULT_COLLECTORS,
        override: Optional[str] = None,
    ):
        self.collectors = collectors
        self.override = override
        self._fingerprint: Optional[str] = None

    def fingerprint(self) -> str:
        if self._fingerprint is None:
            self._fingerprint = self.override or self._generate()
        return self._fingerprint

    def _generate(self) -> str:
        try:
            raw = "_".join(collect() for collect in self.collectors)
        except Exception as e:
            fingerprint_fallback_counter.inc()
            logger.warning(f"Error generating device fingerprint: {e}")
            return UNKNOWN_DEVICE

        return hashlib.sha256(raw.encode("utf-8")).hexdigest()
