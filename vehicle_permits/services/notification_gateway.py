# vehicle_permits/services/notification_gateway.py
"""
Notification gateway — the messaging provider seen by the dispatcher.

Contract: send(recipient, message) -> DeliveryResult.
An ordinary delivery failure is returned as DeliveryResult(delivered=False, reason=...),
never raised. The dispatcher adds the timeout around the call.

Implementations:
  - SimulatedGateway: stand-in provider with configurable failure rate and latency
  - HttpGateway:      posts the message to a WhatsApp/SMS relay over HTTP
"""

import random
import time
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from vehicle_permits.config import settings
from vehicle_permits.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeliveryResult:
    delivered: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "DeliveryResult":
        return cls(delivered=True)

    @classmethod
    def failed(cls, reason: str) -> "DeliveryResult":
        return cls(delivered=False, reason=reason)


class NotificationGateway(Protocol):
    name: str

    def send(self, recipient: str, message: str) -> DeliveryResult:
        ...


class SimulatedGateway:
    """Pretends to talk to a provider: sleeps, then fails with probability `failure_rate`."""

    name = "simulated"

    def __init__(self, failure_rate: float, latency_seconds: float = 0.0, rng: Optional[random.Random] = None):
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1")
        self.failure_rate = failure_rate
        self.latency_seconds = latency_seconds
        self.rng = rng or random.Random()

    def send(self, recipient: str, message: str) -> DeliveryResult:
        if self.latency_seconds:
            time.sleep(self.latency_seconds)
        if self.rng.random() < self.failure_rate:
            return DeliveryResult.failed("Simulated provider failure")
        logger.debug(f"[SIMULATED] Delivered {len(message)} chars to {recipient}")
        return DeliveryResult.ok()


class HttpGateway:
    """Relays messages to an HTTP messaging endpoint (JSON body: to, body)."""

    name = "http"

    def __init__(self, url: str, token: Optional[str] = None, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, recipient: str, message: str) -> DeliveryResult:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            resp = self.session.post(
                self.url,
                json={"to": recipient, "body": message},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            return DeliveryResult.failed("timeout")
        except requests.exceptions.ConnectionError as e:
            return DeliveryResult.failed(f"connection error: {e}")
        except requests.exceptions.RequestException as e:
            return DeliveryResult.failed(f"request error: {e}")

        if 200 <= resp.status_code < 300:
            return DeliveryResult.ok()
        return DeliveryResult.failed(f"http_{resp.status_code}: {resp.text[:200]}")


def build_gateway() -> NotificationGateway:
    """Construct the gateway selected by NOTIFICATION_GATEWAY."""
    kind = settings.NOTIFICATION_GATEWAY.lower()
    if kind == "http":
        if not settings.GATEWAY_URL:
            raise ValueError("NOTIFICATION_GATEWAY=http requires GATEWAY_URL")
        return HttpGateway(settings.GATEWAY_URL, settings.GATEWAY_TOKEN, settings.NOTIFICATION_TIMEOUT_SECONDS)
    if kind == "simulated":
        return SimulatedGateway(settings.SIMULATED_FAILURE_RATE, settings.SIMULATED_LATENCY_SECONDS)
    raise ValueError(f"Unknown NOTIFICATION_GATEWAY: {settings.NOTIFICATION_GATEWAY}")


_gateway: Optional[NotificationGateway] = None


def get_gateway() -> NotificationGateway:
    """FastAPI dependency — one gateway per process, built on first use."""
    global _gateway
    if _gateway is None:
        _gateway = build_gateway()
        logger.info(f"Notification gateway: {_gateway.name}")
    return _gateway
