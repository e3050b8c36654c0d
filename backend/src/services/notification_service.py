"""
Notification service for outbound scheduling events.

Events are handed to an external webhook sink (for example an automation
workflow that sends WhatsApp messages). Delivery is fire-and-forget: the
triggering request never waits for the sink and never fails because of it.
"""

import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional

import httpx

from core.config import WEBHOOK_URL, WEBHOOK_TIMEOUT_SECONDS, WEBHOOK_MAX_WORKERS
from utils.datetime_utils import utc_now

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Sink for scheduling events. Implementations must never raise."""

    @abstractmethod
    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        """Queue an event for delivery and return immediately."""


class WebhookNotifier(Notifier):
    """
    Posts events as JSON to a webhook URL on a bounded background pool.

    At most ``max_pending`` deliveries are queued or in flight; further events
    are dropped with a warning instead of blocking the caller.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout_seconds: float = WEBHOOK_TIMEOUT_SECONDS,
        max_workers: int = WEBHOOK_MAX_WORKERS,
        max_pending: int = 100,
    ):
        self.url = WEBHOOK_URL if url is None else url
        self.timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="webhook")
        self._slots = threading.BoundedSemaphore(max_pending)

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        if not self.url:
            logger.debug(f"Webhook URL not configured, skipping event {event}")
            return

        body = {"event": event, "timestamp": utc_now().isoformat(), **payload}

        if not self._slots.acquire(blocking=False):
            logger.warning(f"Webhook queue full, dropping event {event}")
            return

        try:
            future = self._executor.submit(self._deliver, body)
        except RuntimeError as e:
            # Executor already shut down
            self._slots.release()
            logger.warning(f"Webhook executor unavailable, dropping event {event}: {e}")
            return

        future.add_done_callback(lambda _: self._slots.release())

    def _deliver(self, body: Dict[str, Any]) -> None:
        event = body.get("event")
        try:
            response = httpx.post(self.url, json=body, timeout=self.timeout_seconds)
            response.raise_for_status()
            logger.info(f"Webhook delivered: {event}")
        except httpx.HTTPStatusError as e:
            logger.warning(f"Webhook failed for {event}: {e.response.status_code} {e.response.reason_phrase}")
        except httpx.HTTPError as e:
            logger.warning(f"Webhook error for {event}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected webhook error for {event}: {e}")

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


webhook_notifier = WebhookNotifier()


def get_notifier() -> Notifier:
    """FastAPI dependency returning the process-wide notifier."""
    return webhook_notifier


def dispatch_notifications(notifier: Optional[Notifier], notifications: list[tuple[str, Dict[str, Any]]]) -> None:
    """Hand queued (event, payload) pairs to the notifier, logging instead of raising."""
    if notifier is None:
        return
    for event, payload in notifications:
        try:
            notifier.notify(event, payload)
        except Exception as e:
            logger.exception(f"Notifier raised for {event}: {e}")
