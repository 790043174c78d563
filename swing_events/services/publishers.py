"""Outbound notification collaborators.

The engine only sees these narrow interfaces. Concrete clients are built
once at startup by ``build_publishers`` and closed at shutdown; tests swap
in fakes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from swing_events.config import Settings

logger = logging.getLogger(__name__)


class PublishError(Exception):
    """An outbound notification could not be delivered."""


class AlertPublisher(Protocol):
    def publish(self, symbol: str, event_type: str, data: dict[str, Any]) -> None: ...


class PromoPublisher(Protocol):
    def publish(self, snapshot, stage: str) -> None: ...


class TrackingSignal(Protocol):
    def stop_tracking(self, symbol: str, reason: str) -> None: ...


class ChatPublisher(Protocol):
    def send(self, message: str) -> None: ...


class NullChatPublisher:
    """Used when no chat integration is configured."""

    def send(self, message: str) -> None:
        logger.debug(f"Chat not configured, dropping: {message}")


@dataclass
class Publishers:
    alerts: AlertPublisher
    promo: PromoPublisher
    tracking: TrackingSignal
    chat: ChatPublisher
    http: Any = None  # requests.Session shared by the webhook clients

    def close(self):
        if self.http is not None:
            self.http.close()


def build_publishers(settings: Settings, chat: ChatPublisher | None = None) -> Publishers:
    """Construct the process-wide publisher clients."""
    import requests

    from swing_events.services.alerts import WebhookAlertPublisher
    from swing_events.services.promo import WebhookPromoPublisher
    from swing_events.services.tracking import WebhookTrackingSignal

    http = requests.Session()
    http.headers.update({"Content-Type": "application/json", "User-Agent": "swing-events/0.1"})

    return Publishers(
        alerts=WebhookAlertPublisher(
            http,
            url=settings.alerts_url,
            channels=settings.alerts_channels,
            test_user_only=settings.alerts_test_mode,
            timeout=settings.http_timeout_sec,
        ),
        promo=WebhookPromoPublisher(
            http,
            url=settings.promo_url,
            test_mode=settings.promo_test_mode,
            timeout=settings.http_timeout_sec,
        ),
        tracking=WebhookTrackingSignal(
            http,
            url=settings.tracking_url,
            timeout=settings.http_timeout_sec,
        ),
        chat=chat or NullChatPublisher(),
        http=http,
    )
