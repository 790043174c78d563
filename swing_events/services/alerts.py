"""Member alerts (email/SMS fan-out) for trade events."""

import logging
from typing import Any

import requests

from swing_events.services._http import post_json
from swing_events.utils.constants import (
    EVENT_ENTRY_HIT,
    EVENT_PROFIT_HIT,
    EVENT_STOP_OUT,
    EVENT_STOP_WARNING,
)

logger = logging.getLogger(__name__)

ALERT_TYPES: dict[str, str] = {
    EVENT_ENTRY_HIT: "entry target",
    EVENT_PROFIT_HIT: "profit target",
    EVENT_STOP_OUT: "stop price",
    EVENT_STOP_WARNING: "stop warning",
}


def alert_type(event_type: str) -> str:
    return ALERT_TYPES.get(event_type, "entry target")


def build_alert_message(
    symbol: str,
    event_type: str,
    data: dict[str, Any],
    channels: list[str],
    test_user_only: bool,
) -> dict[str, Any]:
    """Message format expected by the alert sender."""
    hit_number = data.get("entryLevel") or data.get("profitLevel")
    return {
        "newHits": [{"ticker": symbol, "hitNumber": hit_number}],
        "alertType": alert_type(event_type),
        "channels": list(channels),
        "options": {"testUserOnly": test_user_only},
        "detail": {key: value for key, value in data.items() if value is not None},
    }


class WebhookAlertPublisher:
    """Posts alert messages to the alert sender. Failures raise PublishError."""

    def __init__(
        self,
        http: requests.Session,
        url: str,
        channels: list[str],
        test_user_only: bool = True,
        timeout: float = 10.0,
    ):
        self.http = http
        self.url = url
        self.channels = channels
        self.test_user_only = test_user_only
        self.timeout = timeout

    def publish(self, symbol: str, event_type: str, data: dict[str, Any]) -> None:
        message = build_alert_message(symbol, event_type, data, self.channels, self.test_user_only)
        if not self.url:
            logger.info(
                f"Alert prepared (NOT PUBLISHED): {event_type} {symbol} testUserOnly={self.test_user_only}"
            )
            return
        post_json(self.http, self.url, message, self.timeout)
        logger.info(f"Alert published: {event_type} {symbol} testUserOnly={self.test_user_only}")
