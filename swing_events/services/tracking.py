"""Signal to the price watcher that a symbol no longer needs monitoring."""

import logging

import requests

from swing_events.services._http import post_json

logger = logging.getLogger(__name__)


class WebhookTrackingSignal:
    def __init__(self, http: requests.Session, url: str, timeout: float = 10.0):
        self.http = http
        self.url = url
        self.timeout = timeout

    def stop_tracking(self, symbol: str, reason: str) -> None:
        if not self.url:
            logger.info(f"Tracking URL not configured, not signalling stop-tracking for {symbol}")
            return
        payload = {"symbol": symbol, "action": "stop-tracking", "reason": reason}
        post_json(self.http, self.url, payload, self.timeout)
        logger.info(f"Stop-tracking sent for {symbol}: {reason}")
