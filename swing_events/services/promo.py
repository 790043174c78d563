"""Promo system hand-off for entries and first profit targets."""

import logging
from typing import Any

import requests

from swing_events.engine.intents import TradeSnapshot
from swing_events.services._http import post_json

logger = logging.getLogger(__name__)


def _text(value: float | None) -> str | None:
    return None if value is None else str(value)


def build_promo_payload(snapshot: TradeSnapshot, test_mode: bool) -> dict[str, Any]:
    return {
        "trade": {
            "Symbol": snapshot.symbol,
            "Long / Short": snapshot.direction,
            "% Profit/Loss": None,
            "Profit 1": _text(snapshot.profit_1),
            "Profit 2": _text(snapshot.profit_2),
            "Stop Price": snapshot.stop_price,
        },
        "testMode": test_mode,
    }


class WebhookPromoPublisher:
    """Posts trade snapshots to the promo endpoint, one ``func`` per stage.

    Raises PublishError like the other publishers; the processor is the one
    that decides promo failures are not worth failing an event over.
    """

    def __init__(self, http: requests.Session, url: str, test_mode: bool = False, timeout: float = 10.0):
        self.http = http
        self.url = url
        self.test_mode = test_mode
        self.timeout = timeout

    def publish(self, snapshot: TradeSnapshot, stage: str) -> None:
        if not self.url:
            logger.debug(f"Promo URL not configured, skipping {stage} for {snapshot.symbol}")
            return
        payload = build_promo_payload(snapshot, self.test_mode)
        post_json(self.http, self.url, payload, self.timeout, params={"func": stage})
        logger.info(f"Promo task sent: {stage} for {snapshot.symbol}")
