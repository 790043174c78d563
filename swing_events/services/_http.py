"""Shared JSON POST helper for the webhook publishers."""

import logging
from typing import Any

import requests

from swing_events.services.publishers import PublishError

logger = logging.getLogger(__name__)


def post_json(
    http: requests.Session,
    url: str,
    payload: dict[str, Any],
    timeout: float,
    params: dict[str, str] | None = None,
) -> requests.Response:
    """POST a JSON body, raising PublishError on transport errors or non-2xx replies."""
    try:
        resp = http.post(url, json=payload, params=params, timeout=timeout)
    except requests.RequestException as e:
        raise PublishError(f"POST {url} failed: {e}") from e
    if not resp.ok:
        raise PublishError(f"POST {url} returned {resp.status_code}: {resp.text[:200]}")
    return resp
