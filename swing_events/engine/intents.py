"""Notification intents returned by the transitions.

Transitions never talk to the outside world; they describe what should be
sent and the processor sends it once the database transaction committed.
"""

from dataclasses import dataclass, field
from typing import Any

# Transition result statuses
APPLIED = "applied"
DUPLICATE = "duplicate"
STALE = "stale"
IGNORED = "ignored"


@dataclass(frozen=True)
class TradeSnapshot:
    symbol: str
    direction: str
    stop_price: float | None = None
    profit_1: float | None = None
    profit_2: float | None = None


@dataclass(frozen=True)
class AlertIntent:
    """Member alert. Delivery failure fails the event."""
    symbol: str
    event_type: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PromoIntent:
    """Promo system hand-off. Delivery failure is logged and dropped."""
    snapshot: TradeSnapshot
    stage: str  # "entry" or "profit"


@dataclass(frozen=True)
class StopTrackingIntent:
    """Tell the price watcher to drop a closed symbol. Failure fails the event."""
    symbol: str
    reason: str


@dataclass
class TransitionResult:
    trade_id: int | None
    status: str
    intents: list = field(default_factory=list)
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status == APPLIED
