"""Database models."""

from swing_events.models.trade import Trade
from swing_events.models.stop import TradeStop
from swing_events.models.ledger_event import LedgerEvent
from swing_events.models.event_log import EventLog

__all__ = [
    "Trade",
    "TradeStop",
    "LedgerEvent",
    "EventLog",
]
