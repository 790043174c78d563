"""One-line chat summaries of inbound events."""

from pydantic import BaseModel

from swing_events.schemas.event import (
    EntryHitData,
    JumpTargetData,
    ProfitHitData,
    StopEventData,
    TradeEvent,
)
from swing_events.utils.constants import EVENT_STOP_WARNING


def format_event_message(event: TradeEvent, payload: BaseModel) -> str:
    """Summarise an event from its validated payload (camelCase or snake_case on the wire)."""
    symbol, direction = event.symbol, event.direction

    if isinstance(payload, JumpTargetData):
        levels = ", ".join(str(e.entry_level) for e in payload.jumped_entries)
        return f"🎯 Jump: {symbol} {direction} opened at {payload.open_price}, jumped entries: {levels}"

    if isinstance(payload, EntryHitData):
        return f"📈 {symbol} ({direction}) crossed entry_{payload.entry_level} ({payload.entry_threshold})"

    if isinstance(payload, ProfitHitData):
        return f"💰 Profit {payload.profit_level} hit: {symbol} {direction} at {payload.profit_threshold}"

    if isinstance(payload, StopEventData):
        if event.event_type == EVENT_STOP_WARNING:
            return f"⚠️ Stop warning: {symbol} {direction} at {payload.current_price}"
        return f"🛑 Stop out: {symbol} {direction} at {payload.current_price}"

    return f"📊 {event.event_type}: {symbol} {direction}"
