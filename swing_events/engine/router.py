"""Event routing and notification dispatch.

Flow per delivery:
event kind → payload validation → transition (one DB transaction) →
notifications → event log row.

Redelivery is the only recovery mechanism, so anything that must happen
(the trade mutation, member alerts, stop-tracking) raises on failure and
the delivery is retried; the transitions make that retry a no-op.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel
from sqlalchemy.engine import Engine
from sqlmodel import Session

from swing_events.engine.closer import close_manually
from swing_events.engine.entry import apply_entry
from swing_events.engine.intents import (
    IGNORED,
    AlertIntent,
    PromoIntent,
    StopTrackingIntent,
    TransitionResult,
)
from swing_events.engine.jump import apply_jump
from swing_events.engine.profit import apply_profit
from swing_events.engine.reset import apply_reset
from swing_events.engine.stop import apply_stop_out, apply_stop_warning
from swing_events.models.event_log import EventLog
from swing_events.schemas.event import (
    EntryHitData,
    JumpTargetData,
    ProfitHitData,
    StopEventData,
    TradeEvent,
)
from swing_events.services.messages import format_event_message
from swing_events.services.publishers import Publishers
from swing_events.utils.constants import (
    EVENT_ENTRY_HIT,
    EVENT_JUMP_TARGET,
    EVENT_PROFIT_HIT,
    EVENT_STOP_OUT,
    EVENT_STOP_WARNING,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventHandler:
    schema: type[BaseModel]
    apply: Callable[..., TransitionResult]


EVENT_HANDLERS: dict[str, EventHandler] = {
    EVENT_ENTRY_HIT: EventHandler(EntryHitData, apply_entry),
    EVENT_PROFIT_HIT: EventHandler(ProfitHitData, apply_profit),
    EVENT_STOP_OUT: EventHandler(StopEventData, apply_stop_out),
    EVENT_STOP_WARNING: EventHandler(StopEventData, apply_stop_warning),
    EVENT_JUMP_TARGET: EventHandler(JumpTargetData, apply_jump),
}


class EventProcessor:
    """Runs transitions against one database and one set of publishers."""

    def __init__(self, engine: Engine, publishers: Publishers):
        self.engine = engine
        self.publishers = publishers

    def process(self, event: TradeEvent) -> TransitionResult:
        start = time.monotonic()
        handler = EVENT_HANDLERS.get(event.event_type)
        if handler is None:
            logger.warning(f"Unknown event type: {event.event_type} for {event.symbol}, ignoring")
            result = TransitionResult(event.trade_id, IGNORED, message=f"unknown event type {event.event_type}")
            self._log_event(event, result.status, start, result.message)
            return result

        try:
            data = handler.schema.model_validate(event.data)
            with Session(self.engine) as session:
                result = handler.apply(session, event, data)
            self.dispatch(result)
        except Exception as e:
            logger.error(f"Error processing {event.event_type} for trade {event.trade_id}: {e}", exc_info=True)
            self._log_event(event, "error", start, str(e))
            raise

        if result.applied:
            self._chat(format_event_message(event, data))
        elapsed = self._log_event(event, result.status, start, result.message)
        logger.info(f"Event {event.event_type} for trade {event.trade_id} {result.status} in {elapsed} ms")
        return result

    def reset(self, trade_id: int, reason: str, symbol: str | None = None) -> TransitionResult:
        with Session(self.engine) as session:
            result = apply_reset(session, trade_id, reason, symbol=symbol)
        self._chat(f"🔄 Reset: trade {trade_id} - {reason}")
        return result

    def close(self, trade_id: int, outcome: str, notes: str = "") -> TransitionResult:
        with Session(self.engine) as session:
            result = close_manually(session, trade_id, outcome, notes)
        self.dispatch(result)
        if result.applied:
            self._chat(f"✋ Closed: trade {trade_id} ({outcome})")
        return result

    def dispatch(self, result: TransitionResult):
        """Send the intents of a committed transition, in order."""
        for intent in result.intents:
            if isinstance(intent, AlertIntent):
                self.publishers.alerts.publish(intent.symbol, intent.event_type, intent.data)
            elif isinstance(intent, PromoIntent):
                try:
                    self.publishers.promo.publish(intent.snapshot, intent.stage)
                except Exception as e:
                    logger.error(f"Promo system error ({intent.stage} for {intent.snapshot.symbol}): {e}")
            elif isinstance(intent, StopTrackingIntent):
                self.publishers.tracking.stop_tracking(intent.symbol, intent.reason)
            else:
                raise TypeError(f"Unknown notification intent: {intent!r}")

    def _chat(self, message: str):
        try:
            self.publishers.chat.send(message)
        except Exception as e:
            logger.warning(f"Chat notification failed: {e}")

    def _log_event(self, event: TradeEvent, status: str, start: float, message: str) -> int:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        with Session(self.engine) as session:
            session.add(EventLog(
                trade_id=event.trade_id,
                symbol=event.symbol,
                event_type=event.event_type,
                status=status,
                execution_time_ms=elapsed_ms,
                message=message,
                payload=event.model_dump(by_alias=True),
            ))
            session.commit()
        return elapsed_ms
