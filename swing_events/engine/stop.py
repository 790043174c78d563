"""stop-warning and stop-out handlers."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session

from swing_events.engine import ledger
from swing_events.engine.closer import close_trade
from swing_events.engine.errors import DuplicateEventError
from swing_events.engine.intents import APPLIED, DUPLICATE, AlertIntent, TransitionResult
from swing_events.engine.store import TradeStore
from swing_events.schemas.event import StopEventData, TradeEvent
from swing_events.utils.constants import (
    EVENT_STOP_OUT,
    EVENT_STOP_WARNING,
    LEDGER_STOP,
    OUTCOME_STOPPED_OUT,
    STOP_CODE_TYPES,
    STOP_WEEKLY,
)

logger = logging.getLogger(__name__)


def stop_type_for(code: str) -> str:
    """DC is the daily close stop; every other code is treated as weekly."""
    return STOP_CODE_TYPES.get(code, STOP_WEEKLY)


def _alert_data(data: StopEventData) -> dict:
    return {
        "stopLevel": data.stop_level,
        "stopType": data.stop_type,
        "currentPrice": data.current_price,
        "lossAmount": data.loss_amount,
        "lossPercent": data.loss_percent,
    }


def apply_stop_warning(
    session: Session,
    event: TradeEvent,
    data: StopEventData,
    now: datetime | None = None,
) -> TransitionResult:
    """Warnings repeat by nature; they only alert and never touch the trade."""
    logger.info(f"Processing stop-warning for {event.symbol}: {data.stop_type} at {data.current_price}")
    alert = AlertIntent(symbol=event.symbol, event_type=EVENT_STOP_WARNING, data=_alert_data(data))
    return TransitionResult(
        event.trade_id, APPLIED, intents=[alert],
        message=f"stop warning at {data.current_price}",
    )


def apply_stop_out(
    session: Session,
    event: TradeEvent,
    data: StopEventData,
    now: datetime | None = None,
) -> TransitionResult:
    now = now or datetime.now(timezone.utc)
    trade_id = event.trade_id
    price = data.current_price
    logger.info(f"Processing stop-out for {event.symbol}: {data.stop_type} at {price}")

    if ledger.has_processed(session, trade_id, LEDGER_STOP, price):
        logger.info(f"Stop-out at {price} for trade {trade_id} already processed, skipping")
        return TransitionResult(trade_id, DUPLICATE, message=f"stop-out at {price} already processed")

    store = TradeStore(session)
    trade = store.get_trade(trade_id)
    stop_type = stop_type_for(data.stop_type)

    try:
        ledger.record(
            session, trade_id, trade.symbol, LEDGER_STOP,
            price=price,
            notes=f"Stop out: {trade.symbol} {trade.direction} at {price} ({stop_type} stop)",
            now=now,
        )
    except DuplicateEventError:
        return TransitionResult(trade_id, DUPLICATE, message=f"stop-out at {price} already processed")

    # Stop types are discrete labels: exact match, newest first
    stop = next((s for s in store.list_stops(trade_id) if s.stop_type == stop_type), None)
    if stop is None:
        logger.warning(f"No {stop_type} stop found for trade {trade_id}, closing anyway")
    elif not store.mark_stop_triggered(stop.id, now):
        logger.warning(f"Stop {stop.id} of trade {trade_id} was already triggered")

    intents: list = [
        AlertIntent(symbol=trade.symbol, event_type=EVENT_STOP_OUT, data=_alert_data(data)),
    ]
    details = [f"{stop_type} stop", f"level {data.stop_level}"]
    if data.loss_percent is not None:
        details.append(f"loss {data.loss_percent}%")
    notes = f"Stopped out at {price} ({', '.join(details)})"
    tracking = close_trade(session, trade, OUTCOME_STOPPED_OUT, notes, now=now)
    if tracking:
        intents.append(tracking)

    session.commit()
    return TransitionResult(trade_id, APPLIED, intents=intents, message=notes)
