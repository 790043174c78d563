"""entry-hit: a pending entry level was filled."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session

from swing_events.engine import ledger
from swing_events.engine.errors import DuplicateEventError
from swing_events.engine.intents import (
    APPLIED,
    DUPLICATE,
    AlertIntent,
    PromoIntent,
    TradeSnapshot,
    TransitionResult,
)
from swing_events.engine.store import TradeStore
from swing_events.models.trade import Trade
from swing_events.schemas.event import EntryHitData, TradeEvent
from swing_events.utils.constants import (
    DEFAULT_PROFIT_MULTIPLIERS,
    EVENT_ENTRY_HIT,
    LEDGER_ENTRY,
    STOP_DAILY,
)

logger = logging.getLogger(__name__)


def default_profits(direction: str, entry_threshold: float) -> tuple[float, float]:
    """Profit 1 / profit 2 at 3% and 6% beyond the entry, on the trade's side."""
    first, second = DEFAULT_PROFIT_MULTIPLIERS[direction]
    return entry_threshold * first, entry_threshold * second


def _direction(trade: Trade, event: TradeEvent) -> str:
    if trade.direction != event.direction:
        logger.warning(
            f"Trade {trade.id} is {trade.direction} but event says {event.direction}; using stored direction"
        )
    return trade.direction


def apply_entry(
    session: Session,
    event: TradeEvent,
    data: EntryHitData,
    now: datetime | None = None,
) -> TransitionResult:
    """Mark the entry filled and seed a default stop and profit targets.

    Steps:
    1. Skip if the ledger already holds this entry threshold
    2. Lock the trade and append the ledger row
    3. Set entry_N_filled_at (only if still unset)
    4. No stops at all → daily stop at the entry threshold
    5. No profit targets → profit_1/profit_2 at ±3% / ±6%
    """
    now = now or datetime.now(timezone.utc)
    trade_id = event.trade_id
    level, threshold = data.entry_level, data.entry_threshold
    logger.info(f"Processing entry-hit for {event.symbol} ({event.direction}), entry level {level}")

    if ledger.has_processed(session, trade_id, LEDGER_ENTRY, threshold):
        logger.info(f"Entry {threshold} for trade {trade_id} already processed, skipping")
        return TransitionResult(trade_id, DUPLICATE, message=f"entry {threshold} already processed")

    store = TradeStore(session)
    trade = store.get_trade(trade_id)
    direction = _direction(trade, event)

    try:
        ledger.record(
            session, trade_id, trade.symbol, LEDGER_ENTRY,
            target=level,
            price=threshold,
            notes=f"{trade.symbol} ({direction}) crossed entry_{level} ({threshold})",
            now=now,
        )
    except DuplicateEventError:
        return TransitionResult(trade_id, DUPLICATE, message=f"entry {threshold} already processed")

    if not store.mark_entry_filled(trade_id, level, now):
        logger.warning(f"entry_{level} of trade {trade_id} was already filled, keeping first fill time")

    if not store.list_stops(trade_id):
        logger.info(f"No stop set for trade {trade_id}, setting breakeven stop at {threshold}")
        store.insert_stop(trade, STOP_DAILY, threshold, now=now)

    if trade.profit_1 is None and trade.profit_2 is None:
        profit_1, profit_2 = default_profits(direction, threshold)
        if store.seed_default_profits(trade_id, profit_1, profit_2):
            logger.info(
                f"Setting default profit targets for trade {trade_id}: profit_1={profit_1}, profit_2={profit_2}"
            )

    session.commit()
    session.refresh(trade)

    snapshot = TradeSnapshot(
        symbol=trade.symbol,
        direction=direction,
        stop_price=trade.stop_price,
        profit_1=trade.profit_1,
        profit_2=trade.profit_2,
    )
    intents = [
        PromoIntent(snapshot=snapshot, stage="entry"),
        AlertIntent(symbol=trade.symbol, event_type=EVENT_ENTRY_HIT, data={"entryLevel": level}),
    ]
    logger.info(f"Entry event processed for {trade.symbol} entry {level}")
    return TransitionResult(trade_id, APPLIED, intents=intents, message=f"entry_{level} filled at {threshold}")
