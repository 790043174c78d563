"""profit-hit: a profit target was reached."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session

from swing_events.engine import ledger
from swing_events.engine.closer import close_trade
from swing_events.engine.errors import DuplicateEventError
from swing_events.engine.intents import (
    APPLIED,
    DUPLICATE,
    AlertIntent,
    PromoIntent,
    TradeSnapshot,
    TransitionResult,
)
from swing_events.engine.ladder import LEVELS, check_level, entry_ladder, profit_ladder
from swing_events.engine.store import TradeStore
from swing_events.schemas.event import ProfitHitData, TradeEvent
from swing_events.utils.constants import EVENT_PROFIT_HIT, LEDGER_PROFIT, OUTCOME_PROFIT, STOP_DAILY

logger = logging.getLogger(__name__)


def remaining_profit_levels(ladder, hit_level: int) -> list[int]:
    """Levels other than the one just hit that still have an unachieved target."""
    check_level(hit_level)
    return [
        level for level in LEVELS
        if level != hit_level and ladder[level - 1].is_pending
    ]


def apply_profit(
    session: Session,
    event: TradeEvent,
    data: ProfitHitData,
    now: datetime | None = None,
) -> TransitionResult:
    """Record the target and either trail a breakeven stop or close the trade.

    Steps:
    1. Skip if the ledger already holds this profit threshold
    2. Lock the trade, append the ledger row, set profit_N_achieved_at (only if unset)
    3. Profit 1 with targets remaining → daily stop moves to entry_1
    4. No targets remaining → close as "profit"
    """
    now = now or datetime.now(timezone.utc)
    trade_id = event.trade_id
    level, threshold = data.profit_level, data.profit_threshold
    logger.info(f"Processing profit-hit for {event.symbol} ({event.direction}), profit level {level}")

    if ledger.has_processed(session, trade_id, LEDGER_PROFIT, threshold):
        logger.info(f"Profit {threshold} for trade {trade_id} already processed, skipping")
        return TransitionResult(trade_id, DUPLICATE, message=f"profit {threshold} already processed")

    store = TradeStore(session)
    trade = store.get_trade(trade_id)
    trade_name = f"{trade.symbol} ({trade.direction})"
    profits = profit_ladder(trade)
    entries = entry_ladder(trade)

    try:
        ledger.record(
            session, trade_id, trade.symbol, LEDGER_PROFIT,
            target=level,
            price=threshold,
            notes=f"Profit {level} hit: {trade_name} at {threshold}",
            now=now,
        )
    except DuplicateEventError:
        return TransitionResult(trade_id, DUPLICATE, message=f"profit {threshold} already processed")

    if store.mark_profit_achieved(trade_id, level, now):
        logger.info(f"Marked profit_{level}_achieved_at for trade {trade_id}: {trade_name}")
    else:
        logger.warning(f"profit_{level} of trade {trade_id} was already achieved, keeping first time")

    intents: list = [
        AlertIntent(symbol=trade.symbol, event_type=EVENT_PROFIT_HIT, data={"profitLevel": level}),
    ]
    if level == 1:
        snapshot = TradeSnapshot(
            symbol=trade.symbol,
            direction=trade.direction,
            stop_price=trade.stop_price,
            profit_1=profits[0].price,
            profit_2=profits[1].price,
        )
        intents.append(PromoIntent(snapshot=snapshot, stage="profit"))

    remaining = remaining_profit_levels(profits, level)
    logger.info(f"Remaining unfilled profit targets: {', '.join(map(str, remaining)) or 'none'}")

    if level == 1 and remaining:
        breakeven = entries[0].threshold
        if breakeven is not None:
            # Replace, not update: drop every daily stop, then insert the breakeven one
            store.delete_stops(trade_id, STOP_DAILY)
            store.insert_stop(trade, STOP_DAILY, breakeven, now=now)
            logger.info(f"Set breakeven stop at entry_1 price {breakeven} for trade {trade_id}")
        else:
            logger.warning(f"Cannot set breakeven stop: entry_1 is null for trade {trade_id}")

    message = f"profit_{level} achieved at {threshold}"
    if not remaining:
        notes = f"All profit targets achieved, final profit (profit_{level}) hit at {threshold}"
        tracking = close_trade(session, trade, OUTCOME_PROFIT, notes, now=now)
        if tracking:
            intents.append(tracking)
        message = notes

    session.commit()
    logger.info(f"Profit event processed for {trade_name} profit {level} ({threshold})")
    return TransitionResult(trade_id, APPLIED, intents=intents, message=message)
