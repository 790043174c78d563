"""jump-target: price opened beyond one or more pending entry levels.

Jumped levels are never filled. They are dropped from the ladder and the
remaining unfilled levels shift left. If the last pending level itself was
jumped there is nothing left to shift: a trade without fills is closed, a
trade with fills keeps running towards its profit/stop.
"""

import logging
from datetime import datetime, timezone

from sqlmodel import Session

from swing_events.engine import ledger
from swing_events.engine.closer import close_trade
from swing_events.engine.intents import APPLIED, STALE, TransitionResult
from swing_events.engine.ladder import LEVELS, EntryRung, compact, entry_ladder, rightmost_entry
from swing_events.engine.store import TradeStore
from swing_events.engine.tolerance import matches_any
from swing_events.schemas.event import JumpTargetData, TradeEvent
from swing_events.utils.constants import LEDGER_JUMP, OUTCOME_JUMPED

logger = logging.getLogger(__name__)


def surviving_entries(ladder, jumped_thresholds: list[float]) -> list[EntryRung]:
    """Rungs left after dropping the jumped ones, in their original level order.

    A filled rung is history: it is never dropped, even if a jumped threshold
    happens to match it, and it keeps its fill time when the ladder shifts.
    """
    survivors = []
    for rung in ladder:
        if not rung.is_set:
            continue
        if not rung.is_filled and matches_any(rung.threshold, jumped_thresholds):
            continue
        survivors.append(rung)
    return survivors


def apply_jump(
    session: Session,
    event: TradeEvent,
    data: JumpTargetData,
    now: datetime | None = None,
) -> TransitionResult:
    now = now or datetime.now(timezone.utc)
    trade_id = event.trade_id
    jumped_thresholds = [float(e.entry_threshold) for e in data.jumped_entries]
    jumped_levels = ", ".join(str(e.entry_level) for e in data.jumped_entries)
    logger.info(
        f"Processing jump-target for {event.symbol}, jumped entries: {jumped_levels} "
        f"with thresholds: {jumped_thresholds}"
    )

    store = TradeStore(session)
    trade = store.get_trade(trade_id)
    trade_name = f"{trade.symbol} ({trade.direction})"
    ladder = entry_ladder(trade)

    # Step 1: a jump whose thresholds are gone from the ladder was already applied
    current_thresholds = [rung.threshold for rung in ladder if rung.is_set]
    if not any(matches_any(jumped, current_thresholds) for jumped in jumped_thresholds):
        logger.info(
            f"None of the jumped thresholds {jumped_thresholds} exist in trade {trade_id} anymore "
            f"(current: {current_thresholds}), skipping"
        )
        session.rollback()
        return TransitionResult(trade_id, STALE, message="jumped thresholds no longer on the ladder")

    # Step 2: was the last pending rung itself jumped?
    rightmost = rightmost_entry(ladder)
    rightmost_rung = ladder[rightmost - 1]
    if matches_any(rightmost_rung.threshold, jumped_thresholds):
        logger.info(f"Rightmost entry (entry_{rightmost}) of trade {trade_id} was jumped")
        if any(rung.is_filled for rung in ladder):
            logger.info(f"{trade_name} has filled entries, continuing to monitor for profit/stop")
            session.rollback()
            return TransitionResult(trade_id, STALE, message="rightmost entry jumped after a fill, trade stays open")

        notes = f"Rightmost entry (entry_{rightmost}) jumped at {data.open_price} with no entries filled"
        intent = close_trade(session, trade, OUTCOME_JUMPED, notes, now=now)
        session.commit()
        intents = [intent] if intent else []
        return TransitionResult(trade_id, APPLIED, intents=intents, message=notes)

    # Step 3: drop jumped rungs and shift the rest left in one update
    survivors = surviving_entries(ladder, jumped_thresholds)
    new_entries = compact(survivors)
    if new_entries == ladder:
        # Only filled rungs matched; they are history and never shift
        logger.info(f"Jumped thresholds {jumped_thresholds} only match filled entries of trade {trade_id}, skipping")
        session.rollback()
        return TransitionResult(trade_id, STALE, message="jumped thresholds only match filled entries")
    store.rewrite_entries(trade, new_entries, now=now)

    summary = ", ".join(f"entry_{level}={rung.threshold}" for level, rung in zip(LEVELS, new_entries))
    ledger.record(
        session, trade_id, trade.symbol, LEDGER_JUMP,
        notes=f"Jump at {data.open_price} removed {jumped_thresholds}; {summary}",
        now=now,
    )
    session.commit()

    logger.info(f"Shifted entries for trade {trade_id}: {summary}")
    return TransitionResult(trade_id, APPLIED, message=f"shifted entries: {summary}")
