"""Terminal transition shared by the jump, profit and stop-out handlers."""

import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlmodel import Session

from swing_events.engine import ledger
from swing_events.engine.intents import APPLIED, STALE, StopTrackingIntent, TransitionResult
from swing_events.engine.store import TradeStore
from swing_events.models.trade import Trade
from swing_events.utils.constants import LEDGER_CLOSE, MANUAL_OUTCOMES, STATUS_CLOSED, STATUS_OPEN

logger = logging.getLogger(__name__)


def close_trade(
    session: Session,
    trade: Trade,
    outcome: str,
    notes: str,
    now: datetime | None = None,
) -> StopTrackingIntent | None:
    """Mark an open trade closed inside the caller's transaction.

    Returns the stop-tracking intent to send after commit, or None when the
    trade was already closed (a replay must not signal the watcher twice).
    """
    now = now or datetime.now(timezone.utc)
    stmt = (
        update(Trade)
        .where(Trade.id == trade.id, Trade.status == STATUS_OPEN)
        .values(
            status=STATUS_CLOSED,
            outcome=outcome,
            closed_at=now,
            closed_notes=notes,
            updated_at=now,
        )
    )
    if session.exec(stmt).rowcount == 0:
        logger.info(f"Trade {trade.id} ({trade.symbol}) already closed, not closing again as {outcome}")
        return None

    ledger.record(session, trade.id, trade.symbol, LEDGER_CLOSE, notes=f"{outcome}: {notes}", now=now)
    logger.info(f"Trade {trade.id} ({trade.symbol}) closed as {outcome}: {notes}")
    return StopTrackingIntent(symbol=trade.symbol, reason=f"Trade {trade.id} closed ({outcome})")


def close_manually(
    session: Session,
    trade_id: int,
    outcome: str,
    notes: str = "",
    now: datetime | None = None,
) -> TransitionResult:
    """Admin close with one of the manual outcomes."""
    if outcome not in MANUAL_OUTCOMES:
        raise ValueError(f"Manual close outcome must be one of {MANUAL_OUTCOMES}, got {outcome!r}")

    trade = TradeStore(session).get_trade(trade_id)
    notes = notes or f"Closed manually ({outcome})"
    intent = close_trade(session, trade, outcome, notes, now=now)
    session.commit()

    if intent is None:
        return TransitionResult(trade_id, STALE, message="Trade was already closed")
    return TransitionResult(trade_id, APPLIED, intents=[intent], message=notes)
