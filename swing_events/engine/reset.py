"""Reset: re-arm a trade for a fresh setup."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session

from swing_events.engine import ledger
from swing_events.engine.intents import APPLIED, TransitionResult
from swing_events.engine.ladder import clear_ladders
from swing_events.engine.store import TradeStore
from swing_events.utils.constants import LEDGER_RESET, STATUS_OPEN

logger = logging.getLogger(__name__)


def reset_log_line(reason: str, now: datetime) -> str:
    return f"RESET: {reason} on {now.strftime('%Y-%m-%d %H:%M:%S')}\n"


def apply_reset(
    session: Session,
    trade_id: int,
    reason: str,
    symbol: str | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    """Blank both ladders, drop all stops and reopen the trade as eligible.

    Works from any status. The entry log only ever grows.
    """
    now = now or datetime.now(timezone.utc)
    store = TradeStore(session)
    trade = store.get_trade(trade_id)
    symbol = symbol or trade.symbol
    logger.info(f"Processing reset for trade {trade_id} ({symbol}): {reason}")

    clear_ladders(trade)
    trade.stop_price = None
    trade.stop_period = None
    trade.entry_log = (trade.entry_log or "") + reset_log_line(reason, now)
    trade.eligible = True
    trade.status = STATUS_OPEN
    trade.outcome = None
    trade.closed_at = None
    trade.closed_notes = None
    trade.updated_at = now
    session.add(trade)

    removed = store.delete_stops(trade_id)
    ledger.record(session, trade_id, symbol, LEDGER_RESET, notes=f"Reset: {reason}", now=now)
    session.commit()

    logger.info(f"Reset completed for trade {trade_id} ({symbol}): {reason}, {removed} stop(s) removed")
    return TransitionResult(trade_id, APPLIED, message=f"reset: {reason}")
