"""Trade and stop persistence used by the transitions.

All methods work inside the caller's session; nothing here commits.
Single-field flags (filled_at, achieved_at, triggered_at, status) are set
with conditional UPDATEs that only touch a row still in the unset state,
so a redelivered event cannot overwrite the first timestamp.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete, update
from sqlmodel import Session, select

from swing_events.engine.errors import TradeNotFoundError
from swing_events.engine.ladder import apply_entries, check_level
from swing_events.models.stop import TradeStop
from swing_events.models.trade import Trade
from swing_events.utils.constants import stop_operator

logger = logging.getLogger(__name__)

_ENTRY_FILLED_AT = (Trade.entry_1_filled_at, Trade.entry_2_filled_at, Trade.entry_3_filled_at)
_PROFIT_ACHIEVED_AT = (Trade.profit_1_achieved_at, Trade.profit_2_achieved_at, Trade.profit_3_achieved_at)


class TradeStore:
    def __init__(self, session: Session):
        self.session = session

    def get_trade(self, trade_id: int, for_update: bool = True) -> Trade:
        """Load a trade, holding its row lock until the transaction ends."""
        stmt = select(Trade).where(Trade.id == trade_id)
        if for_update:
            stmt = stmt.with_for_update()
        trade = self.session.exec(stmt).first()
        if trade is None:
            raise TradeNotFoundError(trade_id)
        return trade

    # ------------------------------------------------------------------
    # Stops
    # ------------------------------------------------------------------

    def list_stops(self, trade_id: int) -> list[TradeStop]:
        stmt = (
            select(TradeStop)
            .where(TradeStop.trade_id == trade_id)
            .order_by(TradeStop.created_at.desc(), TradeStop.id.desc())
        )
        return list(self.session.exec(stmt).all())

    def insert_stop(self, trade: Trade, stop_type: str, price: float, now: datetime | None = None) -> TradeStop:
        now = now or datetime.now(timezone.utc)
        stop = TradeStop(
            trade_id=trade.id,
            stop_type=stop_type,
            operator=stop_operator(trade.direction),
            price=price,
            created_at=now,
        )
        self.session.add(stop)
        trade.stop_price = price
        trade.stop_period = stop_type
        trade.updated_at = now
        self.session.add(trade)
        self.session.flush()
        return stop

    def delete_stops(self, trade_id: int, stop_type: str | None = None) -> int:
        stmt = delete(TradeStop).where(TradeStop.trade_id == trade_id)
        if stop_type is not None:
            stmt = stmt.where(TradeStop.stop_type == stop_type)
        result = self.session.exec(stmt)
        return result.rowcount

    def mark_stop_triggered(self, stop_id: int, now: datetime) -> bool:
        stmt = (
            update(TradeStop)
            .where(TradeStop.id == stop_id, TradeStop.triggered_at.is_(None))
            .values(triggered_at=now)
        )
        return self.session.exec(stmt).rowcount > 0

    # ------------------------------------------------------------------
    # Ladders
    # ------------------------------------------------------------------

    def mark_entry_filled(self, trade_id: int, level: int, now: datetime) -> bool:
        column = _ENTRY_FILLED_AT[check_level(level) - 1]
        stmt = (
            update(Trade)
            .where(Trade.id == trade_id, column.is_(None))
            .values({column: now, Trade.updated_at: now})
        )
        return self.session.exec(stmt).rowcount > 0

    def mark_profit_achieved(self, trade_id: int, level: int, now: datetime) -> bool:
        column = _PROFIT_ACHIEVED_AT[check_level(level) - 1]
        stmt = (
            update(Trade)
            .where(Trade.id == trade_id, column.is_(None))
            .values({column: now, Trade.updated_at: now})
        )
        return self.session.exec(stmt).rowcount > 0

    def seed_default_profits(self, trade_id: int, profit_1: float, profit_2: float) -> bool:
        stmt = (
            update(Trade)
            .where(Trade.id == trade_id, Trade.profit_1.is_(None), Trade.profit_2.is_(None))
            .values(profit_1=profit_1, profit_2=profit_2)
        )
        return self.session.exec(stmt).rowcount > 0

    def rewrite_entries(self, trade: Trade, rungs: tuple, now: datetime | None = None):
        """Replace all three entry slots with a single UPDATE."""
        apply_entries(trade, rungs)
        trade.updated_at = now or datetime.now(timezone.utc)
        self.session.add(trade)
        self.session.flush()
