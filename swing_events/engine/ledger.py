"""Idempotency ledger over the lazy_swing_trade_events table.

The ledger is the permanent audit trail and the replay detector. The
database's unique key on (trade_id, event_type, price) is what actually
settles a race between two deliveries; ``has_processed`` is only the cheap
early exit.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from swing_events.engine.errors import DuplicateEventError
from swing_events.engine.tolerance import MATCH_WINDOW
from swing_events.models.ledger_event import LedgerEvent

logger = logging.getLogger(__name__)


def has_processed(session: Session, trade_id: int, event_type: str, price: float | None) -> bool:
    stmt = select(LedgerEvent.id).where(
        LedgerEvent.trade_id == trade_id,
        LedgerEvent.event_type == event_type,
    )
    if price is None:
        stmt = stmt.where(LedgerEvent.price.is_(None))
    else:
        stmt = stmt.where(func.abs(LedgerEvent.price - price) <= MATCH_WINDOW)
    return session.exec(stmt.limit(1)).first() is not None


def record(
    session: Session,
    trade_id: int,
    symbol: str,
    event_type: str,
    target: int | None = None,
    price: float | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> LedgerEvent:
    """Append one row inside the caller's transaction.

    On a unique-key violation the whole transaction is rolled back and
    DuplicateEventError is raised, so nothing the caller staged survives.
    """
    entry = LedgerEvent(
        trade_id=trade_id,
        symbol=symbol,
        event_type=event_type,
        target_number=target,
        price=price,
        notes=notes,
        created_at=now or datetime.now(timezone.utc),
    )
    session.add(entry)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        logger.info(f"Ledger already holds {event_type} at {price} for trade {trade_id}")
        raise DuplicateEventError(trade_id, event_type, price)
    return entry


def history(session: Session, trade_id: int, limit: int = 200, offset: int = 0) -> list[LedgerEvent]:
    stmt = (
        select(LedgerEvent)
        .where(LedgerEvent.trade_id == trade_id)
        .order_by(LedgerEvent.created_at, LedgerEvent.id)
        .offset(offset)
        .limit(limit)
    )
    return list(session.exec(stmt).all())
