"""LedgerEvent model — append-only audit trail and idempotency ledger."""

from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class LedgerEvent(SQLModel, table=True):
    __tablename__ = "lazy_swing_trade_events"
    __table_args__ = (
        UniqueConstraint("trade_id", "event_type", "price", name="ux_trade_events_idempotency"),
    )

    id: int | None = Field(default=None, primary_key=True)
    trade_id: int = Field(index=True)
    symbol: str
    event_type: str  # "entry", "profit", "stop", "jump", "close", "reset"
    target_number: int | None = None
    price: float | None = None  # NULL rows never collide on the unique key
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
