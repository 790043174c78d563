"""TradeStop model — protective stops attached to a trade."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class TradeStop(SQLModel, table=True):
    __tablename__ = "lazy_swing_trade_stops"

    id: int | None = Field(default=None, primary_key=True)
    trade_id: int = Field(foreign_key="lazy_swing_trades.id", index=True)
    stop_type: str  # "daily" or "weekly"
    operator: str  # "below" (Long) or "above" (Short)
    price: float
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    triggered_at: datetime | None = None
