"""Trade model — one row per tracked swing trade."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class Trade(SQLModel, table=True):
    __tablename__ = "lazy_swing_trades"

    id: int | None = Field(default=None, primary_key=True)
    symbol: str = Field(index=True)
    direction: str  # "Long" or "Short"

    # Entry ladder (left-compacted: no NULL before a non-NULL slot)
    entry_1: float | None = None
    entry_2: float | None = None
    entry_3: float | None = None
    entry_1_filled_at: datetime | None = None
    entry_2_filled_at: datetime | None = None
    entry_3_filled_at: datetime | None = None

    # Profit ladder
    profit_1: float | None = None
    profit_2: float | None = None
    profit_3: float | None = None
    profit_1_achieved_at: datetime | None = None
    profit_2_achieved_at: datetime | None = None
    profit_3_achieved_at: datetime | None = None

    # Summary of the most recently placed stop
    stop_price: float | None = None
    stop_period: str | None = None  # "daily" or "weekly"

    # Lifecycle
    status: str = Field(default="open", index=True)  # "open", "closed"
    outcome: str | None = None  # "profit", "stopped_out", "jumped", "manual_reset", "expired"
    closed_at: datetime | None = None
    closed_notes: str | None = None
    eligible: bool = True
    entry_log: str | None = None  # append-only

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
