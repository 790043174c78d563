"""EventLog model — one row per processed event delivery."""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class EventLog(SQLModel, table=True):
    __tablename__ = "trade_event_log"

    id: int | None = Field(default=None, primary_key=True)
    trade_id: int | None = Field(default=None, index=True)
    symbol: str | None = None
    event_type: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: str  # "applied", "duplicate", "stale", "ignored", "error"
    execution_time_ms: int | None = None
    message: str | None = None
    payload: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
