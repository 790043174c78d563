"""Pydantic schemas for the trade admin API."""

from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from swing_events.utils.constants import MANUAL_OUTCOMES


class StopRead(BaseModel):
    id: int
    stop_type: str
    operator: str
    price: float
    created_at: datetime
    triggered_at: datetime | None

    model_config = {"from_attributes": True}


class TradeRead(BaseModel):
    id: int
    symbol: str
    direction: str
    entry_1: float | None
    entry_2: float | None
    entry_3: float | None
    entry_1_filled_at: datetime | None
    entry_2_filled_at: datetime | None
    entry_3_filled_at: datetime | None
    profit_1: float | None
    profit_2: float | None
    profit_3: float | None
    profit_1_achieved_at: datetime | None
    profit_2_achieved_at: datetime | None
    profit_3_achieved_at: datetime | None
    stop_price: float | None
    stop_period: str | None
    status: str
    outcome: str | None
    closed_at: datetime | None
    closed_notes: str | None
    eligible: bool
    entry_log: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TradeDetail(TradeRead):
    stops: list[StopRead] = []


class LedgerEventRead(BaseModel):
    id: int
    trade_id: int
    symbol: str
    event_type: str
    target_number: int | None
    price: float | None
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class ResetRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)

    @field_validator("reason")
    @classmethod
    def _trim_reason(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class CloseRequest(BaseModel):
    outcome: str
    notes: str = Field(default="", max_length=500)

    @field_validator("outcome")
    @classmethod
    def _validate_outcome(cls, value: str) -> str:
        if value not in MANUAL_OUTCOMES:
            allowed = ", ".join(MANUAL_OUTCOMES)
            raise ValueError(f"must be one of: {allowed}")
        return value


class TransitionRead(BaseModel):
    trade_id: int | None
    status: str
    message: str = ""
