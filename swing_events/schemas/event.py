"""Pydantic schemas for inbound trade events.

Field names on the wire are camelCase (``tradeId``, ``entryThreshold``);
the models accept either spelling.
"""

import base64
import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TradeEvent(_CamelModel):
    """Common envelope; ``data`` is validated per event kind by the router."""

    event_type: str = Field(min_length=1)
    symbol: str = Field(min_length=1, max_length=32)
    trade_id: int
    direction: Literal["Long", "Short"]
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("symbol")
    @classmethod
    def _trim_symbol(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class EntryHitData(_CamelModel):
    entry_level: int = Field(ge=1, le=3)
    entry_threshold: float


class ProfitHitData(_CamelModel):
    profit_level: int = Field(ge=1, le=3)
    profit_threshold: float


class StopEventData(_CamelModel):
    stop_level: float
    stop_type: Literal["DC", "WC"]
    current_price: float
    loss_amount: float | None = None
    loss_percent: float | None = None


class JumpedEntry(_CamelModel):
    entry_level: int = Field(ge=1, le=3)
    entry_threshold: float


class JumpTargetData(_CamelModel):
    jumped_entries: list[JumpedEntry] = Field(default_factory=list)
    open_price: float


class PubSubMessage(_CamelModel):
    data: str
    message_id: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)


class PubSubPush(BaseModel):
    """Push-subscription request body."""

    message: PubSubMessage
    subscription: str | None = None

    def decode_event(self) -> TradeEvent:
        raw = base64.b64decode(self.message.data)
        return TradeEvent.model_validate(json.loads(raw))
