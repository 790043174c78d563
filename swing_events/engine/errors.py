"""Exceptions raised by the trade lifecycle engine."""


class TradeNotFoundError(LookupError):
    """The event references a trade id that does not exist."""

    def __init__(self, trade_id: int):
        super().__init__(f"Trade {trade_id} not found")
        self.trade_id = trade_id


class DuplicateEventError(Exception):
    """The ledger already holds this (trade, event type, price) tuple."""

    def __init__(self, trade_id: int, event_type: str, price: float | None):
        super().__init__(f"{event_type} at {price} for trade {trade_id} already processed")
        self.trade_id = trade_id
        self.event_type = event_type
        self.price = price


class InvalidLevelError(ValueError):
    pass
