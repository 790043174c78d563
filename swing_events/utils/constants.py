"""Shared constants for the trade lifecycle."""

LONG = "Long"
SHORT = "Short"
DIRECTIONS = (LONG, SHORT)

# Trade status
STATUS_OPEN = "open"
STATUS_CLOSED = "closed"

# Close outcomes
OUTCOME_PROFIT = "profit"
OUTCOME_STOPPED_OUT = "stopped_out"
OUTCOME_JUMPED = "jumped"
OUTCOME_MANUAL_RESET = "manual_reset"
OUTCOME_EXPIRED = "expired"
MANUAL_OUTCOMES = (OUTCOME_MANUAL_RESET, OUTCOME_EXPIRED)

# Stops
STOP_DAILY = "daily"
STOP_WEEKLY = "weekly"
OPERATOR_BELOW = "below"
OPERATOR_ABOVE = "above"

# Stop type codes carried by stop-out / stop-warning events
STOP_CODE_TYPES: dict[str, str] = {
    "DC": STOP_DAILY,
    "WC": STOP_WEEKLY,
}

# Inbound event kinds
EVENT_ENTRY_HIT = "entry-hit"
EVENT_PROFIT_HIT = "profit-hit"
EVENT_STOP_OUT = "stop-out"
EVENT_STOP_WARNING = "stop-warning"
EVENT_JUMP_TARGET = "jump-target"

# Ledger event types
LEDGER_ENTRY = "entry"
LEDGER_PROFIT = "profit"
LEDGER_STOP = "stop"
LEDGER_JUMP = "jump"
LEDGER_CLOSE = "close"
LEDGER_RESET = "reset"

# Default profit targets seeded on the first fill, as multiples of the entry
DEFAULT_PROFIT_MULTIPLIERS: dict[str, tuple[float, float]] = {
    LONG: (1.03, 1.06),
    SHORT: (0.97, 0.94),
}


def stop_operator(direction: str) -> str:
    """A long position is stopped below its stop price, a short one above."""
    return OPERATOR_BELOW if direction == LONG else OPERATOR_ABOVE
