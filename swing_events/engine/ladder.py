"""Entry and profit ladders as fixed three-slot sequences.

The trade row stores each ladder as flat columns; the engine works on
tuples of per-level records instead, so a level number is an index and not
part of a column name.
"""

from dataclasses import dataclass
from datetime import datetime

from swing_events.engine.errors import InvalidLevelError
from swing_events.models.trade import Trade
from swing_events.utils.timestamps import as_utc

LEVELS = (1, 2, 3)


@dataclass(frozen=True)
class EntryRung:
    threshold: float | None
    filled_at: datetime | None = None

    @property
    def is_set(self) -> bool:
        return self.threshold is not None

    @property
    def is_filled(self) -> bool:
        return self.filled_at is not None


@dataclass(frozen=True)
class ProfitRung:
    price: float | None
    achieved_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.price is not None and self.achieved_at is None


def check_level(level: int) -> int:
    if level not in LEVELS:
        raise InvalidLevelError(f"Ladder level must be one of {LEVELS}, got {level!r}")
    return level


def entry_ladder(trade: Trade) -> tuple[EntryRung, EntryRung, EntryRung]:
    return (
        EntryRung(trade.entry_1, as_utc(trade.entry_1_filled_at)),
        EntryRung(trade.entry_2, as_utc(trade.entry_2_filled_at)),
        EntryRung(trade.entry_3, as_utc(trade.entry_3_filled_at)),
    )


def profit_ladder(trade: Trade) -> tuple[ProfitRung, ProfitRung, ProfitRung]:
    return (
        ProfitRung(trade.profit_1, as_utc(trade.profit_1_achieved_at)),
        ProfitRung(trade.profit_2, as_utc(trade.profit_2_achieved_at)),
        ProfitRung(trade.profit_3, as_utc(trade.profit_3_achieved_at)),
    )


def rung_at(ladder: tuple, level: int):
    return ladder[check_level(level) - 1]


def rightmost_entry(ladder: tuple[EntryRung, ...]) -> int | None:
    """Highest level holding a threshold, or None for an empty ladder."""
    for level in reversed(LEVELS):
        if ladder[level - 1].is_set:
            return level
    return None


def compact(rungs: list[EntryRung]) -> tuple[EntryRung, EntryRung, EntryRung]:
    """Left-compact surviving rungs into three slots, padding with empty rungs."""
    if len(rungs) > len(LEVELS):
        raise InvalidLevelError(f"At most {len(LEVELS)} entries fit the ladder, got {len(rungs)}")
    padded = list(rungs) + [EntryRung(None)] * (len(LEVELS) - len(rungs))
    return padded[0], padded[1], padded[2]


def is_compacted(values: tuple) -> bool:
    """No None precedes a non-None value."""
    seen_gap = False
    for value in values:
        if value is None:
            seen_gap = True
        elif seen_gap:
            return False
    return True


def apply_entries(trade: Trade, rungs: tuple[EntryRung, EntryRung, EntryRung]):
    """Write all three entry slots, thresholds and fill times, onto the row."""
    if len(rungs) != len(LEVELS):
        raise InvalidLevelError(f"Entry ladder needs exactly {len(LEVELS)} slots")
    first, second, third = rungs
    trade.entry_1, trade.entry_1_filled_at = first.threshold, first.filled_at
    trade.entry_2, trade.entry_2_filled_at = second.threshold, second.filled_at
    trade.entry_3, trade.entry_3_filled_at = third.threshold, third.filled_at


def clear_ladders(trade: Trade):
    trade.entry_1 = trade.entry_2 = trade.entry_3 = None
    trade.entry_1_filled_at = trade.entry_2_filled_at = trade.entry_3_filled_at = None
    trade.profit_1 = trade.profit_2 = trade.profit_3 = None
    trade.profit_1_achieved_at = trade.profit_2_achieved_at = trade.profit_3_achieved_at = None
