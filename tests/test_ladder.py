"""Tests for price tolerance matching and the three-slot ladders."""

from datetime import datetime, timezone

import pytest

from swing_events.engine.errors import InvalidLevelError
from swing_events.engine.ladder import (
    EntryRung,
    ProfitRung,
    apply_entries,
    check_level,
    compact,
    entry_ladder,
    is_compacted,
    profit_ladder,
    rightmost_entry,
)
from swing_events.engine.tolerance import PRICE_TOLERANCE, matches_any, prices_equal
from swing_events.models.trade import Trade

NOW = datetime(2026, 3, 2, 14, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# 1. Tolerance matcher
# ---------------------------------------------------------------------------

class TestPricesEqual:
    def test_extra_decimal_noise_is_equal(self):
        assert prices_equal(150.50000, 150.50001)

    def test_cent_apart_is_not_equal(self):
        assert not prices_equal(150.50, 150.51)

    def test_one_tolerance_apart_is_equal(self):
        assert prices_equal(100.0, 100.00001)
        assert prices_equal(0.12345, 0.12346)

    def test_boundary_is_exclusive(self):
        assert not prices_equal(1.0, 1.0 + 2 * PRICE_TOLERANCE)
        assert prices_equal(1.0, 1.0 + PRICE_TOLERANCE / 2)

    def test_accepts_int_and_float(self):
        assert prices_equal(100, 100.0)


class TestMatchesAny:
    def test_matches_one_candidate(self):
        assert matches_any(105.000001, [100.0, 105.0, 110.0])

    def test_no_match(self):
        assert not matches_any(104.0, [100.0, 105.0])

    def test_empty_candidates(self):
        assert not matches_any(100.0, [])


# ---------------------------------------------------------------------------
# 2. Ladder views
# ---------------------------------------------------------------------------

def _trade(**fields) -> Trade:
    return Trade(symbol="AAPL", direction="Long", **fields)


def test_entry_ladder_reads_all_three_slots():
    trade = _trade(entry_1=100.0, entry_2=105.0, entry_1_filled_at=NOW)
    ladder = entry_ladder(trade)
    assert len(ladder) == 3
    assert ladder[0] == EntryRung(100.0, NOW)
    assert ladder[0].is_filled
    assert ladder[1].is_set and not ladder[1].is_filled
    assert not ladder[2].is_set


def test_profit_ladder_pending_flags():
    trade = _trade(profit_1=103.0, profit_2=106.0, profit_1_achieved_at=NOW)
    ladder = profit_ladder(trade)
    assert ladder[0] == ProfitRung(103.0, NOW)
    assert not ladder[0].is_pending
    assert ladder[1].is_pending
    assert not ladder[2].is_pending


def test_ladder_times_come_back_as_utc():
    # SQLite returns DateTime columns without tzinfo
    trade = _trade(entry_1=100.0, entry_1_filled_at=NOW.replace(tzinfo=None))
    assert entry_ladder(trade)[0] == EntryRung(100.0, NOW)


@pytest.mark.parametrize("level", [0, 4, -1])
def test_check_level_rejects_out_of_range(level):
    with pytest.raises(InvalidLevelError):
        check_level(level)


def test_rightmost_entry():
    assert rightmost_entry(entry_ladder(_trade(entry_1=100.0, entry_2=105.0, entry_3=110.0))) == 3
    assert rightmost_entry(entry_ladder(_trade(entry_1=100.0))) == 1
    assert rightmost_entry(entry_ladder(_trade())) is None


class TestCompaction:
    def test_compact_pads_with_empty_rungs(self):
        result = compact([EntryRung(100.0), EntryRung(110.0)])
        assert [r.threshold for r in result] == [100.0, 110.0, None]

    def test_compact_rejects_more_than_three(self):
        with pytest.raises(InvalidLevelError):
            compact([EntryRung(1.0)] * 4)

    def test_is_compacted(self):
        assert is_compacted((100.0, 110.0, None))
        assert is_compacted((None, None, None))
        assert not is_compacted((None, 110.0, None))
        assert not is_compacted((100.0, None, 110.0))

    def test_apply_entries_moves_fill_times_with_thresholds(self):
        trade = _trade(entry_1=100.0, entry_2=105.0, entry_3=110.0, entry_2_filled_at=NOW)
        apply_entries(trade, compact([EntryRung(105.0, NOW), EntryRung(110.0)]))
        assert (trade.entry_1, trade.entry_2, trade.entry_3) == (105.0, 110.0, None)
        assert trade.entry_1_filled_at == NOW
        assert trade.entry_2_filled_at is None
        assert trade.entry_3_filled_at is None
