"""Tests for reset, the shared closer and manual close."""

from datetime import datetime, timezone

import pytest
from sqlmodel import Session

from swing_events.engine.closer import close_manually, close_trade
from swing_events.engine.errors import TradeNotFoundError
from swing_events.engine.intents import APPLIED, STALE, StopTrackingIntent
from swing_events.engine.reset import apply_reset, reset_log_line
from swing_events.engine.store import TradeStore
from swing_events.utils.timestamps import as_utc


NOW = datetime(2024, 3, 4, 9, 15, 0, tzinfo=timezone.utc)
FILLED = datetime(2024, 3, 1, 14, 30, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# 1. Reset
# ---------------------------------------------------------------------------

def test_reset_log_line():
    assert reset_log_line("new setup", NOW) == "RESET: new setup on 2024-03-04 09:15:00\n"


def test_reset_clears_everything(engine, make_trade, make_stop, fetch_trade, fetch_stops, fetch_ledger):
    trade_id = make_trade(
        entry_1=100.0, entry_1_filled_at=FILLED, entry_2=95.0,
        profit_1=103.0, profit_1_achieved_at=FILLED, profit_2=106.0,
        stop_price=100.0, stop_period="daily", eligible=False,
    )
    make_stop(trade_id, stop_type="daily", price=100.0)
    make_stop(trade_id, stop_type="weekly", price=92.0)

    with Session(engine) as session:
        result = apply_reset(session, trade_id, "new setup", now=NOW)

    assert result.status == APPLIED
    trade = fetch_trade(trade_id)
    assert [trade.entry_1, trade.entry_2, trade.entry_3] == [None, None, None]
    assert trade.entry_1_filled_at is None
    assert [trade.profit_1, trade.profit_2, trade.profit_3] == [None, None, None]
    assert trade.profit_1_achieved_at is None
    assert trade.stop_price is None
    assert trade.eligible is True
    assert trade.entry_log == "RESET: new setup on 2024-03-04 09:15:00\n"
    assert fetch_stops(trade_id) == []
    assert fetch_ledger(trade_id, "reset")[0].notes == "Reset: new setup"


def test_reset_appends_to_entry_log(engine, make_trade, fetch_trade):
    trade_id = make_trade(entry_log="first line\n")

    with Session(engine) as session:
        apply_reset(session, trade_id, "one", now=NOW)
    with Session(engine) as session:
        apply_reset(session, trade_id, "two", now=NOW)

    assert fetch_trade(trade_id).entry_log == (
        "first line\n"
        "RESET: one on 2024-03-04 09:15:00\n"
        "RESET: two on 2024-03-04 09:15:00\n"
    )


def test_reset_reopens_closed_trade(engine, make_trade, fetch_trade):
    trade_id = make_trade(status="closed", outcome="stopped_out", closed_at=FILLED, closed_notes="out")

    with Session(engine) as session:
        apply_reset(session, trade_id, "re-arm", now=NOW)

    trade = fetch_trade(trade_id)
    assert trade.status == "open"
    assert trade.outcome is None
    assert trade.closed_at is None
    assert trade.closed_notes is None


def test_reset_missing_trade(engine):
    with Session(engine) as session:
        with pytest.raises(TradeNotFoundError):
            apply_reset(session, 12345, "nothing")


# ---------------------------------------------------------------------------
# 2. Closer
# ---------------------------------------------------------------------------

def test_close_trade_once(engine, make_trade, fetch_trade, fetch_ledger):
    trade_id = make_trade()

    with Session(engine) as session:
        trade = TradeStore(session).get_trade(trade_id)
        first = close_trade(session, trade, "profit", "done", now=NOW)
        second = close_trade(session, trade, "stopped_out", "again", now=NOW)
        session.commit()

    assert first == StopTrackingIntent(symbol="AAPL", reason=f"Trade {trade_id} closed (profit)")
    assert second is None
    trade = fetch_trade(trade_id)
    assert trade.outcome == "profit"
    assert as_utc(trade.closed_at) == NOW
    assert [e.notes for e in fetch_ledger(trade_id, "close")] == ["profit: done"]


def test_close_manually(engine, make_trade, fetch_trade):
    trade_id = make_trade()

    with Session(engine) as session:
        result = close_manually(session, trade_id, "expired")

    assert result.status == APPLIED
    assert isinstance(result.intents[0], StopTrackingIntent)
    trade = fetch_trade(trade_id)
    assert trade.outcome == "expired"
    assert trade.closed_notes == "Closed manually (expired)"


def test_close_manually_already_closed(engine, make_trade):
    trade_id = make_trade(status="closed", outcome="profit")

    with Session(engine) as session:
        result = close_manually(session, trade_id, "manual_reset", "admin")

    assert result.status == STALE
    assert result.intents == []


def test_close_manually_rejects_engine_outcomes(engine, make_trade):
    trade_id = make_trade()

    with Session(engine) as session:
        with pytest.raises(ValueError):
            close_manually(session, trade_id, "profit")
