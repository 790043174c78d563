"""Tests for EventProcessor: routing, dispatch and the event log."""

import pytest
from pydantic import ValidationError
from sqlmodel import Session, select

from swing_events.engine.errors import TradeNotFoundError
from swing_events.engine.intents import (
    APPLIED,
    DUPLICATE,
    IGNORED,
    AlertIntent,
    StopTrackingIntent,
    TransitionResult,
)
from swing_events.engine.router import EVENT_HANDLERS, EventProcessor
from swing_events.models.event_log import EventLog
from swing_events.services.publishers import PublishError


@pytest.fixture
def processor(engine, publishers):
    return EventProcessor(engine, publishers)


def _event_logs(engine) -> list[EventLog]:
    with Session(engine) as session:
        return list(session.exec(select(EventLog).order_by(EventLog.id)).all())


def test_every_event_kind_has_a_handler():
    assert set(EVENT_HANDLERS) == {"entry-hit", "profit-hit", "stop-out", "stop-warning", "jump-target"}


# ---------------------------------------------------------------------------
# 1. Routing
# ---------------------------------------------------------------------------

def test_unknown_event_is_ignored(processor, engine, make_trade, make_event, publishers):
    trade_id = make_trade()

    result = processor.process(make_event("target-moved", trade_id, {}))

    assert result.status == IGNORED
    assert publishers.alerts.sent == []
    logs = _event_logs(engine)
    assert [(log.event_type, log.status) for log in logs] == [("target-moved", "ignored")]


def test_entry_event_end_to_end(processor, engine, make_trade, make_event, publishers, fetch_trade):
    trade_id = make_trade(entry_1=100.0)

    result = processor.process(make_event("entry-hit", trade_id, {"entryLevel": 1, "entryThreshold": 100.0}))

    assert result.status == APPLIED
    assert fetch_trade(trade_id).entry_1_filled_at is not None
    assert publishers.alerts.sent == [("AAPL", "entry-hit", {"entryLevel": 1})]
    snapshot, stage = publishers.promo.sent[0]
    assert stage == "entry"
    assert snapshot.stop_price == 100.0
    assert publishers.chat.sent == ["📈 AAPL (Long) crossed entry_1 (100.0)"]

    log = _event_logs(engine)[0]
    assert log.status == "applied"
    assert log.trade_id == trade_id
    assert log.payload["eventType"] == "entry-hit"
    assert log.execution_time_ms >= 0


def test_duplicate_sends_nothing(processor, engine, make_trade, make_event, publishers):
    trade_id = make_trade(entry_1=100.0)
    event = make_event("entry-hit", trade_id, {"entryLevel": 1, "entryThreshold": 100.0})

    processor.process(event)
    result = processor.process(event)

    assert result.status == DUPLICATE
    assert len(publishers.alerts.sent) == 1
    assert len(publishers.chat.sent) == 1
    assert [log.status for log in _event_logs(engine)] == ["applied", "duplicate"]


def test_closing_event_signals_tracking(processor, make_trade, make_stop, make_event, publishers):
    trade_id = make_trade(entry_1=100.0)
    make_stop(trade_id)

    processor.process(make_event("stop-out", trade_id, {
        "stopLevel": 95.0, "stopType": "DC", "currentPrice": 94.0,
    }))

    assert publishers.alerts.sent[0][1] == "stop-out"
    assert publishers.tracking.sent == [("AAPL", f"Trade {trade_id} closed (stopped_out)")]


# ---------------------------------------------------------------------------
# 2. Failures
# ---------------------------------------------------------------------------

def test_alert_failure_propagates_and_retry_is_duplicate(processor, engine, make_trade, make_event, publishers, fetch_trade):
    trade_id = make_trade(entry_1=100.0)
    event = make_event("entry-hit", trade_id, {"entryLevel": 1, "entryThreshold": 100.0})
    publishers.alerts.fail = True

    with pytest.raises(PublishError):
        processor.process(event)

    # The transition itself committed before dispatch
    assert fetch_trade(trade_id).entry_1_filled_at is not None
    assert _event_logs(engine)[-1].status == "error"

    publishers.alerts.fail = False
    assert processor.process(event).status == DUPLICATE


def test_promo_failure_is_swallowed(processor, make_trade, make_event, publishers, caplog):
    trade_id = make_trade(entry_1=100.0)
    publishers.promo.fail = True

    result = processor.process(make_event("entry-hit", trade_id, {"entryLevel": 1, "entryThreshold": 100.0}))

    assert result.status == APPLIED
    assert len(publishers.alerts.sent) == 1
    assert "Promo system error" in caplog.text


def test_tracking_failure_propagates(processor, make_trade, make_stop, make_event, publishers):
    trade_id = make_trade()
    make_stop(trade_id)
    publishers.tracking.fail = True

    with pytest.raises(PublishError):
        processor.process(make_event("stop-out", trade_id, {
            "stopLevel": 95.0, "stopType": "DC", "currentPrice": 94.0,
        }))


def test_chat_failure_does_not_fail_event(processor, make_trade, make_event, publishers):
    trade_id = make_trade(entry_1=100.0)

    def _broken(message):
        raise RuntimeError("chat down")

    publishers.chat.send = _broken

    result = processor.process(make_event("entry-hit", trade_id, {"entryLevel": 1, "entryThreshold": 100.0}))

    assert result.status == APPLIED


def test_missing_trade_is_logged_and_raised(processor, engine, make_event):
    with pytest.raises(TradeNotFoundError):
        processor.process(make_event("entry-hit", 77, {"entryLevel": 1, "entryThreshold": 100.0}))

    assert _event_logs(engine)[-1].status == "error"


def test_invalid_payload_raises(processor, make_trade, make_event):
    trade_id = make_trade()

    with pytest.raises(ValidationError):
        processor.process(make_event("entry-hit", trade_id, {"entryLevel": 4, "entryThreshold": 100.0}))


def test_unknown_intent_is_rejected(processor):
    with pytest.raises(TypeError):
        processor.dispatch(TransitionResult(1, APPLIED, intents=[object()]))


def test_dispatch_order(processor, publishers):
    calls = []
    publishers.alerts.publish = lambda *args: calls.append("alert")
    publishers.tracking.stop_tracking = lambda *args: calls.append("tracking")

    processor.dispatch(TransitionResult(1, APPLIED, intents=[
        AlertIntent("AAPL", "stop-out", {}),
        StopTrackingIntent("AAPL", "closed"),
    ]))

    assert calls == ["alert", "tracking"]


# ---------------------------------------------------------------------------
# 3. Admin operations
# ---------------------------------------------------------------------------

def test_reset_sends_chat(processor, make_trade, publishers, fetch_trade):
    trade_id = make_trade(entry_1=100.0)

    result = processor.reset(trade_id, "new setup")

    assert result.status == APPLIED
    assert fetch_trade(trade_id).entry_1 is None
    assert publishers.chat.sent == [f"🔄 Reset: trade {trade_id} - new setup"]


def test_close_signals_tracking(processor, make_trade, publishers):
    trade_id = make_trade()

    result = processor.close(trade_id, "expired", "setup expired")

    assert result.status == APPLIED
    assert publishers.tracking.sent == [("AAPL", f"Trade {trade_id} closed (expired)")]
    assert publishers.chat.sent == [f"✋ Closed: trade {trade_id} (expired)"]


def test_chat_line_from_snake_case_payload(processor, make_trade, make_event, publishers):
    trade_id = make_trade(entry_1=100.0)

    processor.process(make_event("entry-hit", trade_id, {"entry_level": 1, "entry_threshold": 100.0}))

    assert publishers.chat.sent == ["📈 AAPL (Long) crossed entry_1 (100.0)"]
