"""Shared fixtures: in-memory database, trade factory, fake publishers."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

from swing_events.database import create_db_and_tables
from swing_events.models.ledger_event import LedgerEvent
from swing_events.models.stop import TradeStop
from swing_events.models.trade import Trade
from swing_events.schemas.event import TradeEvent
from swing_events.services.publishers import PublishError, Publishers


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def make_trade(engine):
    """Insert a trade and return its id."""
    def _make(**fields) -> int:
        values = {"symbol": "AAPL", "direction": "Long"} | fields
        with Session(engine) as session:
            trade = Trade(**values)
            session.add(trade)
            session.commit()
            session.refresh(trade)
            return trade.id
    return _make


@pytest.fixture
def make_stop(engine):
    def _make(trade_id: int, stop_type: str = "daily", price: float = 95.0, operator: str = "below", **fields) -> int:
        with Session(engine) as session:
            stop = TradeStop(trade_id=trade_id, stop_type=stop_type, operator=operator, price=price, **fields)
            session.add(stop)
            session.commit()
            session.refresh(stop)
            return stop.id
    return _make


@pytest.fixture
def fetch_trade(engine):
    def _fetch(trade_id: int) -> Trade:
        with Session(engine) as session:
            return session.get(Trade, trade_id)
    return _fetch


@pytest.fixture
def fetch_stops(engine):
    def _fetch(trade_id: int) -> list[TradeStop]:
        with Session(engine) as session:
            return list(session.exec(
                select(TradeStop).where(TradeStop.trade_id == trade_id).order_by(TradeStop.id)
            ).all())
    return _fetch


@pytest.fixture
def fetch_ledger(engine):
    def _fetch(trade_id: int, event_type: str | None = None) -> list[LedgerEvent]:
        stmt = select(LedgerEvent).where(LedgerEvent.trade_id == trade_id)
        if event_type is not None:
            stmt = stmt.where(LedgerEvent.event_type == event_type)
        with Session(engine) as session:
            return list(session.exec(stmt.order_by(LedgerEvent.id)).all())
    return _fetch


@pytest.fixture
def make_event():
    def _make(event_type: str, trade_id: int, data: dict, symbol: str = "AAPL", direction: str = "Long") -> TradeEvent:
        return TradeEvent.model_validate({
            "eventType": event_type,
            "symbol": symbol,
            "tradeId": trade_id,
            "direction": direction,
            "data": data,
        })
    return _make


# ---------------------------------------------------------------------------
# Fake publishers
# ---------------------------------------------------------------------------

class FakeAlerts:
    def __init__(self):
        self.sent = []
        self.fail = False

    def publish(self, symbol, event_type, data):
        if self.fail:
            raise PublishError("alert sender unavailable")
        self.sent.append((symbol, event_type, data))


class FakePromo:
    def __init__(self):
        self.sent = []
        self.fail = False

    def publish(self, snapshot, stage):
        if self.fail:
            raise PublishError("promo endpoint unavailable")
        self.sent.append((snapshot, stage))


class FakeTracking:
    def __init__(self):
        self.sent = []
        self.fail = False

    def stop_tracking(self, symbol, reason):
        if self.fail:
            raise PublishError("price watcher unavailable")
        self.sent.append((symbol, reason))


class FakeChat:
    def __init__(self):
        self.sent = []

    def send(self, message):
        self.sent.append(message)


@pytest.fixture
def publishers():
    return Publishers(alerts=FakeAlerts(), promo=FakePromo(), tracking=FakeTracking(), chat=FakeChat())
