"""SQLModel database engine and session management."""

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

from swing_events.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    # SQLite needs check_same_thread=False; PostgreSQL does not
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=False, connect_args=connect_args)


engine = build_engine(settings.database_url)


def _run_migrations(target: Engine):
    """Backfill the ledger's idempotency index on tables created before it existed."""
    from sqlalchemy import text

    inspector = inspect(target)

    if "lazy_swing_trade_events" not in inspector.get_table_names():
        return

    existing_indexes = inspector.get_indexes("lazy_swing_trade_events")
    existing_uniques = inspector.get_unique_constraints("lazy_swing_trade_events")
    names = {idx["name"] for idx in existing_indexes} | {uc["name"] for uc in existing_uniques}
    if "ux_trade_events_idempotency" not in names:
        logger.info("Migrating: adding unique index on lazy_swing_trade_events (trade_id, event_type, price)")
        with target.connect() as conn:
            conn.execute(text(
                "CREATE UNIQUE INDEX ux_trade_events_idempotency "
                "ON lazy_swing_trade_events (trade_id, event_type, price)"
            ))
            conn.commit()


def create_db_and_tables(target: Engine | None = None):
    """Create all tables. Called on startup."""
    import swing_events.models  # noqa: F401  (registers the tables)

    target = target or engine
    SQLModel.metadata.create_all(target)
    _run_migrations(target)


def get_session() -> Session:
    """Dependency that yields a database session."""
    with Session(engine) as session:
        yield session
