"""CLI tool for admin operations.

Usage:
    python -m swing_events.cli init-db
    python -m swing_events.cli replay <event.json>
    python -m swing_events.cli reset <trade_id> <reason...>
    python -m swing_events.cli close <trade_id> <manual_reset|expired> [notes...]
"""

import json
import sys
from pathlib import Path

from pydantic import ValidationError

from swing_events.config import settings
from swing_events.database import engine, create_db_and_tables
from swing_events.engine.errors import TradeNotFoundError
from swing_events.engine.router import EventProcessor
from swing_events.schemas.event import TradeEvent
from swing_events.services.publishers import PublishError, build_publishers
from swing_events.utils.constants import MANUAL_OUTCOMES
from swing_events.utils.logging import setup_logging

COMMANDS = "init-db, replay, reset, close"


def _processor() -> EventProcessor:
    create_db_and_tables()
    return EventProcessor(engine, build_publishers(settings))


def init_db():
    """Create tables and backfill indexes."""
    create_db_and_tables()
    print("Database ready.")


def replay(path: str):
    """Process one event envelope read from a JSON file, as if it had been delivered."""
    file = Path(path)
    if not file.is_file():
        print(f"File not found: {path}")
        sys.exit(1)

    try:
        event = TradeEvent.model_validate(json.loads(file.read_text()))
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"Invalid event file: {e}")
        sys.exit(1)

    processor = _processor()
    try:
        result = processor.process(event)
    finally:
        processor.publishers.close()
    print(f"{event.event_type} for trade {event.trade_id}: {result.status} {result.message}")


def reset(trade_id: str, reason: str):
    processor = _processor()
    try:
        result = processor.reset(int(trade_id), reason)
    finally:
        processor.publishers.close()
    print(f"Trade {trade_id}: {result.message}")


def close(trade_id: str, outcome: str, notes: str):
    if outcome not in MANUAL_OUTCOMES:
        print(f"Outcome must be one of: {', '.join(MANUAL_OUTCOMES)}")
        sys.exit(1)
    processor = _processor()
    try:
        result = processor.close(int(trade_id), outcome, notes)
    finally:
        processor.publishers.close()
    print(f"Trade {trade_id}: {result.status} {result.message}")


def main():
    setup_logging()
    if len(sys.argv) < 2:
        print("Usage: python -m swing_events.cli <command> [args]")
        print(f"Commands: {COMMANDS}")
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]
    try:
        if command == "init-db":
            init_db()
        elif command == "replay" and len(args) == 1:
            replay(args[0])
        elif command == "reset" and len(args) >= 2 and args[0].isdigit():
            reset(args[0], " ".join(args[1:]))
        elif command == "close" and len(args) >= 2 and args[0].isdigit():
            close(args[0], args[1], " ".join(args[2:]))
        else:
            print(f"Unknown command or bad arguments: {' '.join(sys.argv[1:])}")
            print(f"Commands: {COMMANDS}")
            sys.exit(1)
    except TradeNotFoundError as e:
        print(str(e))
        sys.exit(1)
    except PublishError as e:
        print(f"Notification failed: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
