"""Timestamp normalisation.

Every timestamp the service writes is UTC. SQLite hands DateTime columns
back without tzinfo, PostgreSQL with it.
"""

from datetime import datetime, timezone


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
