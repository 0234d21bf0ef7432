# ghost/models/base.py
"""
Base model and helpers for all database tables.
"""
from datetime import datetime, timezone
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    SQLite drops tzinfo on the way back, stored values are always UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
