"""Timestamp helpers shared by models and the engine clock."""

import datetime

from sqlalchemy import Column, DateTime


def utcnow() -> datetime.datetime:
    """Current UTC time as a naive datetime (the form the database stores)."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def timestamp_column(nullable: bool = False) -> Column:
    """
    Plain ``DATETIME`` column holding naive UTC values.

    Declared explicitly so SQLModel binds the value as-is instead of
    requiring timezone information on write.
    """
    return Column(DateTime(timezone=False), nullable=nullable)
