"""Shared base for domain entities"""

from datetime import datetime, timezone
from sqlalchemy import BigInteger, DateTime, Integer
from sqlmodel import Column, SQLModel

# SQLite only autoincrements INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer(), "sqlite")


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp"""
    return datetime.now(timezone.utc)


def timestamp_column(nullable: bool = False) -> Column:
    # a Column instance belongs to one table, so every field needs its own
    return Column(DateTime(timezone=True), nullable=nullable)


class BaseModel(SQLModel):
    pass
