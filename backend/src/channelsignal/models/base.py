"""Declarative base, shared column types and defaults for all models."""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

# Address lists: JSONB on PostgreSQL, plain JSON on SQLite (tests)
AddressList = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used as the Python-side column default."""
    return datetime.now(timezone.utc)


Base = declarative_base()
