"""
Base model class and shared column helpers for SQLAlchemy ORM.

Re-exports the Base class from the database module for convenience.
"""

import uuid
from datetime import datetime, timezone

from catalog.db import Base


def generate_id() -> str:
    """Primary keys are opaque string UUIDs."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = ["Base", "generate_id", "utcnow"]
