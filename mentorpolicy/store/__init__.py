"""Attribute stores resolving subjects for policy checks."""

from __future__ import annotations

import os
from typing import Optional

from ..config import PolicyConfig, load_config
from .attributes import build_subject
from .inmemory import InMemoryAttributeStore
from .models import CourseRecord, UserRecord
from .repository import AttributeStore
from .sqlite import SQLiteAttributeStore

try:  # pragma: no cover - optional dependency
    from .postgres import PostgresAttributeStore
except ImportError:  # pragma: no cover - optional dependency
    PostgresAttributeStore = None  # type: ignore

_store_instance: AttributeStore | None = None


def get_attribute_store(
    database_url: Optional[str] = None, config: Optional[PolicyConfig] = None
) -> AttributeStore:
    """Factory function to obtain an attribute store.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``MENTORPOLICY_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory store is returned.
    """

    global _store_instance
    if _store_instance is not None and database_url is None and config is None:
        return _store_instance

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("MENTORPOLICY_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.database_url
    )

    if not database_url:
        _store_instance = InMemoryAttributeStore(config.roles)
        return _store_instance

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        _store_instance = SQLiteAttributeStore(path, config.roles)
    elif database_url.startswith("postgres://") or database_url.startswith(
        "postgresql://"
    ):
        if PostgresAttributeStore is None:
            raise RuntimeError("Postgres support not available")
        _store_instance = PostgresAttributeStore(database_url, config.roles)
    else:
        raise ValueError(f"Unsupported database backend: {database_url}")

    return _store_instance


__all__ = [
    "AttributeStore",
    "CourseRecord",
    "UserRecord",
    "InMemoryAttributeStore",
    "SQLiteAttributeStore",
    "PostgresAttributeStore",
    "build_subject",
    "get_attribute_store",
]
