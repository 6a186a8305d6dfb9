"""Database layer - session management, base models, and mixins."""

from warden.core.database.base import (
    Base,
    IntegerIDMixin,
    SoftDeleteMixin,
    TimestampMixin,
)
from warden.core.database.session import (
    create_engine,
    create_session_factory,
    create_tables,
    get_db,
    get_session_factory,
    session_scope,
)


__all__ = [
    "Base",
    "IntegerIDMixin",
    "SoftDeleteMixin",
    "TimestampMixin",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "get_db",
    "get_session_factory",
    "session_scope",
]
