"""Core services and cross-cutting concerns."""

from warden.core.database import Base, get_db
from warden.core.errors import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    register_exception_handlers,
)


__all__ = [
    # Errors
    "AppException",
    # Database
    "Base",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "get_db",
    "register_exception_handlers",
]
