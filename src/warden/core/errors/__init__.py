"""Error handling module with RFC 7807 Problem Details."""

from warden.core.errors.exceptions import (
    AppException,
    BadRequestError,
    ConfigurationEmptyError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PermissionNotFoundError,
    RoleNotFoundError,
)
from warden.core.errors.handlers import ProblemDetail, register_exception_handlers


__all__ = [
    # Exceptions
    "AppException",
    "BadRequestError",
    "ConfigurationEmptyError",
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "PermissionNotFoundError",
    # Handlers
    "ProblemDetail",
    "RoleNotFoundError",
    "register_exception_handlers",
]
