"""Domain exceptions for the package.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
Authorization checks never raise them for a missing grant; only the gate
turns a denied check into a ``ForbiddenError``.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all package errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Permission not found", resource="permission", resource_id=slug)
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Role already exists", details={"slug": slug})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ForbiddenError(AppException):
    """Raised when a principal may not perform the requested action."""

    message = "Unauthorized action."
    error_code = "forbidden"
    status_code = 403


class BadRequestError(AppException):
    """Raised for general client errors."""

    message = "Bad request"
    error_code = "bad_request"
    status_code = 400


class RoleNotFoundError(BadRequestError):
    """Raised when assigning a role slug that does not exist.

    Example:
        raise RoleNotFoundError("editor")
    """

    error_code = "role_not_found"

    def __init__(self, role_slug: str) -> None:
        self.role_slug = role_slug
        super().__init__(
            f"Role [{role_slug}] not found.",
            details={"role": role_slug},
        )


class PermissionNotFoundError(NotFoundError):
    """Raised when an operation targets a permission slug that does not exist."""

    error_code = "permission_not_found"

    def __init__(self, permission_slug: str) -> None:
        self.permission_slug = permission_slug
        super().__init__(
            f"Permission [{permission_slug}] not found.",
            resource="permission",
            resource_id=permission_slug,
        )


class ConfigurationError(AppException):
    """Raised when the roles configuration cannot be read or validated."""

    message = "Invalid roles configuration"
    error_code = "configuration_error"
    status_code = 422


class ConfigurationEmptyError(ConfigurationError):
    """Raised when the configuration declares nothing to synchronize."""

    message = "No roles found in configuration."
    error_code = "configuration_empty"
