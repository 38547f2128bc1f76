"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    status = "INTERNAL"

    def __init__(self, message, status_code=500):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    """Raised when request data fails validation."""

    status = "INVALID_ARGUMENT"

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class UnauthenticatedError(AppError):
    """Raised when the caller has no valid ID token."""

    status = "UNAUTHENTICATED"

    def __init__(self, message="Authentication required."):
        """Initialize the error."""
        super().__init__(message, 401)


class PermissionDeniedError(AppError):
    """Raised when the caller may not act on a resource."""

    status = "PERMISSION_DENIED"

    def __init__(self, message="Permission denied."):
        """Initialize the error."""
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    status = "NOT_FOUND"

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class AccountDeletionError(AppError):
    """Raised when the identity itself could not be deleted."""

    def __init__(self, message="Account deletion failed."):
        """Initialize the error."""
        super().__init__(message, 500)
