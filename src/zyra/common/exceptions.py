"""Zyra exception hierarchy.

Every error carries a machine-readable ``code`` and the HTTP status the API
boundary renders it with.
"""


class ZyraError(Exception):
    """Base exception for all Zyra errors."""

    status_code = 500

    def __init__(self, message: str = "", code: str = "ZYRA_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(ZyraError):
    """Raised when a request is missing fields or carries malformed values."""

    status_code = 400

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="VALIDATION_ERROR")


class AuthenticationError(ZyraError):
    """Raised when there is no session or the credentials are wrong."""

    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHENTICATED")


class PermissionDeniedError(ZyraError):
    """Raised when an authenticated user may not perform an action."""

    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, code="FORBIDDEN")


class NotFoundError(ZyraError):
    """Raised when an entity is missing or owned by another user."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ConflictError(ZyraError):
    """Raised when a unique value (e.g. an email address) is already taken."""

    status_code = 400

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, code="CONFLICT")


class UpstreamServiceError(ZyraError):
    """Raised when the AI or billing provider fails."""

    status_code = 500

    def __init__(self, message: str = "Upstream service failed", service: str = ""):
        self.service = service
        super().__init__(message, code="UPSTREAM_ERROR")


class ServiceUnavailableError(ZyraError):
    """Raised when an optional provider is not configured."""

    status_code = 503

    def __init__(self, message: str = "Service not configured"):
        super().__init__(message, code="UNAVAILABLE")


class StorageError(ZyraError):
    """Raised when a record store operation fails."""

    status_code = 500

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        message = f"Database operation failed: {operation}"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message, code="STORAGE_ERROR")
