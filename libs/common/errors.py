"""Application error taxonomy.

Each error maps to one HTTP status and carries a message that is safe to
return to clients. Handlers in ``libs.common.error_handler`` render them as
``{"error": message}``.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class RequestValidationFailed(AppError):
    status_code = 400
    default_message = "Invalid input data"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class InvalidTransition(AppError):
    status_code = 409
    default_message = "Invalid status transition"


class PersistenceError(AppError):
    """Wraps a database failure; the original error is only logged."""

    status_code = 500
    default_message = "Database operation failed"


class WebhookSignatureError(AppError):
    status_code = 400
    default_message = "Invalid signature"


class PaymentProviderError(AppError):
    status_code = 500
    default_message = "Payment provider error"


class StorageError(AppError):
    status_code = 500
    default_message = "Storage operation failed"


class ConfigurationError(Exception):
    """Raised at startup when environment configuration is missing or invalid."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__(
            "Environment validation failed:\n" + "\n".join(problems)
        )
