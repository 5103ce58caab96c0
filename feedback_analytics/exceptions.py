"""Project-wide custom exception types."""
from enum import Enum
from typing import Optional


class StoreError(RuntimeError):
    """Raised when the feedback store rejects a query or cannot be reached."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


class ConfigurationError(RuntimeError):
    """Raised when a collaborator is used without the credentials it needs."""


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    ALREADY_REGISTERED = "already_registered"
    WEAK_PASSWORD = "weak_password"
    INVALID_EMAIL = "invalid_email"
    SIGNUP_DISABLED = "signup_disabled"
    UNKNOWN = "unknown"


class AuthError(RuntimeError):
    """Classified failure returned by the auth collaborator."""

    def __init__(self, kind: AuthErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class FeedbackValidationError(ValueError):
    """Raised when caller-supplied feedback holds a value outside its vocabulary."""

    def __init__(self, field: str, value: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.value = value
