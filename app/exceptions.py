"""
Exception Classes - Typed exception hierarchy for the tool directory.

Every exception carries the HTTP status code it maps to; the API layer
renders them into the response envelope.
"""


class DirectoryError(Exception):
    """Base exception for all directory errors."""

    status_code: int = 500


class ValidationError(DirectoryError):
    """Raised when input fails validation. Carries field -> messages."""

    status_code = 422

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed") -> None:
        self.errors = errors
        self.message = message
        fields = ", ".join(sorted(errors))
        super().__init__(f"{message}: {fields}" if fields else message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        """Build a validation error for a single field."""
        return cls({field: [message]})


class ResourceNotFoundError(DirectoryError):
    """Raised when a requested resource doesn't exist."""

    status_code = 404

    def __init__(self, resource: str, identifier: int | str) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class AuthenticationError(DirectoryError):
    """Raised when authentication fails."""

    status_code = 401

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """
    Raised when an email/password pair is rejected.

    The message is identical for an unknown email and a wrong password.
    """

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is malformed, expired, or names no active user."""

    def __init__(self, reason: str = "Invalid token") -> None:
        self.reason = reason
        super().__init__("Invalid or expired token")


class AuthorizationError(DirectoryError):
    """Raised when user lacks required permissions."""

    status_code = 403

    def __init__(self, required_permission: str) -> None:
        self.required_permission = required_permission
        super().__init__(f"Authorization failed: missing permission {required_permission}")
