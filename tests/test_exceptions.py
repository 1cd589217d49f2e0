"""
Tests for exception classes.

Covers the status code each exception maps to and its message.
"""

import pytest

from app.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DirectoryError,
    InvalidCredentialsError,
    InvalidTokenError,
    ResourceNotFoundError,
    ValidationError,
)


class TestDirectoryError:
    """Tests for base DirectoryError."""

    def test_directory_error_is_exception(self):
        """DirectoryError is a subclass of Exception."""
        assert issubclass(DirectoryError, Exception)

    def test_default_status_code(self):
        """Unspecialised errors map to 500."""
        assert DirectoryError("boom").status_code == 500


class TestValidationError:
    """Tests for ValidationError."""

    def test_attributes(self):
        """Exception keeps the field -> messages map."""
        exc = ValidationError({"rating": ["Too high."]})
        assert exc.errors == {"rating": ["Too high."]}
        assert exc.message == "Validation failed"
        assert exc.status_code == 422

    def test_message_lists_fields(self):
        """String form names the failing fields in order."""
        exc = ValidationError({"slug": ["x"], "name": ["y"]})
        assert str(exc) == "Validation failed: name, slug"

    def test_for_field(self):
        """for_field builds a single-field error."""
        exc = ValidationError.for_field("slug", "Taken.")
        assert exc.errors == {"slug": ["Taken."]}

    def test_is_directory_error(self):
        assert isinstance(ValidationError({}), DirectoryError)


class TestResourceNotFoundError:
    """Tests for ResourceNotFoundError."""

    def test_attributes(self):
        exc = ResourceNotFoundError("Tool", 42)
        assert exc.resource == "Tool"
        assert exc.identifier == 42
        assert exc.status_code == 404

    def test_message_format(self):
        assert str(ResourceNotFoundError("Tool", 42)) == "Tool not found: 42"


class TestAuthenticationErrors:
    """Tests for the 401 family."""

    def test_authentication_error(self):
        exc = AuthenticationError("Unauthenticated")
        assert exc.status_code == 401
        assert exc.message == "Unauthenticated"

    def test_invalid_credentials_message_is_fixed(self):
        """The same message is used whatever the cause."""
        exc = InvalidCredentialsError()
        assert str(exc) == "Invalid credentials"
        assert isinstance(exc, AuthenticationError)

    def test_invalid_token_hides_reason(self):
        """The reason is kept for logging but not put in the message."""
        exc = InvalidTokenError("User not found")
        assert exc.reason == "User not found"
        assert str(exc) == "Invalid or expired token"
        assert exc.status_code == 401

    def test_caught_as_base(self):
        with pytest.raises(AuthenticationError):
            raise InvalidTokenError()


class TestAuthorizationError:
    """Tests for AuthorizationError."""

    def test_attributes(self):
        exc = AuthorizationError("manage_taxonomy")
        assert exc.required_permission == "manage_taxonomy"
        assert exc.status_code == 403
        assert "manage_taxonomy" in str(exc)
