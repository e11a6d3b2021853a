"""
Error types shared across the Slingshot API.

Every error carries the HTTP status it maps to, so the facade can render it
into the response envelope without inspecting the concrete type.
"""

from typing import Any


class SlingshotError(Exception):
    """Base class for all errors surfaced to API callers."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigError(SlingshotError):
    """OAuth client configuration is missing."""

    status_code = 500
    error_code = "config_error"


class InvalidCodeError(SlingshotError):
    """Authorization code is missing or was rejected by the provider."""

    status_code = 400
    error_code = "invalid_code"


class MissingCredentialError(SlingshotError):
    """No bearer credential was supplied."""

    status_code = 401
    error_code = "missing_credential"


class InvalidSessionError(SlingshotError):
    """The application session token is invalid or expired."""

    status_code = 401
    error_code = "invalid_session"


class ProviderAuthError(SlingshotError):
    """The provider rejected the access token; the user must reconnect."""

    status_code = 401
    error_code = "provider_auth_error"


class ProviderRequestError(SlingshotError):
    """Any other provider-side failure.

    ``details`` holds the provider's embedded error payload verbatim.
    """

    status_code = 500
    error_code = "provider_request_error"


class ValidationError(SlingshotError):
    """A required request parameter is missing or malformed."""

    status_code = 400
    error_code = "validation_error"


class CredentialNotFoundError(SlingshotError):
    """No stored credential for the requested user and provider."""

    status_code = 404
    error_code = "credential_not_found"
