"""Error taxonomy for the storefront API.

Every error carries the HTTP status it maps to; ``main.py`` turns any
:class:`StorefrontError` into the ``{success: false, message}`` envelope.
"""
from fastapi import status


class StorefrontError(Exception):
    """Base exception for all known failure kinds"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(StorefrontError):
    error_code = "configuration_error"
    default_message = "Server is misconfigured"


class InternalError(StorefrontError):
    pass


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"
    default_message = "Invalid request"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = "Resource not found"


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    error_code = "conflict"
    default_message = "Resource already exists"


class ForbiddenError(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"
    default_message = "Insufficient permissions"


# ---------------------------------------------------------------------------
# Authentication family
# ---------------------------------------------------------------------------

class AuthenticationError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "authentication_error"
    default_message = "Authentication failed"


class MissingTokenError(AuthenticationError):
    error_code = "missing_token"
    default_message = "Access token required"


class RevokedTokenError(AuthenticationError):
    error_code = "revoked_token"
    default_message = "Token has been revoked"


class ExpiredTokenError(AuthenticationError):
    error_code = "expired_token"
    default_message = "Token has expired"


class InvalidTokenError(AuthenticationError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "invalid_token"
    default_message = "Invalid or expired token"


class MalformedTokenError(InvalidTokenError):
    error_code = "malformed_token"
    default_message = "Token could not be parsed"


class InvalidSignatureError(InvalidTokenError):
    error_code = "invalid_signature"
    default_message = "Token signature verification failed"


class UnauthenticatedError(AuthenticationError):
    error_code = "unauthenticated"
    default_message = "Authentication required"


class InvalidCredentialsError(AuthenticationError):
    error_code = "invalid_credentials"
    default_message = "Invalid credentials"
