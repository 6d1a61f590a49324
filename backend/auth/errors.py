"""
Typed authentication/authorization failures.

Services raise these; api.exception_handlers translates them into the
response envelope exactly once, at the HTTP boundary.
"""
from typing import Optional
from fastapi import status

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


class AuthError(Exception):
    """Base class: carries the HTTP status and a client-safe message"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    headers: Optional[dict[str, str]] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AuthError):
    """Malformed or policy-violating request data"""
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AuthError):
    """Uniqueness or provider-mismatch violation"""
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AuthError):
    """Missing or invalid credentials"""
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Basic"}

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(AuthError):
    """Authenticated, but lacking the required role"""
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class NotFoundError(AuthError):
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(AuthError):
    """Unexpected failure; the message never echoes the underlying cause"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self):
        super().__init__(INTERNAL_ERROR_MESSAGE)


class OAuth2AuthenticationError(UnauthorizedError):
    """Federated login could not be completed"""
