"""
Error taxonomy.

Services raise these; the API layer turns them into `{"error": message}`
responses with the matching status code.
"""

from __future__ import annotations


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""
    
    status_code: int = 500
    message: str = "Internal server error"
    
    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# =============================================================================
# 400 - Validation
# =============================================================================


class InvalidInputError(AppError):
    status_code = 400
    message = "Invalid request"


class MissingFieldsError(InvalidInputError):
    message = "Username and password are required"


class InvalidNameError(InvalidInputError):
    message = "Username must be 3-20 alphanumeric characters or underscores"


class WeakPasswordError(InvalidInputError):
    message = "Password must be at least 6 characters"


# =============================================================================
# 401 - Authentication
# =============================================================================


class AuthenticationError(AppError):
    status_code = 401
    message = "Authentication required"


class UnauthenticatedError(AuthenticationError):
    """No bearer token was supplied."""


class InvalidTokenError(AuthenticationError):
    message = "Invalid or expired token"


class InvalidCredentialsError(AuthenticationError):
    message = "Invalid username or password"


class AccountNotFoundError(InvalidCredentialsError):
    """No account with that name. Rendered exactly like a wrong password."""


class WrongPasswordError(InvalidCredentialsError):
    pass


# =============================================================================
# 403 / 404 / 409
# =============================================================================


class ForbiddenError(AppError):
    status_code = 403
    message = "Unauthorized"


class RegistrationDisabledError(ForbiddenError):
    message = "Registration is currently disabled"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class EssayNotFoundError(NotFoundError):
    message = "Essay not found"


class DuplicateNameError(AppError):
    status_code = 409
    message = "Username already exists"


# =============================================================================
# 500 - Internal
# =============================================================================


class IdentifierExhaustedError(AppError):
    """Could not find a free essay identifier within the attempt budget."""
    
    message = "Failed to generate unique essay ID"
