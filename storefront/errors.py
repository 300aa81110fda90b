"""Storefront exceptions.

Resolvers raise these; the HTTP layer maps them to responses in one
place (see ``storefront.api.app.setup_exception_handlers``). Store
failures that are not listed here propagate unchanged.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    code = "STOREFRONT_ERROR"
    status_code = 400

    def __init__(self, message: str = "Storefront error"):
        self.message = message
        super().__init__(self.message)


class AuthenticationRequired(StorefrontError):
    """Raised when an operation needs a signed-in user and there is none."""

    code = "AUTHENTICATION_REQUIRED"
    status_code = 401

    def __init__(self, message: str = "You must be logged in to do that!"):
        super().__init__(message)


class AuthorizationDenied(StorefrontError):
    """Raised when the signed-in user lacks the required permissions."""

    code = "AUTHORIZATION_DENIED"
    status_code = 403

    def __init__(self, message: str = "You do not have sufficient permissions"):
        super().__init__(message)


class NotFound(StorefrontError):
    """Raised when a user, item or cart item lookup misses."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ValidationFailed(StorefrontError):
    """Raised for bad input: wrong password, mismatched confirmation, bad fields."""

    code = "VALIDATION_FAILED"
    status_code = 400

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


class TokenInvalidOrExpired(StorefrontError):
    """Raised when a password reset token is unknown, used or expired."""

    code = "TOKEN_INVALID_OR_EXPIRED"
    status_code = 400

    def __init__(self, message: str = "This token is either invalid or expired"):
        super().__init__(message)


class DuplicateRecord(StorefrontError):
    """Raised by a store when a uniqueness constraint would be violated."""

    code = "DUPLICATE_RECORD"
    status_code = 409

    def __init__(self, message: str = "Record already exists"):
        super().__init__(message)


class NotificationFailed(StorefrontError):
    """Raised when an outgoing email could not be delivered."""

    code = "NOTIFICATION_FAILED"
    status_code = 502

    def __init__(self, message: str = "Could not send notification"):
        super().__init__(message)
