from typing import Any, Optional


class ChainSignError(Exception):
    """
    Base exception for the contract signing API.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(ChainSignError):
    """
    Raised when a request is missing fields or carries malformed ones.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)


class AuthenticationError(ChainSignError):
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class AuthorizationError(ChainSignError):
    """
    Raised when the caller is known but not allowed, e.g. a wallet mismatch.
    """
    def __init__(self, message: str = "Forbidden", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)


class NotFoundError(ChainSignError):
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class ConflictError(ChainSignError):
    """
    Raised when a write collides with existing state (duplicate signer,
    duplicate email).
    """
    def __init__(self, message: str = "Conflict", details: Optional[Any] = None, code: str = "CONFLICT"):
        super().__init__(message, code=code, status_code=409, details=details)


class AlreadySignedError(ConflictError):
    def __init__(self, message: str = "Contract already signed by this user", details: Optional[Any] = None):
        super().__init__(message, details=details, code="ALREADY_SIGNED")


class TransactionTimeoutError(ChainSignError):
    """
    Raised when a unit of work runs past its time budget. The transaction is
    rolled back before this propagates.
    """
    def __init__(self, message: str = "Operation timed out", details: Optional[Any] = None):
        super().__init__(message, code="TRANSACTION_TIMEOUT", status_code=504, details=details)
