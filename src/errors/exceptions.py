"""Custom Exception Hierarchy.

Every failed call aborts with one of these. The message is the
human-readable reason; the error code identifies the exact condition.
"""

from typing import Any, Dict, Optional

from src.errors.config import (
    CATEGORY_SEVERITY_MAP,
    ERROR_CATEGORY_MAP,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
)


class VaultError(Exception):
    """Base exception for all vault engine failures.

    A single ``except VaultError`` catches the entire hierarchy.
    """

    category: ErrorCategory = ErrorCategory.INVALID_STATE

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        if error_code is not None:
            self.category = ERROR_CATEGORY_MAP.get(error_code, self.category)
        self.details = details or {}

    @property
    def severity(self) -> ErrorSeverity:
        return CATEGORY_SEVERITY_MAP[self.category]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.error_code.value if self.error_code else None,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }


class AuthorizationError(VaultError):
    """Raised when the caller is not allowed to perform the operation."""

    category = ErrorCategory.AUTHORIZATION

    def __init__(
        self,
        message: str = "Not authorized",
        error_code: ErrorCode = ErrorCode.NOT_GOVERNANCE,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class InvalidStateError(VaultError):
    """Raised when an operation conflicts with the current state."""

    category = ErrorCategory.INVALID_STATE

    def __init__(
        self,
        message: str = "Invalid state",
        error_code: ErrorCode = ErrorCode.INVALID_AMOUNT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class InsufficientBalanceError(VaultError):
    """Raised when a balance or the recoverable liquidity is too small."""

    category = ErrorCategory.INSUFFICIENT_BALANCE

    def __init__(
        self,
        message: str = "Insufficient balance",
        error_code: ErrorCode = ErrorCode.INSUFFICIENT_TOKEN_BALANCE,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class RestrictedAssetError(VaultError):
    """Raised when a sweep targets the underlying or a reward token."""

    category = ErrorCategory.RESTRICTED_ASSET

    def __init__(
        self,
        message: str = "Token is restricted",
        error_code: ErrorCode = ErrorCode.RESTRICTED_TOKEN,
        token: Optional[str] = None,
    ):
        details = {"token": token} if token else None
        super().__init__(message, error_code, details)
