"""Vault Error Taxonomy.

Typed exceptions for authorization, state, balance and restricted-asset
failures, each mapped to a stable error code.
"""

from src.errors.config import (
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
)
from src.errors.exceptions import (
    AuthorizationError,
    InsufficientBalanceError,
    InvalidStateError,
    RestrictedAssetError,
    VaultError,
)

__all__ = [
    # Config
    "ErrorCategory",
    "ErrorCode",
    "ErrorSeverity",
    # Exceptions
    "AuthorizationError",
    "InsufficientBalanceError",
    "InvalidStateError",
    "RestrictedAssetError",
    "VaultError",
]
