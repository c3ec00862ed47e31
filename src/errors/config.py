"""Vault Error Configuration.

Defines error codes and severity levels shared by every contract in the
vault engine. Each code belongs to exactly one failure category.
"""

from enum import Enum
from typing import Dict


class ErrorCategory(Enum):
    """Failure categories surfaced to callers."""

    AUTHORIZATION = "authorization"
    INVALID_STATE = "invalid_state"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    RESTRICTED_ASSET = "restricted_asset"


class ErrorCode(Enum):
    """Standardized error codes for aborted calls."""

    # Authorization
    NOT_GOVERNANCE = "NOT_GOVERNANCE"
    NOT_PENDING_GOVERNANCE = "NOT_PENDING_GOVERNANCE"
    NOT_FUND_MANAGER = "NOT_FUND_MANAGER"
    NOT_FUND_MANAGER_OR_RELAYER = "NOT_FUND_MANAGER_OR_RELAYER"
    NOT_FUND_MANAGER_OR_GOVERNANCE = "NOT_FUND_MANAGER_OR_GOVERNANCE"
    NOT_FUND = "NOT_FUND"
    NOT_MINTER = "NOT_MINTER"
    UPGRADE_NOT_AUTHORIZED = "UPGRADE_NOT_AUTHORIZED"

    # Invalid state
    ZERO_ADDRESS = "ZERO_ADDRESS"
    UPGRADE_NOT_SCHEDULED = "UPGRADE_NOT_SCHEDULED"
    IMPLEMENTATION_MISMATCH = "IMPLEMENTATION_MISMATCH"
    SAME_IMPLEMENTATION = "SAME_IMPLEMENTATION"
    STRATEGY_ALREADY_ADDED = "STRATEGY_ALREADY_ADDED"
    STRATEGY_NOT_FOUND = "STRATEGY_NOT_FOUND"
    FUND_MISMATCH = "FUND_MISMATCH"
    ASSET_MISMATCH = "ASSET_MISMATCH"
    WEIGHTAGE_EXCEEDED = "WEIGHTAGE_EXCEEDED"
    INVALID_WEIGHTAGE = "INVALID_WEIGHTAGE"
    INVALID_FEE = "INVALID_FEE"
    DEPOSITS_PAUSED = "DEPOSITS_PAUSED"
    DEPOSIT_LIMIT_EXCEEDED = "DEPOSIT_LIMIT_EXCEEDED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    NOT_INITIALIZED = "NOT_INITIALIZED"
    UNKNOWN_CONTRACT = "UNKNOWN_CONTRACT"
    REENTRANT_CALL = "REENTRANT_CALL"

    # Insufficient balance
    INSUFFICIENT_SHARES = "INSUFFICIENT_SHARES"
    NO_SHARES = "NO_SHARES"
    INSUFFICIENT_LIQUIDITY = "INSUFFICIENT_LIQUIDITY"
    INSUFFICIENT_TOKEN_BALANCE = "INSUFFICIENT_TOKEN_BALANCE"
    INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"

    # Restricted asset
    RESTRICTED_TOKEN = "RESTRICTED_TOKEN"


class ErrorSeverity(Enum):
    """Severity levels for error logging."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


ERROR_CATEGORY_MAP: Dict[ErrorCode, ErrorCategory] = {
    ErrorCode.NOT_GOVERNANCE: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_PENDING_GOVERNANCE: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_FUND_MANAGER: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_FUND_MANAGER_OR_RELAYER: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_FUND_MANAGER_OR_GOVERNANCE: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_FUND: ErrorCategory.AUTHORIZATION,
    ErrorCode.NOT_MINTER: ErrorCategory.AUTHORIZATION,
    ErrorCode.UPGRADE_NOT_AUTHORIZED: ErrorCategory.AUTHORIZATION,
    ErrorCode.ZERO_ADDRESS: ErrorCategory.INVALID_STATE,
    ErrorCode.UPGRADE_NOT_SCHEDULED: ErrorCategory.INVALID_STATE,
    ErrorCode.IMPLEMENTATION_MISMATCH: ErrorCategory.INVALID_STATE,
    ErrorCode.SAME_IMPLEMENTATION: ErrorCategory.INVALID_STATE,
    ErrorCode.STRATEGY_ALREADY_ADDED: ErrorCategory.INVALID_STATE,
    ErrorCode.STRATEGY_NOT_FOUND: ErrorCategory.INVALID_STATE,
    ErrorCode.FUND_MISMATCH: ErrorCategory.INVALID_STATE,
    ErrorCode.ASSET_MISMATCH: ErrorCategory.INVALID_STATE,
    ErrorCode.WEIGHTAGE_EXCEEDED: ErrorCategory.INVALID_STATE,
    ErrorCode.INVALID_WEIGHTAGE: ErrorCategory.INVALID_STATE,
    ErrorCode.INVALID_FEE: ErrorCategory.INVALID_STATE,
    ErrorCode.DEPOSITS_PAUSED: ErrorCategory.INVALID_STATE,
    ErrorCode.DEPOSIT_LIMIT_EXCEEDED: ErrorCategory.INVALID_STATE,
    ErrorCode.INVALID_AMOUNT: ErrorCategory.INVALID_STATE,
    ErrorCode.ALREADY_INITIALIZED: ErrorCategory.INVALID_STATE,
    ErrorCode.NOT_INITIALIZED: ErrorCategory.INVALID_STATE,
    ErrorCode.UNKNOWN_CONTRACT: ErrorCategory.INVALID_STATE,
    ErrorCode.REENTRANT_CALL: ErrorCategory.INVALID_STATE,
    ErrorCode.INSUFFICIENT_SHARES: ErrorCategory.INSUFFICIENT_BALANCE,
    ErrorCode.NO_SHARES: ErrorCategory.INSUFFICIENT_BALANCE,
    ErrorCode.INSUFFICIENT_LIQUIDITY: ErrorCategory.INSUFFICIENT_BALANCE,
    ErrorCode.INSUFFICIENT_TOKEN_BALANCE: ErrorCategory.INSUFFICIENT_BALANCE,
    ErrorCode.INSUFFICIENT_ALLOWANCE: ErrorCategory.INSUFFICIENT_BALANCE,
    ErrorCode.RESTRICTED_TOKEN: ErrorCategory.RESTRICTED_ASSET,
}

# Severity used when a failure is logged at the transaction boundary
CATEGORY_SEVERITY_MAP: Dict[ErrorCategory, ErrorSeverity] = {
    ErrorCategory.AUTHORIZATION: ErrorSeverity.MEDIUM,
    ErrorCategory.INVALID_STATE: ErrorSeverity.LOW,
    ErrorCategory.INSUFFICIENT_BALANCE: ErrorSeverity.LOW,
    ErrorCategory.RESTRICTED_ASSET: ErrorSeverity.MEDIUM,
}
