"""In-process Execution Environment.

Addresses, clock, atomic transactions, emitted records and token balances
for hosting the vault contracts.
"""

from src.chain.config import (
    ZERO_ADDRESS,
    TxStatus,
    ChainConfig,
    DEFAULT_CHAIN_CONFIG,
)
from src.chain.models import Event, Receipt
from src.chain.chain import Chain
from src.chain.contract import Contract, external, non_reentrant
from src.chain.token import Token

__all__ = [
    "ZERO_ADDRESS",
    "TxStatus",
    "ChainConfig",
    "DEFAULT_CHAIN_CONFIG",
    "Event",
    "Receipt",
    "Chain",
    "Contract",
    "external",
    "non_reentrant",
    "Token",
]
