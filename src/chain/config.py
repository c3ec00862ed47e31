"""Execution Environment Configuration."""

from dataclasses import dataclass, field
from enum import Enum

from src.settings import get_settings

ZERO_ADDRESS = "0x" + "0" * 40


class TxStatus(Enum):
    """Outcome of an executed transaction."""
    CONFIRMED = "confirmed"
    REVERTED = "reverted"


@dataclass
class ChainConfig:
    """In-process chain configuration."""
    genesis_timestamp: int = field(default_factory=lambda: get_settings().genesis_timestamp)
    num_accounts: int = field(default_factory=lambda: get_settings().num_accounts)
    address_salt: str = "vault-engine"


DEFAULT_CHAIN_CONFIG = ChainConfig()
