"""In-process Chain.

Hosts contracts: allocates addresses, keeps the clock, executes every
outermost call as an atomic transaction and collects the records it emits.
"""

import copy
import hashlib
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, Optional

from src.chain.config import DEFAULT_CHAIN_CONFIG, ChainConfig, TxStatus
from src.chain.models import Event, Receipt
from src.errors import ErrorCode, InvalidStateError, VaultError
from src.logging_config.context import TxContext, generate_tx_id

if TYPE_CHECKING:
    from src.chain.contract import Contract

logger = logging.getLogger(__name__)


@dataclass
class _Snapshot:
    contracts: dict[str, "Contract"] = field(default_factory=dict)
    storage: dict[str, dict] = field(default_factory=dict)
    nonce: int = 0


class Chain:
    """Registry, clock and transaction executor for contracts.

    Features:
    - Deterministic address allocation and pre-generated accounts
    - Contract lookup by address
    - Block timestamp with sleep/mine
    - Snapshot/rollback of all contract storage per outermost call
    - Receipts with the events emitted by confirmed calls
    """

    def __init__(self, config: Optional[ChainConfig] = None):
        self.config = config or DEFAULT_CHAIN_CONFIG
        self._timestamp = self.config.genesis_timestamp
        self._nonce = 0
        self._contracts: dict[str, "Contract"] = {}
        self._receipts: list[Receipt] = []
        self._receipt: Optional[Receipt] = None
        self._depth = 0
        self.accounts = [self.new_address() for _ in range(self.config.num_accounts)]

    # ── Addresses & registry ──

    def new_address(self) -> str:
        """Allocate a fresh address."""
        self._nonce += 1
        digest = hashlib.sha256(f"{self.config.address_salt}:{self._nonce}".encode()).hexdigest()
        return "0x" + digest[:40]

    def register(self, contract: "Contract") -> str:
        address = self.new_address()
        self._contracts[address] = contract
        return address

    def at(self, address: str) -> "Contract":
        """Resolve a contract by address.

        Raises:
            InvalidStateError: If nothing is deployed at the address.
        """
        contract = self._contracts.get(address)
        if contract is None:
            raise InvalidStateError(
                f"No contract at {address}", ErrorCode.UNKNOWN_CONTRACT,
            )
        return contract

    def is_contract(self, address: str) -> bool:
        return address in self._contracts

    # ── Clock ──

    @property
    def timestamp(self) -> int:
        return self._timestamp

    def sleep(self, seconds: int) -> None:
        """Advance the clock."""
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        self._timestamp += int(seconds)

    def mine(self, timedelta: int = 0) -> int:
        """Advance the clock by ``timedelta`` seconds and return the new time."""
        self.sleep(timedelta)
        return self._timestamp

    # ── Transactions ──

    @property
    def in_transaction(self) -> bool:
        return self._receipt is not None

    @contextmanager
    def transaction(self, sender: str, contract: str = "", method: str = "") -> Iterator[Receipt]:
        """Run a call atomically.

        The outermost call snapshots every contract's storage and restores it
        if any exception escapes. Nested calls join the outer transaction.
        """
        if self._receipt is not None:
            self._depth += 1
            try:
                yield self._receipt
            finally:
                self._depth -= 1
            return

        receipt = Receipt(
            tx_id=generate_tx_id(),
            sender=sender,
            contract=contract,
            method=method,
            timestamp=self._timestamp,
        )
        snapshot = self._snapshot()
        self._receipt = receipt
        try:
            with TxContext(tx_id=receipt.tx_id, sender=sender, contract=contract, method=method):
                yield receipt
        except Exception as exc:
            self._receipt = None
            self._depth = 0
            self._restore(snapshot)
            receipt.status = TxStatus.REVERTED
            receipt.error = str(exc)
            receipt.events = []
            self._receipts.append(receipt)
            extra = {"block_timestamp": receipt.timestamp}
            if isinstance(exc, VaultError):
                extra["error_category"] = exc.category.value
                if exc.error_code is not None:
                    extra["error_code"] = exc.error_code.value
            logger.info("Reverted %s on %s: %s", method, contract, exc, extra=extra)
            raise
        self._receipt = None
        self._receipts.append(receipt)

    def emit(self, contract: str, name: str, /, **args: Any) -> Event:
        """Record an event on the running transaction."""
        if self._receipt is None:
            raise RuntimeError(f"Cannot emit {name} outside of a transaction")
        event = Event(name=name, contract=contract, args=args, log_index=len(self._receipt.events))
        self._receipt.events.append(event)
        return event

    @property
    def receipts(self) -> list[Receipt]:
        return list(self._receipts)

    @property
    def last_receipt(self) -> Optional[Receipt]:
        return self._receipts[-1] if self._receipts else None

    def events(self, name: Optional[str] = None, contract: Optional[str] = None) -> list[Event]:
        """Events from confirmed transactions, optionally filtered."""
        result = []
        for receipt in self._receipts:
            for event in receipt.events:
                if name is not None and event.name != name:
                    continue
                if contract is not None and event.contract != contract:
                    continue
                result.append(event)
        return result

    def _snapshot(self) -> _Snapshot:
        memo: dict[int, Any] = {id(self): self}
        for c in self._contracts.values():
            memo[id(c)] = c
        storage = {
            address: copy.deepcopy(c.__dict__, memo)
            for address, c in self._contracts.items()
        }
        return _Snapshot(contracts=dict(self._contracts), storage=storage, nonce=self._nonce)

    def _restore(self, snapshot: _Snapshot) -> None:
        for address, c in snapshot.contracts.items():
            c.__dict__.clear()
            c.__dict__.update(snapshot.storage[address])
        self._contracts = snapshot.contracts
        self._nonce = snapshot.nonce
