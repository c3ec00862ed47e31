"""Transaction Context Management.

Binds the transaction id, caller and target contract of the call being
executed to every log entry emitted while it runs.
"""

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any


_tx_id_var: ContextVar[str] = ContextVar("tx_id", default="")
_sender_var: ContextVar[str] = ContextVar("sender", default="")
_contract_var: ContextVar[str] = ContextVar("contract", default="")
_method_var: ContextVar[str] = ContextVar("method", default="")


def generate_tx_id() -> str:
    """Generate a unique transaction ID using UUID4."""
    return str(uuid.uuid4())


def get_tx_id() -> str:
    """Get the current transaction ID from context."""
    return _tx_id_var.get()


def get_context_dict() -> dict[str, Any]:
    """Get all context variables as a dictionary for log binding."""
    ctx = {}
    for key, var in (
        ("tx_id", _tx_id_var),
        ("sender", _sender_var),
        ("contract", _contract_var),
        ("method", _method_var),
    ):
        value = var.get()
        if value:
            ctx[key] = value
    return ctx


@dataclass
class TxContext:
    """Context manager for transaction-scoped logging context.

    Example:
        with TxContext(sender=alice, contract=fund.address, method="deposit"):
            logger.info("minting shares")  # includes tx_id, sender, ...
    """

    tx_id: str = ""
    sender: str = ""
    contract: str = ""
    method: str = ""

    _tokens: list = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.tx_id:
            self.tx_id = generate_tx_id()

    def __enter__(self) -> "TxContext":
        self._tokens = [
            (_tx_id_var, _tx_id_var.set(self.tx_id)),
            (_sender_var, _sender_var.set(self.sender)),
            (_contract_var, _contract_var.set(self.contract)),
            (_method_var, _method_var.set(self.method)),
        ]
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()
