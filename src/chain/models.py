"""Execution Environment Data Models."""

from dataclasses import dataclass, field
from typing import Any, Optional

from src.chain.config import TxStatus


@dataclass
class Event:
    """A record emitted by a contract during a transaction."""
    name: str = ""
    contract: str = ""
    args: dict[str, Any] = field(default_factory=dict)
    log_index: int = 0

    def values(self) -> list[Any]:
        """Argument values in emission order."""
        return list(self.args.values())

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "contract": self.contract,
            "args": dict(self.args),
            "log_index": self.log_index,
        }


@dataclass
class Receipt:
    """Result of one outermost call, with the records it emitted."""
    tx_id: str = ""
    sender: str = ""
    contract: str = ""
    method: str = ""
    timestamp: int = 0
    status: TxStatus = TxStatus.CONFIRMED
    error: Optional[str] = None
    events: list[Event] = field(default_factory=list)

    @property
    def is_confirmed(self) -> bool:
        return self.status == TxStatus.CONFIRMED

    def events_named(self, name: str) -> list[Event]:
        return [e for e in self.events if e.name == name]

    def event(self, name: str) -> Event:
        """First event with the given name.

        Raises:
            KeyError: If the transaction emitted no such event.
        """
        for e in self.events:
            if e.name == name:
                return e
        raise KeyError(name)

    def has_event(self, name: str) -> bool:
        return any(e.name == name for e in self.events)

    def to_dict(self) -> dict:
        return {
            "tx_id": self.tx_id,
            "sender": self.sender,
            "contract": self.contract,
            "method": self.method,
            "timestamp": self.timestamp,
            "status": self.status.value,
            "error": self.error,
            "events": [e.to_dict() for e in self.events],
        }
