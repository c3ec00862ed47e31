"""Contract base class and call decorators."""

import functools
from typing import Any, Callable, TypeVar

from src.chain.chain import Chain
from src.errors import ErrorCode, InvalidStateError

C = TypeVar("C", bound="Contract")


def external(func: Callable) -> Callable:
    """Run a mutating method as a transaction on behalf of ``sender``.

    The wrapped method must take ``sender`` as a keyword-only argument.
    """

    @functools.wraps(func)
    def wrapper(self, *args: Any, sender: str, **kwargs: Any) -> Any:
        with self.chain.transaction(sender=sender, contract=self.address, method=func.__name__):
            return func(self, *args, sender=sender, **kwargs)

    return wrapper


def non_reentrant(func: Callable) -> Callable:
    """Reject calls that re-enter a guarded method of the same contract."""

    @functools.wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        if getattr(self, "_entered", False):
            raise InvalidStateError("Reentrant call", ErrorCode.REENTRANT_CALL)
        self._entered = True
        try:
            return func(self, *args, **kwargs)
        finally:
            self._entered = False

    return wrapper


class Contract:
    """Something deployed on a chain, identified by its address."""

    def __init__(self, chain: Chain, *, sender: str):
        self.chain = chain
        self.deployer = sender
        self.address = chain.register(self)

    @classmethod
    def deploy(cls: type[C], chain: Chain, *args: Any, sender: str, **kwargs: Any) -> C:
        """Construct and register the contract atomically."""
        with chain.transaction(sender=sender, method=f"{cls.__name__}.deploy") as receipt:
            contract = cls(chain, *args, sender=sender, **kwargs)
            receipt.contract = contract.address
        return contract

    @property
    def now(self) -> int:
        return self.chain.timestamp

    def emit(self, name: str, /, **args: Any) -> None:
        self.chain.emit(self.address, name, **args)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.address}>"
