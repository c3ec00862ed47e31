"""Upgradeable proxy.

The proxy owns all storage. Attribute lookups it cannot satisfy itself are
resolved on the implementation's class and bound to the proxy, so logic
always reads and writes proxy storage.
"""

import inspect
import logging
from typing import Any

from src.chain.chain import Chain
from src.chain.contract import Contract, external
from src.errors import ErrorCode, InvalidStateError

logger = logging.getLogger(__name__)


class FundProxy(Contract):
    """Delegates every call to the current implementation."""

    def __init__(self, chain: Chain, implementation: str, *, sender: str):
        chain.at(implementation)
        super().__init__(chain, sender=sender)
        self._implementation = implementation

    @property
    def implementation(self) -> str:
        return self._implementation

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") or "_implementation" not in self.__dict__:
            raise AttributeError(name)
        logic = type(self.chain.at(self.__dict__["_implementation"]))
        try:
            attr = inspect.getattr_static(logic, name)
        except AttributeError:
            raise AttributeError(
                f"{logic.__name__} behind {self.__dict__['address']} has no attribute {name!r}"
            ) from None
        if hasattr(attr, "__get__"):
            return attr.__get__(self, logic)
        return attr

    @external
    def upgrade(self, expected_implementation: str, *, sender: str) -> None:
        """Swap to the scheduled implementation once its timelock has passed."""
        ready, target = self.should_upgrade()
        if not ready:
            raise InvalidStateError("Upgrade not scheduled", ErrorCode.UPGRADE_NOT_SCHEDULED)
        if target != expected_implementation:
            raise InvalidStateError(
                "NewImplementation is not same", ErrorCode.IMPLEMENTATION_MISMATCH,
            )
        previous = self._implementation
        self._implementation = target
        self.finalize_upgrade(sender=sender)
        self.emit("Upgraded", implementation=target)
        logger.info("Implementation upgraded from %s to %s", previous, target)
