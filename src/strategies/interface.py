"""What a fund needs from a strategy."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Strategy(Protocol):
    """Capabilities every strategy exposes to its fund."""

    address: str

    @property
    def fund(self) -> str: ...

    @property
    def underlying(self) -> str: ...

    @property
    def creator(self) -> str: ...

    @property
    def name(self) -> str: ...

    def apr(self) -> int: ...

    def invested_underlying_balance(self) -> int: ...

    def do_hard_work(self, *, sender: str) -> None: ...

    def withdraw_to_fund(self, amount: int, *, sender: str) -> None: ...

    def withdraw_all_to_fund(self, *, sender: str) -> None: ...

    def can_not_sweep(self, token: str) -> bool: ...
