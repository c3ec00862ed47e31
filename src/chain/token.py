"""Fungible token ledger used for underlying assets and reward tokens."""

import logging

from src.chain.chain import Chain
from src.chain.config import ZERO_ADDRESS
from src.chain.contract import Contract, external
from src.errors import (
    AuthorizationError,
    ErrorCode,
    InsufficientBalanceError,
    InvalidStateError,
)

logger = logging.getLogger(__name__)


class Token(Contract):
    """ERC20-style token with a minter role."""

    def __init__(self, chain: Chain, name: str, symbol: str, decimals: int = 18, *, sender: str):
        super().__init__(chain, sender=sender)
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._minters: set[str] = {sender}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def is_minter(self, account: str) -> bool:
        return account in self._minters

    @external
    def grant_minter(self, account: str, *, sender: str) -> None:
        if sender != self.deployer:
            raise AuthorizationError("Caller is not the token owner", ErrorCode.NOT_MINTER)
        self._minters.add(account)

    @external
    def mint(self, to: str, amount: int, *, sender: str) -> None:
        if sender not in self._minters:
            raise AuthorizationError("Caller is not a minter", ErrorCode.NOT_MINTER)
        self._check_amount(amount)
        self._balances[to] = self.balance_of(to) + amount
        self._total_supply += amount
        self.emit("Transfer", sender=ZERO_ADDRESS, receiver=to, value=amount)

    @external
    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        self._move(sender, to, amount)
        return True

    @external
    def approve(self, spender: str, amount: int, *, sender: str) -> bool:
        self._check_amount(amount)
        self._allowances[(sender, spender)] = amount
        self.emit("Approval", owner=sender, spender=spender, value=amount)
        return True

    @external
    def transfer_from(self, owner: str, to: str, amount: int, *, sender: str) -> bool:
        allowed = self.allowance(owner, sender)
        if allowed < amount:
            raise InsufficientBalanceError(
                "ERC20: insufficient allowance", ErrorCode.INSUFFICIENT_ALLOWANCE,
            )
        self._allowances[(owner, sender)] = allowed - amount
        self._move(owner, to, amount)
        return True

    def _move(self, source: str, to: str, amount: int) -> None:
        self._check_amount(amount)
        if to == ZERO_ADDRESS:
            raise InvalidStateError("ERC20: transfer to the zero address", ErrorCode.ZERO_ADDRESS)
        balance = self.balance_of(source)
        if balance < amount:
            raise InsufficientBalanceError(
                "ERC20: transfer amount exceeds balance",
                ErrorCode.INSUFFICIENT_TOKEN_BALANCE,
                details={"balance": balance, "amount": amount},
            )
        self._balances[source] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        self.emit("Transfer", sender=source, receiver=to, value=amount)

    @staticmethod
    def _check_amount(amount: int) -> None:
        if not isinstance(amount, int) or amount < 0:
            raise InvalidStateError(f"Invalid amount: {amount!r}", ErrorCode.INVALID_AMOUNT)
