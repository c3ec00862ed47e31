"""Strategy base class.

Holds what every strategy shares: its owning fund, the underlying asset,
role checks resolved through the owner, withdrawals back to the owner and
the sweep of stray tokens.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from src.chain.chain import Chain
from src.chain.config import ZERO_ADDRESS
from src.chain.contract import Contract, external
from src.chain.token import Token
from src.errors import (
    AuthorizationError,
    ErrorCode,
    InvalidStateError,
    RestrictedAssetError,
)

logger = logging.getLogger(__name__)


class StrategyBase(Contract, ABC):
    """Common behavior for strategies owned by a fund or an optimizer.

    ``fund`` is whoever owns the strategy: a fund, or an optimizer acting
    as one. Governance, fund manager and relayer are read from the owner.
    Subclasses supply the position: how much is deployed, how to deploy
    idle underlying and how to pull it back.
    """

    NAME = "Strategy"
    VERSION = "V1"

    def __init__(
        self,
        chain: Chain,
        fund: str,
        *,
        sender: str,
        underlying: Optional[str] = None,
        reward_tokens: Iterable[str] = (),
    ):
        if fund == ZERO_ADDRESS:
            raise InvalidStateError("Fund cannot be empty", ErrorCode.ZERO_ADDRESS)
        fund_underlying = chain.at(fund).underlying
        if underlying is not None and underlying != fund_underlying:
            raise InvalidStateError(
                "Underlying asset does not match the fund", ErrorCode.ASSET_MISMATCH,
            )
        super().__init__(chain, sender=sender)
        self._fund = fund
        self._underlying = fund_underlying
        self._reward_tokens = tuple(reward_tokens)
        self._invest_activated = True

    # ── Identity ──

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def version(self) -> str:
        return self.VERSION

    @property
    def fund(self) -> str:
        return self._fund

    @property
    def underlying(self) -> str:
        return self._underlying

    @property
    def creator(self) -> str:
        return self.deployer

    @property
    def reward_tokens(self) -> tuple[str, ...]:
        return self._reward_tokens

    @property
    def invest_activated(self) -> bool:
        return self._invest_activated

    # ── Roles via the owner ──

    def _owner(self):
        return self.chain.at(self._fund)

    @property
    def governance(self) -> str:
        return self._owner().governance

    @property
    def fund_manager(self) -> str:
        return self._owner().fund_manager

    @property
    def relayer(self) -> str:
        return self._owner().relayer

    def _only_fund(self, sender: str) -> None:
        if sender != self._fund:
            raise AuthorizationError("The sender has to be the fund", ErrorCode.NOT_FUND)

    def _only_governance_or_fund_manager(self, sender: str) -> None:
        if sender not in (self.governance, self.fund_manager):
            raise AuthorizationError(
                "The sender has to be the governance or fund manager",
                ErrorCode.NOT_FUND_MANAGER_OR_GOVERNANCE,
            )

    def _only_fund_or_operators(self, sender: str) -> None:
        if sender not in (self._fund, self.fund_manager, self.relayer):
            raise AuthorizationError(
                "The sender has to be the fund, fund manager or relayer",
                ErrorCode.NOT_FUND_MANAGER_OR_RELAYER,
            )

    # ── Position ──

    def _token(self) -> Token:
        return self.chain.at(self._underlying)

    def _idle_underlying(self) -> int:
        return self._token().balance_of(self.address)

    @abstractmethod
    def _position_balance(self) -> int:
        """Underlying currently deployed."""

    @abstractmethod
    def _invest(self, amount: int) -> None:
        """Deploy ``amount`` of idle underlying."""

    @abstractmethod
    def _divest(self, amount: int) -> None:
        """Return up to ``amount`` of deployed underlying to idle."""

    @abstractmethod
    def apr(self) -> int:
        """Current yield estimate in parts per million (1_000_000 is 100%)."""

    def invested_underlying_balance(self) -> int:
        """Idle plus deployed underlying."""
        return self._idle_underlying() + self._position_balance()

    def _harvest(self) -> None:
        """Collect rewards into the underlying. Nothing to do by default."""

    @external
    def do_hard_work(self, *, sender: str) -> None:
        """Harvest, then deploy idle underlying if investing is active."""
        self._only_fund_or_operators(sender)
        self._harvest()
        if self._invest_activated:
            idle = self._idle_underlying()
            if idle > 0:
                self._invest(idle)

    @external
    def withdraw_to_fund(self, amount: int, *, sender: str) -> None:
        """Send ``amount`` back to the owner, divesting if idle is short.

        Sends what it has if the position cannot cover the full amount.
        """
        self._only_fund(sender)
        idle = self._idle_underlying()
        if idle < amount:
            self._divest(amount - idle)
            idle = self._idle_underlying()
        amount = min(amount, idle)
        if amount > 0:
            self._token().transfer(self._fund, amount, sender=self.address)

    @external
    def withdraw_all_to_fund(self, *, sender: str) -> None:
        self._only_fund(sender)
        deployed = self._position_balance()
        if deployed > 0:
            self._divest(deployed)
        idle = self._idle_underlying()
        if idle > 0:
            self._token().transfer(self._fund, idle, sender=self.address)

    @external
    def set_invest_activated(self, activated: bool, *, sender: str) -> None:
        self._only_governance_or_fund_manager(sender)
        self._invest_activated = activated
        self.emit("InvestActivatedUpdated", activated=activated)

    # ── Sweep ──

    def can_not_sweep(self, token: str) -> bool:
        return token == self._underlying or token in self._reward_tokens

    @external
    def sweep(self, token: str, recipient: str, *, sender: str) -> int:
        """Send the strategy's whole balance of a stray ``token`` to ``recipient``.

        Raises:
            AuthorizationError: If the caller is not governance.
            RestrictedAssetError: For the underlying or a reward token.
        """
        if sender != self.governance:
            raise AuthorizationError("Not governance", ErrorCode.NOT_GOVERNANCE)
        if self.can_not_sweep(token):
            raise RestrictedAssetError(token=token)
        stray = self.chain.at(token)
        amount = stray.balance_of(self.address)
        if amount > 0:
            stray.transfer(recipient, amount, sender=self.address)
        self.emit("Swept", token=token, recipient=recipient, amount=amount)
        logger.info("Swept %d of %s to %s", amount, token, recipient)
        return amount
