"""Optimizer strategy.

A meta-strategy that owns a set of sub-strategies and keeps all of its
capital in whichever one currently reports the highest APR.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from src.chain.chain import Chain
from src.chain.config import ZERO_ADDRESS
from src.chain.contract import external
from src.errors import ErrorCode, InvalidStateError
from src.strategies.base import StrategyBase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyInfo:
    """Snapshot of a sub-strategy as reported by the optimizer."""
    name: str
    address: str
    invested_underlying_balance: int
    apr: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "invested_underlying_balance": self.invested_underlying_balance,
            "apr": self.apr,
        }


class OptimizerStrategy(StrategyBase):
    """Routes capital to the best-APR sub-strategy.

    Sub-strategies are built with the optimizer as their fund. Selection is
    a scan in insertion order with a strict comparison: on a tie the
    incumbent stays active, and with no incumbent the first-added wins.
    Whenever the active strategy changes while investing is active, the
    previous one is emptied into the optimizer before the idle balance is
    reinvested.
    """

    NAME = "OptimizerStrategy"

    def __init__(self, chain: Chain, fund: str, *, sender: str):
        super().__init__(chain, fund, sender=sender)
        self._strategies: list[str] = []
        self._active_strategy: Optional[str] = None
        # Member whose position produced the profit the fund harvests next
        self._earning_strategy: Optional[str] = None

    # ── Views ──

    @property
    def active_strategy(self) -> Optional[str]:
        return self._active_strategy

    @property
    def creator(self) -> str:
        """Creator of the member that earned since the last hard work.

        A switch between hard works does not move the pending reward to the
        newcomer; the member that held the capital keeps it.
        """
        earner = self._earning_strategy or self._active_strategy
        if earner is not None:
            return self._sub(earner).creator
        return self.deployer

    def apr(self) -> int:
        if self._active_strategy is None:
            return 0
        return self._sub(self._active_strategy).apr()

    def get_strategy_list(self) -> list[str]:
        return list(self._strategies)

    def get_strategies(self) -> list[StrategyInfo]:
        result = []
        for address in self._strategies:
            strategy = self._sub(address)
            result.append(StrategyInfo(
                name=strategy.name,
                address=address,
                invested_underlying_balance=strategy.invested_underlying_balance(),
                apr=strategy.apr(),
            ))
        return result

    def _sub(self, address: str):
        return self.chain.at(address)

    # ── Position ──

    def _position_balance(self) -> int:
        return sum(self._sub(a).invested_underlying_balance() for a in self._strategies)

    def _invest(self, amount: int) -> None:
        if self._active_strategy is None:
            return
        self._token().transfer(self._active_strategy, amount, sender=self.address)

    def _divest(self, amount: int) -> None:
        for address in list(self._strategies):
            if amount <= 0:
                break
            strategy = self._sub(address)
            available = strategy.invested_underlying_balance()
            if available == 0:
                continue
            before = self._idle_underlying()
            if available <= amount:
                strategy.withdraw_all_to_fund(sender=self.address)
            else:
                strategy.withdraw_to_fund(amount, sender=self.address)
            amount -= self._idle_underlying() - before

    # ── Selection ──

    def _best_strategy(self) -> Optional[str]:
        best = self._active_strategy if self._active_strategy in self._strategies else None
        best_apr = self._sub(best).apr() if best is not None else 0
        for address in self._strategies:
            apr = self._sub(address).apr()
            if best is None or apr > best_apr:
                best, best_apr = address, apr
        return best

    def _select_active_strategy(self) -> bool:
        """Switch to the best strategy.

        The previous one is emptied only while investing is active. With
        investing paused its position stays put and migrates on the first
        allocation after investing resumes.

        Returns:
            True if the active strategy changed.
        """
        winner = self._best_strategy()
        if winner == self._active_strategy:
            return False
        previous = self._active_strategy
        self._active_strategy = winner
        if self._invest_activated and previous is not None and previous in self._strategies:
            self._sub(previous).withdraw_all_to_fund(sender=self.address)
        self.emit("ActiveStrategyChangedOptimizer", strategy=winner)
        logger.info("Active strategy changed from %s to %s", previous, winner)
        return True

    def _allocate(self) -> None:
        if self._active_strategy is None:
            return
        stale = [
            address for address in self._strategies
            if address != self._active_strategy
            and self._sub(address).invested_underlying_balance() > 0
        ]
        if self._invest_activated:
            for address in stale:
                self._sub(address).withdraw_all_to_fund(sender=self.address)
            stale = []
            idle = self._idle_underlying()
            if idle > 0:
                self._invest(idle)
        # Positions left behind while paused keep being harvested
        for address in [self._active_strategy, *stale]:
            self._sub(address).do_hard_work(sender=self.address)

    # ── Membership ──

    @external
    def add_strategy(self, strategy: str, *, sender: str) -> None:
        """Add a sub-strategy built for this optimizer and re-select.

        Raises:
            AuthorizationError: If the caller is neither governance nor fund manager.
            InvalidStateError: Zero address, foreign owner, or already added.
        """
        self._only_governance_or_fund_manager(sender)
        if strategy == ZERO_ADDRESS:
            raise InvalidStateError("newStrategy cannot be empty", ErrorCode.ZERO_ADDRESS)
        if self._sub(strategy).fund != self.address:
            raise InvalidStateError(
                "The strategy does not belong to this optimizer", ErrorCode.FUND_MISMATCH,
            )
        if strategy in self._strategies:
            raise InvalidStateError(
                "The strategy is already added in this optimizer",
                ErrorCode.STRATEGY_ALREADY_ADDED,
            )
        self._strategies.append(strategy)
        self.emit("StrategyAddedOptimizer", strategy=strategy)
        if self._select_active_strategy():
            self._allocate()

    @external
    def remove_strategy(self, strategy: str, *, sender: str) -> None:
        """Remove a sub-strategy, keeping its capital inside the optimizer."""
        self._only_governance_or_fund_manager(sender)
        if strategy not in self._strategies:
            raise InvalidStateError(
                "The strategy does not belong to this optimizer", ErrorCode.STRATEGY_NOT_FOUND,
            )
        self._strategies.remove(strategy)
        if self._active_strategy == strategy:
            self._active_strategy = None
        self._sub(strategy).withdraw_all_to_fund(sender=self.address)
        self.emit("StrategyRemovedOptimizer", strategy=strategy)
        self._select_active_strategy()
        self._allocate()

    # ── Hard work ──

    @external
    def do_hard_work(self, *, sender: str) -> None:
        """Re-select the best strategy, then invest idle and harvest it."""
        self._only_fund_or_operators(sender)
        self._select_active_strategy()
        self._allocate()
        if sender == self._fund:
            self._earning_strategy = self._active_strategy
