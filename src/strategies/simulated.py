"""Simulated yield strategy for exercising funds and optimizers."""

import logging
from typing import Iterable, Optional

from src.chain.chain import Chain
from src.chain.contract import external
from src.fund.config import MAX_BPS
from src.strategies.base import StrategyBase

logger = logging.getLogger(__name__)


class ProfitStrategy(StrategyBase):
    """Strategy that earns a fixed ``profit_bps`` per accrual.

    Deployed underlying stays on the strategy's own balance and is tracked
    as the position. ``invest_all_underlying`` mints the yield, so the
    strategy must be a minter of the underlying token.
    """

    NAME = "ProfitStrategy"

    def __init__(
        self,
        chain: Chain,
        fund: str,
        profit_bps: int,
        *,
        sender: str,
        underlying: Optional[str] = None,
        reward_tokens: Iterable[str] = (),
    ):
        super().__init__(
            chain, fund, sender=sender, underlying=underlying, reward_tokens=reward_tokens,
        )
        self.profit_bps = profit_bps
        self._position = 0

    def apr(self) -> int:
        return self.profit_bps * 100

    def _idle_underlying(self) -> int:
        return self._token().balance_of(self.address) - self._position

    def _position_balance(self) -> int:
        return self._position

    def _invest(self, amount: int) -> None:
        self._position += amount

    def _divest(self, amount: int) -> None:
        self._position -= min(amount, self._position)

    @external
    def invest_all_underlying(self, *, sender: str) -> int:
        """Accrue one period of yield on everything the strategy holds.

        Returns:
            Underlying minted as profit.
        """
        token = self._token()
        profit = token.balance_of(self.address) * self.profit_bps // MAX_BPS
        if profit > 0:
            token.mint(self.address, profit, sender=self.address)
            if self._invest_activated:
                self._position += profit
        logger.debug("%s accrued %d", self.address, profit)
        return profit
