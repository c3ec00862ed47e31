"""Fund data models."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class StrategyRecord:
    """A strategy registered with a fund.

    ``profit_base`` is the value the strategy is expected to hold absent any
    profit: its balance at the end of the previous hard work, adjusted by
    every transfer into or out of the strategy since.
    """
    strategy: str
    weightage_bps: int
    strategy_fee_bps: int
    profit_base: int = 0

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "weightage_bps": self.weightage_bps,
            "strategy_fee_bps": self.strategy_fee_bps,
            "profit_base": self.profit_base,
        }


@dataclass
class StrategyHarvest:
    """Profit realized from one strategy and the fee shares it paid."""
    strategy: str
    creator: str
    profit: int
    creator_fee: int = 0
    creator_fee_shares: int = 0
    profit_after_creator_fee: int = 0
    fund_manager_fee: int = 0
    fund_manager_fee_shares: int = 0

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "creator": self.creator,
            "profit": self.profit,
            "creator_fee": self.creator_fee,
            "creator_fee_shares": self.creator_fee_shares,
            "profit_after_creator_fee": self.profit_after_creator_fee,
            "fund_manager_fee": self.fund_manager_fee,
            "fund_manager_fee_shares": self.fund_manager_fee_shares,
        }


@dataclass
class PlatformCharge:
    """Time-proportional platform fee on deployed capital."""
    base: int
    elapsed: int
    fee: int
    fee_shares: int = 0

    def to_dict(self) -> dict:
        return {
            "base": self.base,
            "elapsed": self.elapsed,
            "fee": self.fee,
            "fee_shares": self.fee_shares,
        }


@dataclass
class HardWorkReport:
    """Outcome of one hard-work cycle."""
    timestamp: int
    total_value_locked: int
    price_per_share: int
    harvests: list[StrategyHarvest] = field(default_factory=list)
    platform: Optional[PlatformCharge] = None

    @property
    def total_profit(self) -> int:
        return sum(h.profit for h in self.harvests)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "total_value_locked": self.total_value_locked,
            "price_per_share": self.price_per_share,
            "total_profit": self.total_profit,
            "harvests": [h.to_dict() for h in self.harvests],
            "platform": self.platform.to_dict() if self.platform else None,
        }
