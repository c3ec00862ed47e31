"""Strategies.

The capability a fund expects, a common base, a simulated yield strategy
and the best-APR optimizer.
"""

from src.strategies.interface import Strategy
from src.strategies.base import StrategyBase
from src.strategies.simulated import ProfitStrategy
from src.strategies.optimizer import OptimizerStrategy, StrategyInfo

__all__ = [
    "Strategy",
    "StrategyBase",
    "ProfitStrategy",
    "OptimizerStrategy",
    "StrategyInfo",
]
