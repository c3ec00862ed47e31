"""Fund Share Ledger & Orchestration.

Deposits and withdrawals against a pooled share token, weighted strategy
allocation, hard work with the fee waterfall, and fund creation.
"""

from src.fund.config import MAX_BPS, FundConfig
from src.fund.models import (
    StrategyRecord,
    StrategyHarvest,
    PlatformCharge,
    HardWorkReport,
)
from src.fund.fees import (
    ProfitSplit,
    creator_fee,
    fund_manager_fee,
    platform_fee,
    shares_for_amount,
    split_profit,
)
from src.fund.fund import Fund
from src.fund.factory import FundFactory
from src.fund.analytics import (
    allocation_frame,
    hard_work_history,
    price_per_share_returns,
)

__all__ = [
    # Config
    "MAX_BPS",
    "FundConfig",
    # Models
    "StrategyRecord",
    "StrategyHarvest",
    "PlatformCharge",
    "HardWorkReport",
    # Fees
    "ProfitSplit",
    "creator_fee",
    "fund_manager_fee",
    "platform_fee",
    "shares_for_amount",
    "split_profit",
    # Contracts
    "Fund",
    "FundFactory",
    # Analytics
    "allocation_frame",
    "hard_work_history",
    "price_per_share_returns",
]
