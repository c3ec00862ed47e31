"""Fee waterfall.

Fees are taken in underlying terms and paid out as newly minted shares.
All arithmetic is integer and truncates toward zero.
"""

from dataclasses import dataclass

from src.fund.config import MAX_BPS


@dataclass(frozen=True)
class ProfitSplit:
    profit: int
    creator_fee: int
    profit_after_creator_fee: int
    fund_manager_fee: int


def bps_of(amount: int, bps: int) -> int:
    return amount * bps // MAX_BPS


def creator_fee(profit: int, strategy_fee_bps: int) -> int:
    """Cut of a strategy's profit owed to its creator."""
    return bps_of(profit, strategy_fee_bps)


def fund_manager_fee(profit_after_creator_fee: int, performance_fee_bps: int) -> int:
    """Performance fee, charged on what is left after the creator fee."""
    return bps_of(profit_after_creator_fee, performance_fee_bps)


def platform_fee(
    base: int,
    platform_fee_bps: int,
    elapsed: int,
    period: int,
) -> int:
    """Annualized fee on ``base`` for ``elapsed`` seconds of a ``period``.

    Example:
        25_000_000 at 100 bps for 1000s of a 31_536_000s year is 7.
    """
    if base <= 0 or platform_fee_bps == 0 or elapsed <= 0:
        return 0
    return base * platform_fee_bps * elapsed // (MAX_BPS * period)


def split_profit(
    profit: int,
    strategy_fee_bps: int,
    performance_fee_bps: int,
) -> ProfitSplit:
    """Run a strategy's profit through the creator and fund manager fees."""
    to_creator = creator_fee(profit, strategy_fee_bps)
    remaining = profit - to_creator
    return ProfitSplit(
        profit=profit,
        creator_fee=to_creator,
        profit_after_creator_fee=remaining,
        fund_manager_fee=fund_manager_fee(remaining, performance_fee_bps),
    )


def shares_for_amount(amount: int, price_per_share: int, unit: int) -> int:
    """Shares worth ``amount`` of underlying at ``price_per_share``."""
    if amount <= 0 or price_per_share <= 0:
        return 0
    return amount * unit // price_per_share
