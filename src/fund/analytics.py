"""Fund analytics.

Tabular views of a fund's allocation and of its hard-work history, built
from contract state and emitted events.
"""

import pandas as pd

from src.chain.chain import Chain
from src.fund.config import MAX_BPS

ALLOCATION_COLUMNS = [
    "strategy", "name", "weightage_bps", "strategy_fee_bps",
    "invested", "target", "drift", "weight",
]

HISTORY_COLUMNS = [
    "timestamp", "tx_id", "tvl", "price_per_share", "profit", "platform_fee",
]


def allocation_frame(fund) -> pd.DataFrame:
    """Current vs target allocation for every strategy of ``fund``.

    Columns:
        invested: underlying the strategy reports.
        target: weightage share of total value locked.
        drift: invested minus target.
        weight: invested as a fraction of total value locked.
    """
    tvl = fund.total_value_locked()
    rows = []
    for address in fund.get_strategy_list():
        record = fund.get_strategy(address)
        strategy = fund.chain.at(address)
        invested = strategy.invested_underlying_balance()
        target = tvl * record.weightage_bps // MAX_BPS
        rows.append({
            "strategy": address,
            "name": strategy.name,
            "weightage_bps": record.weightage_bps,
            "strategy_fee_bps": record.strategy_fee_bps,
            "invested": invested,
            "target": target,
            "drift": invested - target,
            "weight": invested / tvl if tvl else 0.0,
        })
    return pd.DataFrame(rows, columns=ALLOCATION_COLUMNS)


def hard_work_history(chain: Chain, fund_address: str) -> pd.DataFrame:
    """One row per confirmed hard work of the fund, in execution order."""
    rows = []
    for receipt in chain.receipts:
        done = [
            e for e in receipt.events
            if e.name == "HardWorkDone" and e.contract == fund_address
        ]
        if not done:
            continue
        own = [e for e in receipt.events if e.contract == fund_address]
        rows.append({
            "timestamp": receipt.timestamp,
            "tx_id": receipt.tx_id,
            "tvl": done[0]["tvl"],
            "price_per_share": done[0]["price_per_share"],
            "profit": sum(e["profit"] for e in own if e.name == "StrategyRewards"),
            "platform_fee": sum(e["fee"] for e in own if e.name == "PlatformRewards"),
        })
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def price_per_share_returns(history: pd.DataFrame) -> pd.Series:
    """Period-over-period change in price per share between hard works."""
    if history.empty:
        return pd.Series(dtype=float, name="return")
    pps = history["price_per_share"].astype(float)
    return pps.pct_change().fillna(0.0).rename("return")
