"""Upgradeable Proxy & Timelock."""

from src.proxy.timelock import (
    NO_PENDING_UPGRADE,
    NoPendingUpgrade,
    PendingUpgrade,
    UpgradeSchedule,
    matured_target,
    schedule_upgrade,
)
from src.proxy.upgradeable import UpgradeSource
from src.proxy.proxy import FundProxy

__all__ = [
    "NO_PENDING_UPGRADE",
    "NoPendingUpgrade",
    "PendingUpgrade",
    "UpgradeSchedule",
    "matured_target",
    "schedule_upgrade",
    "UpgradeSource",
    "FundProxy",
]
