"""Upgrade timelock states and transitions.

A proxy either has no pending upgrade or exactly one scheduled target that
becomes eligible once the clock reaches its eta.
"""

from dataclasses import dataclass
from typing import Optional, Union

from src.chain.config import ZERO_ADDRESS
from src.errors import ErrorCode, InvalidStateError


@dataclass(frozen=True)
class NoPendingUpgrade:
    """Nothing scheduled."""


@dataclass(frozen=True)
class PendingUpgrade:
    """``target`` may replace the implementation from ``eta`` on."""
    target: str
    eta: int

    def is_mature(self, now: int) -> bool:
        return now >= self.eta


UpgradeSchedule = Union[NoPendingUpgrade, PendingUpgrade]

NO_PENDING_UPGRADE = NoPendingUpgrade()


def schedule_upgrade(
    current_implementation: str,
    new_implementation: str,
    now: int,
    delay: int,
) -> PendingUpgrade:
    """Build the schedule for ``new_implementation``.

    Raises:
        InvalidStateError: For the zero address or the active implementation.
    """
    if new_implementation == ZERO_ADDRESS:
        raise InvalidStateError("newImplementation cannot be empty", ErrorCode.ZERO_ADDRESS)
    if new_implementation == current_implementation:
        raise InvalidStateError(
            "newImplementation is already the implementation", ErrorCode.SAME_IMPLEMENTATION,
        )
    return PendingUpgrade(target=new_implementation, eta=now + delay)


def matured_target(schedule: UpgradeSchedule, now: int) -> Optional[str]:
    """The scheduled target if it may be applied at ``now``, else None.

    An absent schedule and an immature one are indistinguishable here.
    """
    if isinstance(schedule, PendingUpgrade) and schedule.is_mature(now):
        return schedule.target
    return None
