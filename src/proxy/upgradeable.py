"""Upgrade scheduling for logic that runs behind a proxy."""

import logging
from typing import Optional

from src.chain.contract import external
from src.errors import AuthorizationError, ErrorCode
from src.proxy import timelock
from src.proxy.timelock import NO_PENDING_UPGRADE, PendingUpgrade, UpgradeSchedule

logger = logging.getLogger(__name__)


class UpgradeSource:
    """Mixin holding the upgrade schedule in proxy storage.

    Expects the host to be Governable and to run behind a proxy that exposes
    ``implementation``.
    """

    _upgrade_schedule: UpgradeSchedule
    _upgrade_delay: int

    def _init_upgrade_schedule(self, delay: int) -> None:
        self._upgrade_schedule = NO_PENDING_UPGRADE
        self._upgrade_delay = delay

    @property
    def upgrade_schedule(self) -> UpgradeSchedule:
        return self._upgrade_schedule

    @property
    def upgrade_delay(self) -> int:
        return self._upgrade_delay

    @property
    def next_implementation(self) -> Optional[str]:
        schedule = self._upgrade_schedule
        return schedule.target if isinstance(schedule, PendingUpgrade) else None

    @property
    def next_implementation_timestamp(self) -> Optional[int]:
        schedule = self._upgrade_schedule
        return schedule.eta if isinstance(schedule, PendingUpgrade) else None

    @external
    def schedule_upgrade(self, new_implementation: str, *, sender: str) -> PendingUpgrade:
        """Schedule ``new_implementation``; overwrites any pending schedule."""
        self._only_governance(sender)
        pending = timelock.schedule_upgrade(
            self.implementation, new_implementation, self.now, self._upgrade_delay,
        )
        # Only deployed logic can be scheduled
        self.chain.at(new_implementation)
        self._upgrade_schedule = pending
        self.emit("UpgradeScheduled", implementation=pending.target, eta=pending.eta)
        logger.info("Upgrade to %s scheduled for %d", pending.target, pending.eta)
        return pending

    def should_upgrade(self) -> tuple[bool, Optional[str]]:
        target = timelock.matured_target(self._upgrade_schedule, self.now)
        return target is not None, target

    @external
    def finalize_upgrade(self, *, sender: str) -> None:
        if sender != self.governance:
            raise AuthorizationError(
                "Issue when finalizing the upgrade", ErrorCode.UPGRADE_NOT_AUTHORIZED,
            )
        self._upgrade_schedule = NO_PENDING_UPGRADE
