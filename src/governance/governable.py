"""Two-step governance handover shared by funds and factories."""

import logging
from typing import Optional

from src.chain.config import ZERO_ADDRESS
from src.chain.contract import external
from src.errors import AuthorizationError, ErrorCode, InvalidStateError
from src.governance.models import ActiveGovernance, GovernanceState, PendingGovernance

logger = logging.getLogger(__name__)


class Governable:
    """Mixin giving a contract a governance slot.

    The current governance nominates a successor with ``update_governance``;
    control only moves once the nominee calls ``accept_governance``.
    """

    _governance_state: GovernanceState

    def _init_governance(self, governance: str) -> None:
        if governance == ZERO_ADDRESS:
            raise InvalidStateError("governance shouldn't be empty", ErrorCode.ZERO_ADDRESS)
        self._governance_state = ActiveGovernance(governance)

    @property
    def governance(self) -> str:
        return self._governance_state.governance

    @property
    def pending_governance(self) -> Optional[str]:
        state = self._governance_state
        if isinstance(state, PendingGovernance):
            return state.pending
        return None

    def _only_governance(self, sender: str) -> None:
        if sender != self._governance_state.governance:
            raise AuthorizationError("Not governance", ErrorCode.NOT_GOVERNANCE)

    @external
    def update_governance(self, new_governance: str, *, sender: str) -> None:
        """Nominate a new governance; replaces any earlier nomination."""
        self._only_governance(sender)
        if new_governance == ZERO_ADDRESS:
            raise InvalidStateError(
                "new governance shouldn't be empty", ErrorCode.ZERO_ADDRESS,
            )
        self._governance_state = PendingGovernance(
            governance=self._governance_state.governance,
            pending=new_governance,
        )
        logger.info("Governance handover to %s proposed", new_governance)

    @external
    def accept_governance(self, *, sender: str) -> None:
        state = self._governance_state
        if not isinstance(state, PendingGovernance) or sender != state.pending:
            raise AuthorizationError(
                "Sender is not the pending governance", ErrorCode.NOT_PENDING_GOVERNANCE,
            )
        self._governance_state = ActiveGovernance(state.pending)
        self.emit("GovernanceUpdated", new_governance=state.pending, old_governance=state.governance)
        logger.info("Governance moved from %s to %s", state.governance, state.pending)
