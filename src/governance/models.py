"""Governance slot states.

The slot is either settled on one governance address or carries a pending
handover that the nominee still has to accept.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ActiveGovernance:
    """Governance is settled."""
    governance: str


@dataclass(frozen=True)
class PendingGovernance:
    """A handover to ``pending`` awaits acceptance."""
    governance: str
    pending: str


GovernanceState = Union[ActiveGovernance, PendingGovernance]
