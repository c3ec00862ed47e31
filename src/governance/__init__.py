"""Two-step Governance Handover."""

from src.governance.models import ActiveGovernance, GovernanceState, PendingGovernance
from src.governance.governable import Governable

__all__ = [
    "ActiveGovernance",
    "GovernanceState",
    "PendingGovernance",
    "Governable",
]
