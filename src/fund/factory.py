"""Fund factory: deploys proxied funds over a shared implementation."""

import logging

from src.chain.chain import Chain
from src.chain.contract import Contract, external
from src.errors import ErrorCode, InvalidStateError
from src.fund.fund import Fund
from src.governance.governable import Governable
from src.proxy.proxy import FundProxy

logger = logging.getLogger(__name__)


class FundFactory(Contract, Governable):
    """Creates funds; only its governance may do so."""

    def __init__(self, chain: Chain, *, sender: str):
        super().__init__(chain, sender=sender)
        self._init_governance(sender)
        self._funds: list[str] = []

    @property
    def funds(self) -> list[str]:
        return list(self._funds)

    @external
    def create_fund(
        self, implementation: str, underlying: str, name: str, symbol: str, *, sender: str,
    ) -> FundProxy:
        """Deploy a proxy over ``implementation`` and initialize it.

        The caller becomes the new fund's governance and fund manager.

        Raises:
            AuthorizationError: If the caller is not the factory governance.
            InvalidStateError: If ``implementation`` is not fund logic.
        """
        self._only_governance(sender)
        if not isinstance(self.chain.at(implementation), Fund):
            raise InvalidStateError(
                "Implementation is not a fund", ErrorCode.UNKNOWN_CONTRACT,
                details={"implementation": implementation},
            )
        proxy = FundProxy(self.chain, implementation, sender=self.address)
        proxy.initialize_fund(underlying, name, symbol, governance=sender, sender=self.address)
        self._funds.append(proxy.address)
        self.emit("NewFund", fund=proxy.address)
        logger.info("Fund %s created over %s", proxy.address, implementation)
        return proxy
