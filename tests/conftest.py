"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.chain import Chain, Token  # noqa: E402
from src.fund import Fund, FundFactory  # noqa: E402
from src.settings import get_settings  # noqa: E402
from src.strategies import ProfitStrategy  # noqa: E402


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop cached settings so env overrides in one test don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def chain():
    return Chain()


@pytest.fixture
def accounts(chain):
    return chain.accounts


@pytest.fixture
def governance(accounts):
    return accounts[0]


@pytest.fixture
def fund_manager(accounts):
    return accounts[1]


@pytest.fixture
def strategist(accounts):
    return accounts[2]


@pytest.fixture
def relayer(accounts):
    return accounts[3]


@pytest.fixture
def alice(accounts):
    return accounts[4]


@pytest.fixture
def bob(accounts):
    return accounts[5]


@pytest.fixture
def stranger(accounts):
    return accounts[9]


@pytest.fixture
def token(chain, governance):
    return Token.deploy(chain, "Test Token", "TST", 18, sender=governance)


@pytest.fixture
def fund_impl(chain, governance):
    return Fund.deploy(chain, sender=governance)


@pytest.fixture
def factory(chain, governance):
    return FundFactory.deploy(chain, sender=governance)


@pytest.fixture
def fund(factory, fund_impl, token, governance, fund_manager, relayer):
    fund = factory.create_fund(
        fund_impl.address, token.address, "Fund Token", "FT", sender=governance,
    )
    fund.set_fund_manager(fund_manager, sender=governance)
    fund.set_relayer(relayer, sender=fund_manager)
    return fund


@pytest.fixture
def deposit(token, fund, governance):
    """Mint, approve and deposit in one step."""

    def _deposit(account, amount):
        token.mint(account, amount, sender=governance)
        token.approve(fund.address, amount, sender=account)
        return fund.deposit(amount, sender=account)

    return _deposit


@pytest.fixture
def make_strategy(chain, token, governance, strategist):
    """Deploy a ProfitStrategy owned by ``owner`` that may mint its yield."""

    def _make(owner, profit_bps, creator=None, cls=ProfitStrategy, **kwargs):
        strategy = cls.deploy(
            chain, owner.address, profit_bps, sender=creator or strategist, **kwargs,
        )
        token.grant_minter(strategy.address, sender=governance)
        return strategy

    return _make
