"""Tests for hard work: rebalancing, profit accounting and the fee waterfall."""

import pytest

from src.errors import AuthorizationError, ErrorCode, InvalidStateError
from src.fund import HardWorkReport
from src.strategies import ProfitStrategy

UNIT = 10 ** 18
YEAR = 31_536_000
DAY = 86_400


class ReentrantStrategy(ProfitStrategy):
    """Calls back into its fund while the fund is doing hard work."""

    NAME = "ReentrantStrategy"

    def _harvest(self):
        self.chain.at(self.fund).withdraw(1, sender=self.address)


@pytest.fixture
def strategy(fund, fund_manager, make_strategy):
    strategy = make_strategy(fund, 1_000)
    fund.add_strategy(strategy.address, 5_000, 500, sender=fund_manager)
    return strategy


@pytest.fixture
def funded(strategy, alice, deposit):
    deposit(alice, 50_000_000)
    return strategy


# ── Authorization Tests ──


class TestHardWorkAuthorization:
    def test_relayer(self, fund, relayer, funded):
        fund.do_hard_work(sender=relayer)

    def test_fund_manager(self, fund, fund_manager, funded):
        fund.do_hard_work(sender=fund_manager)

    def test_stranger(self, fund, stranger, funded):
        with pytest.raises(AuthorizationError, match="Not fund manager or relayer") as exc:
            fund.do_hard_work(sender=stranger)
        assert exc.value.error_code == ErrorCode.NOT_FUND_MANAGER_OR_RELAYER

    def test_governance_is_not_relayer(self, fund, governance, funded):
        with pytest.raises(AuthorizationError):
            fund.do_hard_work(sender=governance)


# ── Allocation Tests ──


class TestAllocation:
    def test_first_hard_work_allocates_by_weight(self, chain, fund, relayer, funded):
        report = fund.do_hard_work(sender=relayer)
        assert funded.invested_underlying_balance() == 25_000_000
        assert fund.idle_balance() == 25_000_000
        assert fund.total_value_locked() == 50_000_000
        assert isinstance(report, HardWorkReport)
        assert report.harvests == []
        receipt = chain.last_receipt
        assert receipt.event("HardWorkDone")["tvl"] == 50_000_000
        assert not receipt.has_event("StrategyRewards")

    def test_profit_raises_price_per_share(self, fund, relayer, alice, funded):
        fund.do_hard_work(sender=relayer)
        funded.invest_all_underlying(sender=alice)
        assert funded.invested_underlying_balance() == 27_500_000
        assert fund.price_per_share() == UNIT * 52_500_000 // 50_000_000

    def test_weight_increase_moves_capital(self, fund, fund_manager, relayer, funded):
        fund.do_hard_work(sender=relayer)
        fund.update_strategy_weightage(funded.address, 6_000, sender=fund_manager)
        fund.do_hard_work(sender=relayer)
        assert funded.invested_underlying_balance() == 30_000_000
        assert fund.idle_balance() == 20_000_000

    def test_weight_decrease_moves_capital(self, fund, fund_manager, relayer, funded):
        fund.do_hard_work(sender=relayer)
        fund.update_strategy_weightage(funded.address, 1_000, sender=fund_manager)
        fund.do_hard_work(sender=relayer)
        assert funded.invested_underlying_balance() == 5_000_000
        assert fund.idle_balance() == 45_000_000

    def test_two_strategies(self, fund, fund_manager, relayer, alice, deposit, make_strategy):
        first = make_strategy(fund, 100)
        second = make_strategy(fund, 200)
        fund.add_strategy(first.address, 3_000, 0, sender=fund_manager)
        fund.add_strategy(second.address, 5_000, 0, sender=fund_manager)
        deposit(alice, 50_000_000)
        fund.do_hard_work(sender=relayer)
        assert first.invested_underlying_balance() == 15_000_000
        assert second.invested_underlying_balance() == 25_000_000
        assert fund.idle_balance() == 10_000_000

    def test_empty_fund(self, chain, fund, relayer):
        report = fund.do_hard_work(sender=relayer)
        assert report.total_value_locked == 0
        assert report.price_per_share == UNIT
        assert chain.last_receipt.has_event("HardWorkDone")

    def test_last_hard_work_timestamp(self, chain, fund, relayer, funded):
        chain.sleep(500)
        fund.do_hard_work(sender=relayer)
        assert fund.last_hard_work_timestamp == chain.timestamp


# ── Rebalance Tests ──


class TestRebalance:
    def test_rebalance_without_harvest(self, chain, fund, fund_manager, relayer, alice, funded):
        fund.do_hard_work(sender=relayer)
        funded.invest_all_underlying(sender=alice)
        fund.update_strategy_weightage(funded.address, 2_000, sender=fund_manager)
        fund.rebalance(sender=fund_manager)
        assert funded.invested_underlying_balance() == 10_500_000
        receipt = chain.last_receipt
        assert receipt.has_event("Rebalanced")
        assert not receipt.has_event("StrategyRewards")
        assert fund.balance_of(funded.creator) == 0

    def test_rebalance_authorization(self, fund, governance, stranger, funded):
        fund.rebalance(sender=governance)
        with pytest.raises(AuthorizationError):
            fund.rebalance(sender=stranger)

    def test_should_rebalance_triggers_immediately(self, fund, fund_manager, relayer, funded):
        fund.do_hard_work(sender=relayer)
        fund.update_strategy_weightage(funded.address, 7_000, sender=fund_manager)
        fund.set_should_rebalance(True, sender=fund_manager)
        assert funded.invested_underlying_balance() == 35_000_000
        assert fund.should_rebalance is False

    def test_should_rebalance_false_is_noop(self, chain, fund, fund_manager, funded):
        fund.set_should_rebalance(False, sender=fund_manager)
        assert funded.invested_underlying_balance() == 0
        assert not chain.last_receipt.has_event("Rebalanced")

    def test_rebalance_preserves_tvl(self, fund, fund_manager, relayer, alice, deposit, make_strategy, funded):
        other = make_strategy(fund, 300)
        fund.add_strategy(other.address, 2_000, 0, sender=fund_manager)
        fund.do_hard_work(sender=relayer)
        fund.update_strategy_weightage(funded.address, 1_000, sender=fund_manager)
        fund.update_strategy_weightage(other.address, 8_000, sender=fund_manager)
        fund.rebalance(sender=fund_manager)
        assert funded.invested_underlying_balance() == 5_000_000
        assert other.invested_underlying_balance() == 40_000_000
        assert fund.total_value_locked() == 50_000_000


# ── Fee Tests ──


class TestFees:
    def test_fee_waterfall(self, chain, fund, governance, fund_manager, relayer, strategist, alice, funded):
        fund.set_platform_fee(100, sender=governance)
        fund.set_performance_fee_fund(1_000, sender=fund_manager)
        fund.do_hard_work(sender=relayer)
        funded.invest_all_underlying(sender=alice)
        chain.sleep(1000)

        report = fund.do_hard_work(sender=relayer)

        # 52.5M of value, withdraw 1.25M down to the 26.25M target first
        assert funded.invested_underlying_balance() == 26_250_000
        pps = UNIT * 52_500_000 // 50_000_000
        creator_shares = 125_000 * UNIT // pps
        assert creator_shares == 119_047
        supply = 50_000_000 + creator_shares
        manager_shares = 237_500 * UNIT // (52_500_000 * UNIT // supply)
        supply += manager_shares
        platform_shares = 7 * UNIT // (52_500_000 * UNIT // supply)

        assert fund.balance_of(strategist) == creator_shares
        assert fund.balance_of(fund_manager) == manager_shares
        assert fund.balance_of(governance) == platform_shares
        assert fund.total_supply == supply + platform_shares

        harvest = report.harvests[0]
        assert harvest.profit == 2_500_000
        assert harvest.creator_fee == 125_000
        assert harvest.profit_after_creator_fee == 2_375_000
        assert harvest.fund_manager_fee == 237_500
        assert report.platform.fee == 7

        receipt = chain.last_receipt
        assert receipt.event("StrategyRewards").values() == [funded.address, 2_500_000, creator_shares]
        assert receipt.event("FundManagerRewards").values() == [2_375_000, manager_shares]
        assert receipt.event("PlatformRewards").values() == [25_000_000, 1000, 7]

    def test_profit_measured_against_base(self, fund, relayer, alice, funded):
        fund.do_hard_work(sender=relayer)
        assert fund.get_strategy(funded.address).profit_base == 25_000_000
        funded.invest_all_underlying(sender=alice)
        report = fund.do_hard_work(sender=relayer)
        assert report.total_profit == 2_500_000
        assert fund.get_strategy(funded.address).profit_base == 26_250_000

    def test_no_profit_no_fees(self, chain, fund, relayer, funded):
        fund.do_hard_work(sender=relayer)
        fund.do_hard_work(sender=relayer)
        assert fund.total_supply == 50_000_000
        assert not chain.last_receipt.has_event("StrategyRewards")

    def test_no_manager_record_without_performance_fee(self, chain, fund, relayer, alice, funded):
        fund.do_hard_work(sender=relayer)
        funded.invest_all_underlying(sender=alice)
        fund.do_hard_work(sender=relayer)
        receipt = chain.last_receipt
        assert receipt.has_event("StrategyRewards")
        assert not receipt.has_event("FundManagerRewards")

    def test_platform_fee_to_platform_rewards(self, chain, fund, governance, relayer, bob, funded):
        fund.set_platform_fee(100, sender=governance)
        fund.set_platform_rewards(bob, sender=governance)
        fund.do_hard_work(sender=relayer)
        chain.sleep(YEAR)
        fund.do_hard_work(sender=relayer)
        # 1% of the 25M deployed for a full year
        assert chain.last_receipt.event("PlatformRewards")["fee"] == 250_000
        assert fund.balance_of(bob) == 250_000
        assert fund.balance_of(governance) == 0

    def test_no_platform_fee_without_deployed_capital(self, chain, fund, governance, relayer, funded):
        fund.set_platform_fee(100, sender=governance)
        chain.sleep(1000)
        fund.do_hard_work(sender=relayer)
        assert chain.last_receipt.event("PlatformRewards").values() == [0, 1000, 0]
        assert fund.balance_of(governance) == 0

    def test_no_platform_record_without_platform_fee(self, chain, fund, relayer, funded):
        fund.do_hard_work(sender=relayer)
        chain.sleep(1000)
        fund.do_hard_work(sender=relayer)
        assert not chain.last_receipt.has_event("PlatformRewards")

    def test_fee_bounds(self, fund, governance, fund_manager):
        with pytest.raises(InvalidStateError) as exc:
            fund.set_platform_fee(10_001, sender=governance)
        assert exc.value.error_code == ErrorCode.INVALID_FEE
        with pytest.raises(InvalidStateError):
            fund.set_performance_fee_fund(10_001, sender=fund_manager)

    def test_fee_authorization(self, fund, fund_manager, stranger):
        with pytest.raises(AuthorizationError, match="Not governance"):
            fund.set_platform_fee(100, sender=fund_manager)
        with pytest.raises(AuthorizationError):
            fund.set_platform_rewards(stranger, sender=fund_manager)
        with pytest.raises(AuthorizationError):
            fund.set_performance_fee_fund(100, sender=stranger)


# ── Price Per Share Tests ──


class TestPricePerShareAcrossHarvests:
    def test_non_decreasing_with_all_fees(self, chain, fund, governance, fund_manager, relayer,
                                          alice, funded):
        fund.set_platform_fee(100, sender=governance)
        fund.set_performance_fee_fund(1_000, sender=fund_manager)
        prices = [fund.price_per_share()]
        fund.do_hard_work(sender=relayer)
        prices.append(fund.price_per_share())

        for _ in range(4):
            chain.sleep(30 * DAY)
            funded.invest_all_underlying(sender=alice)
            report = fund.do_hard_work(sender=relayer)
            assert report.harvests[0].creator_fee_shares > 0
            assert report.harvests[0].fund_manager_fee_shares > 0
            assert report.platform.fee_shares > 0
            prices.append(fund.price_per_share())

        assert all(later >= earlier for earlier, later in zip(prices, prices[1:]))
        assert prices[-1] > prices[0]

    def test_unchanged_by_idle_harvests(self, fund, relayer, funded):
        fund.do_hard_work(sender=relayer)
        before = fund.price_per_share()
        for _ in range(3):
            fund.do_hard_work(sender=relayer)
        assert fund.price_per_share() == before


class TestRemoveKeepsValue:
    def test_tvl_kept_with_uneven_amounts_and_profit(self, fund, fund_manager, relayer,
                                                     alice, bob, deposit, make_strategy):
        strategy = make_strategy(fund, 777)
        fund.add_strategy(strategy.address, 3_333, 250, sender=fund_manager)
        fund.set_performance_fee_fund(1_500, sender=fund_manager)
        deposit(alice, 12_345_679)
        fund.do_hard_work(sender=relayer)
        strategy.invest_all_underlying(sender=alice)
        deposit(bob, 9_876_543)
        fund.do_hard_work(sender=relayer)
        strategy.invest_all_underlying(sender=alice)
        assert strategy.invested_underlying_balance() > 0

        tvl = fund.total_value_locked()
        price = fund.price_per_share()
        fund.remove_strategy(strategy.address, sender=fund_manager)

        assert fund.total_value_locked() == tvl
        assert fund.idle_balance() == tvl
        assert fund.price_per_share() == price
        assert strategy.invested_underlying_balance() == 0


# ── Atomicity Tests ──


class TestHardWorkAtomicity:
    def test_reentrancy_rejected(self, fund, token, fund_manager, relayer, alice, deposit, make_strategy):
        strategy = make_strategy(fund, 100, cls=ReentrantStrategy)
        fund.add_strategy(strategy.address, 5_000, 0, sender=fund_manager)
        deposit(alice, 1_000)
        with pytest.raises(InvalidStateError) as exc:
            fund.do_hard_work(sender=relayer)
        assert exc.value.error_code == ErrorCode.REENTRANT_CALL
        assert token.balance_of(strategy.address) == 0
        assert fund.idle_balance() == 1_000
        assert fund.get_strategy(strategy.address).profit_base == 0

    def test_guard_released_after_hard_work(self, fund, relayer, alice, funded):
        fund.do_hard_work(sender=relayer)
        assert fund.withdraw(1_000, sender=alice) == 1_000
