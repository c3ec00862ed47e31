"""Fund share ledger and hard-work orchestration.

A fund pools one underlying token, issues shares against it and spreads the
pooled capital over strategies by weight. Each hard work moves every strategy
toward its target allocation, harvests it, and pays the fee waterfall in
newly minted shares.

The fund logic holds no storage of its own. It is deployed once and driven
through a FundProxy, which is where balances, strategies and settings live.
"""

import logging
from typing import Optional

from src.chain.chain import Chain
from src.chain.config import ZERO_ADDRESS
from src.chain.contract import Contract, external, non_reentrant
from src.chain.token import Token
from src.errors import (
    AuthorizationError,
    ErrorCode,
    InsufficientBalanceError,
    InvalidStateError,
)
from src.fund import fees
from src.fund.config import MAX_BPS, FundConfig
from src.fund.models import (
    HardWorkReport,
    PlatformCharge,
    StrategyHarvest,
    StrategyRecord,
)
from src.governance.governable import Governable
from src.logging_config.performance import log_performance
from src.proxy.upgradeable import UpgradeSource

logger = logging.getLogger(__name__)


class Fund(Contract, Governable, UpgradeSource):
    """Pooled vault over a single underlying token.

    Roles:
    - governance: fees, platform rewards, fund manager, upgrades
    - fund manager: strategies and weights, performance fee, deposit limits
    - relayer: may trigger hard work alongside the fund manager
    """

    VERSION = "V1"

    def __init__(self, chain: Chain, *, sender: str):
        super().__init__(chain, sender=sender)

    @external
    def initialize_fund(
        self,
        underlying: str,
        name: str,
        symbol: str,
        *,
        sender: str,
        governance: Optional[str] = None,
        config: Optional[FundConfig] = None,
    ) -> None:
        """Set up proxy storage. Runs once per proxy.

        Args:
            underlying: Address of the token the fund accepts.
            name: Share token name.
            symbol: Share token symbol.
            sender: Caller; becomes governance unless ``governance`` is given.
            governance: Initial governance.
            config: Timelock and fee parameters.

        Raises:
            InvalidStateError: If the fund was already initialized.
        """
        if getattr(self, "_initialized", False):
            raise InvalidStateError("Fund already initialized", ErrorCode.ALREADY_INITIALIZED)
        token = self.chain.at(underlying)
        config = config or FundConfig()
        governance = governance or sender

        self._initialized = True
        self._config = config
        self._underlying = underlying
        self.name = name
        self.symbol = symbol
        self.decimals = token.decimals
        self._underlying_unit = 10 ** token.decimals
        self._balances: dict[str, int] = {}
        self._total_supply = 0
        self._strategies: list[StrategyRecord] = []
        self._init_governance(governance)
        self._init_upgrade_schedule(config.upgrade_delay_seconds)
        self._fund_manager = governance
        self._relayer = governance
        self._platform_rewards: Optional[str] = None
        self._performance_fee_fund = 0
        self._platform_fee = 0
        self._deposit_limit = 0
        self._deposits_paused = False
        self._should_rebalance = False
        self._last_hard_work_timestamp = self.now
        logger.info("Fund %s (%s) initialized over %s", name, symbol, underlying)

    # ── Roles ──

    @property
    def fund_manager(self) -> str:
        return self._fund_manager

    @property
    def relayer(self) -> str:
        return self._relayer

    @property
    def platform_rewards(self) -> str:
        """Recipient of platform fee shares; governance until set."""
        return self._platform_rewards or self.governance

    def _only_fund_manager(self, sender: str) -> None:
        if sender != self._fund_manager:
            raise AuthorizationError("Not fund manager", ErrorCode.NOT_FUND_MANAGER)

    def _only_fund_manager_or_governance(self, sender: str) -> None:
        if sender not in (self._fund_manager, self.governance):
            raise AuthorizationError(
                "Not fund manager or governance", ErrorCode.NOT_FUND_MANAGER_OR_GOVERNANCE,
            )

    def _only_fund_manager_or_relayer(self, sender: str) -> None:
        if sender not in (self._fund_manager, self._relayer):
            raise AuthorizationError(
                "Not fund manager or relayer", ErrorCode.NOT_FUND_MANAGER_OR_RELAYER,
            )

    # ── Share token ──

    @property
    def underlying(self) -> str:
        return self._underlying

    @property
    def underlying_unit(self) -> int:
        return self._underlying_unit

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def config(self) -> FundConfig:
        return self._config

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    @external
    def transfer(self, to: str, amount: int, *, sender: str) -> bool:
        if to == ZERO_ADDRESS:
            raise InvalidStateError("Cannot transfer to the zero address", ErrorCode.ZERO_ADDRESS)
        balance = self.balance_of(sender)
        if amount < 0 or balance < amount:
            raise InsufficientBalanceError(
                "Transfer amount exceeds share balance",
                ErrorCode.INSUFFICIENT_SHARES,
                details={"balance": balance, "amount": amount},
            )
        self._balances[sender] = balance - amount
        self._balances[to] = self.balance_of(to) + amount
        self.emit("Transfer", sender=sender, receiver=to, value=amount)
        return True

    def _mint(self, account: str, shares: int) -> None:
        self._balances[account] = self.balance_of(account) + shares
        self._total_supply += shares

    def _burn(self, account: str, shares: int) -> None:
        self._balances[account] = self.balance_of(account) - shares
        self._total_supply -= shares

    def _token(self) -> Token:
        return self.chain.at(self._underlying)

    # ── Valuation ──

    def idle_balance(self) -> int:
        return self._token().balance_of(self.address)

    def total_value_locked(self) -> int:
        """Idle underlying plus everything the strategies report."""
        total = self.idle_balance()
        for record in self._strategies:
            total += self._strategy(record.strategy).invested_underlying_balance()
        return total

    def price_per_share(self) -> int:
        """Underlying per share, scaled by ``underlying_unit``."""
        if self._total_supply == 0:
            return self._underlying_unit
        return self.total_value_locked() * self._underlying_unit // self._total_supply

    def underlying_balance_with_investment_for_holder(self, holder: str) -> int:
        return self.balance_of(holder) * self.price_per_share() // self._underlying_unit

    # ── Deposits & withdrawals ──

    @property
    def deposit_limit(self) -> int:
        return self._deposit_limit

    @property
    def deposits_paused(self) -> bool:
        return self._deposits_paused

    @external
    @non_reentrant
    def deposit(self, amount: int, *, sender: str) -> int:
        """Pull ``amount`` underlying from ``sender`` and mint shares for it.

        Returns:
            Shares minted.

        Raises:
            InvalidStateError: When paused, over the limit, or for a zero amount.
            InsufficientBalanceError: If the token transfer fails.
        """
        if self._deposits_paused:
            raise InvalidStateError("Deposits are paused", ErrorCode.DEPOSITS_PAUSED)
        if amount <= 0:
            raise InvalidStateError("Cannot deposit 0", ErrorCode.INVALID_AMOUNT)

        tvl = self.total_value_locked()
        if self._deposit_limit and tvl + amount > self._deposit_limit:
            raise InvalidStateError(
                "Total deposit limit exceeded",
                ErrorCode.DEPOSIT_LIMIT_EXCEEDED,
                details={"limit": self._deposit_limit, "tvl": tvl, "amount": amount},
            )

        if self._total_supply == 0:
            shares = amount
        elif tvl == 0:
            raise InvalidStateError("Fund holds no value", ErrorCode.INVALID_AMOUNT)
        else:
            shares = amount * self._total_supply // tvl
        if shares == 0:
            raise InvalidStateError("Deposit too small to mint shares", ErrorCode.INVALID_AMOUNT)

        self._mint(sender, shares)
        self._token().transfer_from(sender, self.address, amount, sender=self.address)
        self.emit("Deposit", beneficiary=sender, amount=amount)
        logger.info("Deposit of %d from %s for %d shares", amount, sender, shares)
        return shares

    @external
    @non_reentrant
    def withdraw(self, share_amount: int, *, sender: str) -> int:
        """Burn ``share_amount`` of the caller's shares and pay out underlying.

        Strategies are drained in registration order until idle covers the
        payout.

        Returns:
            Underlying paid out.

        Raises:
            InsufficientBalanceError: No shares outstanding, not enough shares,
                or strategies could not free enough underlying.
        """
        if self._total_supply == 0:
            raise InsufficientBalanceError("Fund has no shares", ErrorCode.NO_SHARES)
        if share_amount <= 0:
            raise InvalidStateError("Cannot withdraw 0", ErrorCode.INVALID_AMOUNT)
        balance = self.balance_of(sender)
        if balance < share_amount:
            raise InsufficientBalanceError(
                "Insufficient share balance",
                ErrorCode.INSUFFICIENT_SHARES,
                details={"balance": balance, "shares": share_amount},
            )

        amount = share_amount * self.price_per_share() // self._underlying_unit
        self._burn(sender, share_amount)
        self._free_liquidity(amount)
        self._token().transfer(sender, amount, sender=self.address)
        self.emit("Withdraw", beneficiary=sender, amount=amount)
        logger.info("Withdrawal of %d shares by %s for %d", share_amount, sender, amount)
        return amount

    def _free_liquidity(self, amount: int) -> None:
        token = self._token()
        for record in list(self._strategies):
            idle = token.balance_of(self.address)
            if idle >= amount:
                break
            strategy = self._strategy(record.strategy)
            available = strategy.invested_underlying_balance()
            if available == 0:
                continue
            shortfall = amount - idle
            if available <= shortfall:
                strategy.withdraw_all_to_fund(sender=self.address)
            else:
                strategy.withdraw_to_fund(shortfall, sender=self.address)
            record.profit_base -= token.balance_of(self.address) - idle

        idle = token.balance_of(self.address)
        if idle < amount:
            raise InsufficientBalanceError(
                "Insufficient liquidity to cover the withdrawal",
                ErrorCode.INSUFFICIENT_LIQUIDITY,
                details={"available": idle, "required": amount},
            )

    @external
    def set_deposit_limit(self, limit: int, *, sender: str) -> None:
        """Cap total value after a deposit; 0 removes the cap."""
        self._only_fund_manager_or_governance(sender)
        if limit < 0:
            raise InvalidStateError("Deposit limit cannot be negative", ErrorCode.INVALID_AMOUNT)
        self._deposit_limit = limit
        self.emit("DepositLimitUpdated", limit=limit)

    @external
    def pause_deposits(self, paused: bool, *, sender: str) -> None:
        self._only_fund_manager_or_governance(sender)
        self._deposits_paused = paused
        self.emit("DepositsPaused", paused=paused)

    # ── Strategies ──

    def _strategy(self, address: str):
        return self.chain.at(address)

    def _find_record(self, strategy: str) -> Optional[StrategyRecord]:
        for record in self._strategies:
            if record.strategy == strategy:
                return record
        return None

    def _require_record(self, strategy: str) -> StrategyRecord:
        record = self._find_record(strategy)
        if record is None:
            raise InvalidStateError(
                "Strategy not found", ErrorCode.STRATEGY_NOT_FOUND, details={"strategy": strategy},
            )
        return record

    def get_strategy_list(self) -> list[str]:
        return [record.strategy for record in self._strategies]

    def get_strategy(self, strategy: str) -> StrategyRecord:
        record = self._require_record(strategy)
        return StrategyRecord(**record.to_dict())

    def total_weightage(self) -> int:
        return sum(record.weightage_bps for record in self._strategies)

    def _check_weightage(self, total: int) -> None:
        if total > MAX_BPS:
            raise InvalidStateError(
                "Total weightage exceeds 100%",
                ErrorCode.WEIGHTAGE_EXCEEDED,
                details={"total_weightage_bps": total},
            )

    def _check_fee(self, fee_bps: int) -> None:
        if fee_bps < 0 or fee_bps > MAX_BPS:
            raise InvalidStateError(
                "Fee must be between 0 and 10000 bps", ErrorCode.INVALID_FEE, details={"fee": fee_bps},
            )

    @external
    def add_strategy(
        self, strategy: str, weightage_bps: int, strategy_fee_bps: int, *, sender: str,
    ) -> None:
        """Register a strategy built for this fund.

        Raises:
            AuthorizationError: If the caller is not the fund manager.
            InvalidStateError: Zero or duplicate strategy, foreign fund or
                asset, fee out of range, or total weight above 100%.
        """
        self._only_fund_manager(sender)
        if strategy == ZERO_ADDRESS:
            raise InvalidStateError("Strategy cannot be empty", ErrorCode.ZERO_ADDRESS)
        contract = self._strategy(strategy)
        if contract.fund != self.address:
            raise InvalidStateError(
                "The strategy does not belong to this fund", ErrorCode.FUND_MISMATCH,
            )
        if contract.underlying != self._underlying:
            raise InvalidStateError(
                "The strategy does not use the fund's underlying", ErrorCode.ASSET_MISMATCH,
            )
        if self._find_record(strategy) is not None:
            raise InvalidStateError("Strategy already added", ErrorCode.STRATEGY_ALREADY_ADDED)
        self._check_fee(strategy_fee_bps)
        if weightage_bps < 0:
            raise InvalidStateError("Weightage cannot be negative", ErrorCode.INVALID_WEIGHTAGE)
        self._check_weightage(self.total_weightage() + weightage_bps)

        self._strategies.append(StrategyRecord(
            strategy=strategy,
            weightage_bps=weightage_bps,
            strategy_fee_bps=strategy_fee_bps,
            profit_base=contract.invested_underlying_balance(),
        ))
        self.emit(
            "StrategyAdded",
            strategy=strategy,
            weightage_bps=weightage_bps,
            strategy_fee_bps=strategy_fee_bps,
        )
        logger.info("Strategy %s added at %d bps", strategy, weightage_bps)

    @external
    def remove_strategy(self, strategy: str, *, sender: str) -> None:
        """Deregister a strategy and pull all of its capital back to idle."""
        self._only_fund_manager_or_governance(sender)
        record = self._require_record(strategy)
        self._strategies.remove(record)
        self._strategy(strategy).withdraw_all_to_fund(sender=self.address)
        self.emit("StrategyRemoved", strategy=strategy)
        logger.info("Strategy %s removed", strategy)

    @external
    def update_strategy_weightage(self, strategy: str, weightage_bps: int, *, sender: str) -> None:
        """Change a target weight; capital moves on the next rebalance or hard work."""
        self._only_fund_manager(sender)
        record = self._require_record(strategy)
        if weightage_bps < 0:
            raise InvalidStateError("Weightage cannot be negative", ErrorCode.INVALID_WEIGHTAGE)
        self._check_weightage(self.total_weightage() - record.weightage_bps + weightage_bps)
        record.weightage_bps = weightage_bps
        self.emit("StrategyWeightageUpdated", strategy=strategy, weightage_bps=weightage_bps)

    # ── Fees & roles ──

    @property
    def performance_fee_fund(self) -> int:
        return self._performance_fee_fund

    @property
    def platform_fee(self) -> int:
        return self._platform_fee

    @property
    def last_hard_work_timestamp(self) -> int:
        return self._last_hard_work_timestamp

    @external
    def set_performance_fee_fund(self, fee_bps: int, *, sender: str) -> None:
        self._only_fund_manager_or_governance(sender)
        self._check_fee(fee_bps)
        self._performance_fee_fund = fee_bps
        self.emit("PerformanceFeeFundUpdated", fee=fee_bps)

    @external
    def set_platform_fee(self, fee_bps: int, *, sender: str) -> None:
        self._only_governance(sender)
        self._check_fee(fee_bps)
        self._platform_fee = fee_bps
        self.emit("PlatformFeeUpdated", fee=fee_bps)

    @external
    def set_platform_rewards(self, platform_rewards: str, *, sender: str) -> None:
        self._only_governance(sender)
        if platform_rewards == ZERO_ADDRESS:
            raise InvalidStateError("Platform rewards cannot be empty", ErrorCode.ZERO_ADDRESS)
        self._platform_rewards = platform_rewards
        self.emit("PlatformRewardsUpdated", platform_rewards=platform_rewards)

    @external
    def set_fund_manager(self, fund_manager: str, *, sender: str) -> None:
        self._only_governance(sender)
        if fund_manager == ZERO_ADDRESS:
            raise InvalidStateError("Fund manager cannot be empty", ErrorCode.ZERO_ADDRESS)
        self._fund_manager = fund_manager
        self.emit("FundManagerUpdated", fund_manager=fund_manager)

    @external
    def set_relayer(self, relayer: str, *, sender: str) -> None:
        self._only_fund_manager_or_governance(sender)
        if relayer == ZERO_ADDRESS:
            raise InvalidStateError("Relayer cannot be empty", ErrorCode.ZERO_ADDRESS)
        self._relayer = relayer
        self.emit("RelayerUpdated", relayer=relayer)

    # ── Rebalancing ──

    @property
    def should_rebalance(self) -> bool:
        return self._should_rebalance

    @external
    @non_reentrant
    def set_should_rebalance(self, should_rebalance: bool, *, sender: str) -> None:
        """Request a reallocation.

        Setting the flag reallocates immediately and consumes it, so it reads
        False again once the call returns.
        """
        self._only_fund_manager_or_governance(sender)
        self._should_rebalance = should_rebalance
        self.emit("ShouldRebalanceUpdated", should_rebalance=should_rebalance)
        if should_rebalance:
            self._rebalance()
            self._should_rebalance = False

    @external
    @non_reentrant
    def rebalance(self, *, sender: str) -> None:
        """Move every strategy to its target weight without harvesting."""
        self._only_fund_manager_or_governance(sender)
        self._rebalance()

    def _target(self, record: StrategyRecord, tvl: int) -> int:
        return tvl * record.weightage_bps // MAX_BPS

    def _rebalance(self) -> None:
        tvl = self.total_value_locked()
        # Withdraw from over-allocated strategies first so idle can fund the rest.
        for record in list(self._strategies):
            strategy = self._strategy(record.strategy)
            excess = strategy.invested_underlying_balance() - self._target(record, tvl)
            if excess > 0:
                self._withdraw_from(record, strategy, excess)
        for record in list(self._strategies):
            strategy = self._strategy(record.strategy)
            shortfall = self._target(record, tvl) - strategy.invested_underlying_balance()
            if shortfall > 0:
                self._invest_into(record, strategy, shortfall)
        self.emit("Rebalanced", tvl=tvl)
        logger.info("Fund rebalanced at tvl %d", tvl)

    def _invest_into(self, record: StrategyRecord, strategy, amount: int) -> int:
        amount = min(amount, self.idle_balance())
        if amount <= 0:
            return 0
        record.profit_base += amount
        self._token().transfer(strategy.address, amount, sender=self.address)
        return amount

    def _withdraw_from(self, record: StrategyRecord, strategy, amount: int) -> int:
        token = self._token()
        before = token.balance_of(self.address)
        strategy.withdraw_to_fund(amount, sender=self.address)
        withdrawn = token.balance_of(self.address) - before
        record.profit_base -= withdrawn
        return withdrawn

    def _move_to_target(self, record: StrategyRecord, strategy) -> None:
        target = self._target(record, self.total_value_locked())
        current = strategy.invested_underlying_balance()
        if target > current:
            self._invest_into(record, strategy, target - current)
        elif current > target:
            self._withdraw_from(record, strategy, current - target)

    # ── Hard work ──

    @external
    @non_reentrant
    @log_performance()
    def do_hard_work(self, *, sender: str) -> HardWorkReport:
        """Rebalance, harvest and charge fees across all strategies.

        For each strategy in registration order: move capital to the target
        weight, let the strategy do its own hard work, then measure profit
        against its profit base and pay the creator and fund manager fees.
        Finally charge the platform fee for the time since the last cycle.

        Returns:
            Report of the cycle.

        Raises:
            AuthorizationError: If the caller is neither fund manager nor relayer.
        """
        self._only_fund_manager_or_relayer(sender)
        harvests: list[StrategyHarvest] = []
        deployed = 0

        for record in list(self._strategies):
            strategy = self._strategy(record.strategy)
            deployed += max(record.profit_base, 0)
            # Read before the strategy runs; an optimizer may switch members
            creator = strategy.creator
            self._move_to_target(record, strategy)
            strategy.do_hard_work(sender=self.address)

            balance = strategy.invested_underlying_balance()
            profit = max(balance - record.profit_base, 0)
            record.profit_base = balance
            if profit > 0:
                harvests.append(self._pay_strategy_fees(record, creator, profit))

        platform = self._charge_platform_fee(deployed)
        self._last_hard_work_timestamp = self.now
        self._should_rebalance = False

        report = HardWorkReport(
            timestamp=self.now,
            total_value_locked=self.total_value_locked(),
            price_per_share=self.price_per_share(),
            harvests=harvests,
            platform=platform,
        )
        self.emit(
            "HardWorkDone",
            tvl=report.total_value_locked,
            price_per_share=report.price_per_share,
        )
        for harvest in harvests:
            self.emit(
                "StrategyRewards",
                strategy=harvest.strategy,
                profit=harvest.profit,
                creator_fee_shares=harvest.creator_fee_shares,
            )
            if self._performance_fee_fund > 0:
                self.emit(
                    "FundManagerRewards",
                    profit=harvest.profit_after_creator_fee,
                    fee_shares=harvest.fund_manager_fee_shares,
                )
        if self._platform_fee > 0:
            self.emit(
                "PlatformRewards",
                base=platform.base,
                elapsed=platform.elapsed,
                fee=platform.fee,
            )
        logger.info(
            "Hard work done: tvl %d, price per share %d, profit %d",
            report.total_value_locked, report.price_per_share, report.total_profit,
        )
        return report

    def _mint_fee(self, recipient: str, amount: int) -> int:
        shares = fees.shares_for_amount(amount, self.price_per_share(), self._underlying_unit)
        if shares > 0:
            self._mint(recipient, shares)
        return shares

    def _pay_strategy_fees(self, record: StrategyRecord, creator: str, profit: int) -> StrategyHarvest:
        split = fees.split_profit(
            profit, record.strategy_fee_bps, self._performance_fee_fund,
        )
        creator_shares = self._mint_fee(creator, split.creator_fee)
        manager_shares = self._mint_fee(self._fund_manager, split.fund_manager_fee)
        return StrategyHarvest(
            strategy=record.strategy,
            creator=creator,
            profit=profit,
            creator_fee=split.creator_fee,
            creator_fee_shares=creator_shares,
            profit_after_creator_fee=split.profit_after_creator_fee,
            fund_manager_fee=split.fund_manager_fee,
            fund_manager_fee_shares=manager_shares,
        )

    def _charge_platform_fee(self, deployed: int) -> PlatformCharge:
        elapsed = self.now - self._last_hard_work_timestamp
        fee = fees.platform_fee(
            deployed,
            self._platform_fee,
            elapsed,
            self._config.platform_fee_period_seconds,
        )
        return PlatformCharge(
            base=deployed,
            elapsed=elapsed,
            fee=fee,
            fee_shares=self._mint_fee(self.platform_rewards, fee),
        )
