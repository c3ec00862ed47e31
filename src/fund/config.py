"""Fund configuration."""

from dataclasses import dataclass, field

from src.settings import get_settings

# Basis points are always out of 10000; weights, fees and yields share it
MAX_BPS = 10_000


@dataclass
class FundConfig:
    """Parameters fixed when a fund is initialized."""
    upgrade_delay_seconds: int = field(
        default_factory=lambda: get_settings().upgrade_delay_seconds
    )
    platform_fee_period_seconds: int = field(
        default_factory=lambda: get_settings().platform_fee_period_seconds
    )

    def to_dict(self) -> dict:
        return {
            "upgrade_delay_seconds": self.upgrade_delay_seconds,
            "platform_fee_period_seconds": self.platform_fee_period_seconds,
        }
