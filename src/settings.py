"""Centralized settings for the vault engine.

Uses pydantic-settings to load from environment variables (prefixed VAULT_)
with defaults matching the production deployment.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Vault engine settings loaded from environment variables."""

    # --- Upgrade timelock ---
    upgrade_delay_seconds: int = 12 * 60 * 60

    # --- Fees ---
    platform_fee_period_seconds: int = 365 * 24 * 60 * 60

    # --- Execution environment ---
    genesis_timestamp: int = 1_600_000_000
    num_accounts: int = 10

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"

    model_config = {
        "env_prefix": "VAULT_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
