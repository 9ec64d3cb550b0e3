"""Pydantic settings for LiquidityLink configuration."""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LIQUIDITYLINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Uniswap V3 subgraph (Base)
    subgraph_url: str = Field(
        default="https://api.thegraph.com/subgraphs/name/uniswap/uniswap-v3-base",
        description="Uniswap V3 subgraph GraphQL URL",
    )
    subgraph_rate_limit: int = Field(default=100, ge=1, description="Requests allowed per rate window")
    subgraph_rate_window: int = Field(default=60, ge=1, description="Rate window in seconds")
    pool_fetch_limit: int = Field(default=50, ge=1, le=1000, description="Pools fetched per refresh")

    # Cache Configuration
    pool_cache_ttl_seconds: int = Field(default=60, ge=0, le=3600, description="Pool snapshot TTL in seconds")

    # Risk assessment
    liquidity_threshold: Decimal = Field(
        default=Decimal("100000"), gt=0, description="TVL (USD) below which liquidity risk is penalized"
    )
    risk_free_rate: Decimal = Field(
        default=Decimal("5"), ge=0, le=100, description="Annual risk-free rate (%) for Sharpe"
    )

    # Rebalancing
    transaction_cost_usd: Decimal = Field(
        default=Decimal("50"), ge=0, description="Estimated exit + enter cost per move"
    )

    # Strategy storage
    storage_dir: Path = Field(default=Path.home() / ".liquiditylink", description="Strategy storage directory")

    # Logging
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("storage_dir", mode="before")
    @classmethod
    def parse_storage_dir(cls, v):
        """Convert string to Path."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Upper-case the level name."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def ensure_storage_dir(self) -> Path:
        """Ensure storage directory exists and return it."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        return self.storage_dir


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
