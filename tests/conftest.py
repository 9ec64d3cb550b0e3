"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from liquiditylink.config.settings import get_settings
from liquiditylink.core.models import PoolMetrics, Position
from liquiditylink.strategies import default_strategies

AS_OF = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point storage at a temp dir and reset cached settings per test."""
    monkeypatch.setenv("LIQUIDITYLINK_STORAGE_DIR", str(tmp_path / "storage"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def as_of() -> datetime:
    """Fixed evaluation time."""
    return AS_OF


@pytest.fixture
def make_pool():
    """Factory for pool snapshots with healthy defaults."""
    def _make(
        protocol="Uniswap V3",
        pair="WETH/USDC",
        apy="4",
        tvl="5000000",
        volume="1000000",
        fees="548",
        pool_id=None,
    ) -> PoolMetrics:
        return PoolMetrics(
            protocol=protocol,
            pair_label=pair,
            apy=Decimal(apy),
            tvl=Decimal(tvl),
            volume_24h=Decimal(volume),
            fees_24h=Decimal(fees),
            pool_id=pool_id,
        )
    return _make


@pytest.fixture
def make_position():
    """Factory for positions deposited ``days`` before AS_OF."""
    def _make(
        position_id="pos-1",
        protocol="Uniswap V3",
        token0="WETH",
        token1="USDC",
        days=10,
        value="10000",
        owner="0xowner",
    ) -> Position:
        return Position(
            position_id=position_id,
            owner=owner,
            protocol=protocol,
            token0=token0,
            token1=token1,
            amount0=Decimal("1"),
            amount1=Decimal("3000"),
            deposited_at=AS_OF - timedelta(days=days),
            current_value=Decimal(value),
        )
    return _make


@pytest.fixture
def uniswap_pool(make_pool) -> PoolMetrics:
    """WETH/USDC on Uniswap V3 at 4% APY (pool risk 15)."""
    return make_pool(pool_id="0xuni")


@pytest.fixture
def aerodrome_pool(make_pool) -> PoolMetrics:
    """WETH/USDC on Aerodrome at 9% APY (pool risk 24)."""
    return make_pool(
        protocol="Aerodrome", apy="9", tvl="3000000", volume="600000", pool_id="0xaero"
    )


@pytest.fixture
def strategies():
    """Built-in strategies keyed by id."""
    return {s.id: s for s in default_strategies()}


@pytest.fixture
def balanced(strategies):
    """Target 8% APY, max IL 5%, medium tolerance, threshold 15%."""
    return strategies["balanced"]


@pytest.fixture
def conservative(strategies):
    """Target 5% APY, max IL 2%, low tolerance, threshold 10%."""
    return strategies["conservative"]
