"""Integration tests for the advisor service."""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from liquiditylink.config.settings import Settings
from liquiditylink.core.models import RebalancingAction
from liquiditylink.data.clients.base import PoolDataSource
from liquiditylink.data.pipeline import DataPipeline
from liquiditylink.exceptions import DataSourceError
from liquiditylink.service import PortfolioAdvisor


class TestPortfolioAdvisor:
    """Integration tests for PortfolioAdvisor."""

    @pytest.fixture
    def mock_source(self, uniswap_pool, aerodrome_pool, make_position):
        source = MagicMock(spec=PoolDataSource)
        source.source_name = "Uniswap V3"
        source.get_pools = AsyncMock(return_value=[uniswap_pool, aerodrome_pool])
        source.get_positions = AsyncMock(return_value=[
            make_position(),
            make_position(position_id="orphan", token0="DAI", token1="USDT"),
        ])
        source.close = AsyncMock()
        return source

    @pytest.fixture
    def pipeline(self, mock_source):
        return DataPipeline(Settings(), sources=[mock_source])

    @pytest.mark.asyncio
    async def test_analyze_wallet(self, pipeline, as_of):
        """Test the full fetch-score-recommend flow."""
        advisor = PortfolioAdvisor(pipeline)

        report = await advisor.analyze_wallet("0xowner", as_of=as_of)

        assert advisor.strategy.id == "balanced"
        assert report.owner == "0xowner"
        assert report.generated_at == as_of
        assert report.analysis.total_positions == 2
        assert [r.position_id for r in report.analysis.recommendations] == ["pos-1"]
        assert report.analysis.recommendations[0].action == RebalancingAction.REBALANCE
        assert report.analysis.total_potential_gain == Decimal("500")
        assert report.portfolio.positions_assessed == 1

    @pytest.mark.asyncio
    async def test_custom_strategy(self, pipeline, conservative, as_of):
        """Test analysis against a chosen strategy."""
        advisor = PortfolioAdvisor(pipeline, conservative)

        report = await advisor.analyze_wallet("0xowner", as_of=as_of)

        assert report.analysis.strategy_id == "conservative"

    @pytest.mark.asyncio
    async def test_force_refresh(self, pipeline, mock_source, as_of):
        """Test that force_refresh bypasses the pool cache."""
        advisor = PortfolioAdvisor(pipeline)

        await advisor.analyze_wallet("0xowner", as_of=as_of)
        await advisor.analyze_wallet("0xowner", as_of=as_of, force_refresh=True)

        assert mock_source.get_pools.call_count == 2

    @pytest.mark.asyncio
    async def test_data_source_error(self, pipeline, mock_source, as_of):
        """Test that fetch failures propagate to the caller."""
        mock_source.get_positions.side_effect = DataSourceError("Uniswap V3", "timeout")
        advisor = PortfolioAdvisor(pipeline)

        with pytest.raises(DataSourceError):
            await advisor.analyze_wallet("0xowner", as_of=as_of)

    @pytest.mark.asyncio
    async def test_report_to_dict(self, pipeline, as_of):
        """Test report serialization."""
        report = await PortfolioAdvisor(pipeline).analyze_wallet("0xowner", as_of=as_of)

        data = report.to_dict()

        assert data["owner"] == "0xowner"
        assert data["generated_at"] == "2024-06-01T00:00:00+00:00"
        assert data["analysis"]["recommendations"][0]["action"] == "rebalance"
        assert data["portfolio"]["positions_assessed"] == 1
