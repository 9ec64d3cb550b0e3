"""Unit tests for the risk scorer and risk configuration."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from liquiditylink.config.settings import Settings
from liquiditylink.core.models import RiskCategory, Severity
from liquiditylink.core.risk_config import ProtocolReputation, RiskConfig
from liquiditylink.risk.estimators import ConstantMarketRiskEstimator
from liquiditylink.risk.scoring import (
    HIGH_APY_HINT,
    MANAGEABLE_MESSAGE,
    SEVERITY_BANNERS,
    RiskScorer,
    match_pool,
)


@pytest.fixture
def scorer():
    return RiskScorer()


class TestRiskConfig:
    """Tests for RiskConfig validation."""

    def test_default_weights_sum_to_one(self):
        """Test both default weight sets."""
        config = RiskConfig()

        assert sum(config.pool_weights.values()) == Decimal("1")
        assert sum(config.position_weights.values()) == Decimal("1")
        assert RiskCategory.MARKET not in config.pool_weights

    def test_weights_not_summing_to_one_rejected(self):
        """Test that a bad weight table is rejected at construction."""
        with pytest.raises(ValidationError):
            RiskConfig(pool_weights={
                RiskCategory.IMPERMANENT_LOSS: Decimal("0.5"),
                RiskCategory.SMART_CONTRACT: Decimal("0.6"),
            })

    def test_weight_out_of_range_rejected(self):
        """Test that negative weights are rejected."""
        with pytest.raises(ValidationError):
            RiskConfig(position_weights={
                RiskCategory.IMPERMANENT_LOSS: Decimal("1.2"),
                RiskCategory.MARKET: Decimal("-0.2"),
            })

    def test_missing_ceiling_rejected(self):
        """Test that every tolerance needs a ceiling."""
        with pytest.raises(ValidationError):
            RiskConfig(tolerance_ceilings={"low": Decimal("40")})

    def test_config_is_frozen(self):
        """Test that the configuration cannot be mutated."""
        config = RiskConfig()

        with pytest.raises(ValidationError):
            config.liquidity_threshold = Decimal("1")

    @pytest.mark.parametrize("table", ["pool_weights", "position_weights", "protocols", "tolerance_ceilings"])
    def test_tables_are_read_only(self, table):
        """Test that tables cannot be edited after construction."""
        config = RiskConfig()
        mapping = getattr(config, table)
        key = next(iter(mapping))

        with pytest.raises(TypeError):
            mapping[key] = mapping[key]

    def test_custom_weights_are_copied(self):
        """Test that mutating the caller's dict leaves the config unchanged."""
        weights = {RiskCategory.PROTOCOL: Decimal("1")}
        config = RiskConfig(pool_weights=weights)

        weights[RiskCategory.MARKET] = Decimal("5")

        assert dict(config.pool_weights) == {RiskCategory.PROTOCOL: Decimal("1")}

    def test_reputation_lookup_case_insensitive(self):
        """Test protocol lookup."""
        config = RiskConfig()

        assert config.reputation("uniswap v3").base_risk == Decimal("15")
        assert config.reputation("Nope") is None

    def test_from_settings(self):
        """Test settings-driven overrides."""
        config = RiskConfig.from_settings(Settings(liquidity_threshold=Decimal("250000")))

        assert config.liquidity_threshold == Decimal("250000")


class TestFactorScores:
    """Tests for the individual factor formulas."""

    @pytest.mark.parametrize("pair,apy,expected", [
        ("USDC/USDT", "3", "5"),
        ("WETH/USDC", "4", "35"),
        ("USDC/WETH", "10", "35"),
        ("WETH/USDC", "15", "40"),
        ("WETH/USDC", "25", "50"),
        ("WBTC/WETH", "5", "60"),
        ("PEPE/WETH", "5", "70"),
        ("PEPE/WETH", "30", "85"),
    ])
    def test_impermanent_loss(self, scorer, make_pool, pair, apy, expected):
        """Test pair categories and APY bumps."""
        pool = make_pool(pair=pair, apy=apy)

        assert scorer.impermanent_loss_score(pool) == Decimal(expected)

    def test_smart_contract_known(self, scorer):
        """Test audit, exploit and age components."""
        assert scorer.smart_contract_score("Uniswap V3") == Decimal("2.0")
        assert scorer.smart_contract_score("Aerodrome") == Decimal("26")

    def test_smart_contract_unknown(self, scorer):
        """Test the unknown-protocol default."""
        assert scorer.smart_contract_score("MysterySwap") == Decimal("70")
        # Curve has no contract data in the reputation table
        assert scorer.smart_contract_score("Curve") == Decimal("70")

    def test_liquidity_deep_pool(self, scorer, make_pool):
        """Test that a deep, active pool keeps only the baseline."""
        assert scorer.liquidity_score(make_pool()) == Decimal("10")

    def test_liquidity_shallow_pool(self, scorer, make_pool):
        """Test TVL and turnover penalties."""
        pool = make_pool(tvl="50000", volume="0")

        assert scorer.liquidity_score(pool) == Decimal("65")

    def test_liquidity_empty_pool(self, scorer, make_pool):
        """Test a pool with zero TVL."""
        pool = make_pool(tvl="0", volume="100")

        assert scorer.liquidity_score(pool) == Decimal("90")

    def test_protocol(self, scorer):
        """Test the static protocol table."""
        assert scorer.protocol_score("Uniswap V3") == Decimal("15")
        assert scorer.protocol_score("Curve") == Decimal("18")
        assert scorer.protocol_score("BaseSwap") == Decimal("55")
        assert scorer.protocol_score("MysterySwap") == Decimal("50")

    def test_protocol_trend(self, scorer):
        """Test TVL trend penalties."""
        assert scorer.protocol_trend_score("Uniswap V3") == Decimal("25")
        assert scorer.protocol_trend_score("BaseSwap") == Decimal("55")
        assert scorer.protocol_trend_score("Curve") == Decimal("25")
        assert scorer.protocol_trend_score("MysterySwap") == Decimal("60")

    def test_market_default(self, scorer, make_position):
        """Test market risk from the constant estimator."""
        assert scorer.market_score(make_position()) == Decimal("46.5")

    def test_market_custom_estimator(self, make_position):
        """Test that the market estimator can be swapped."""
        scorer = RiskScorer(market_estimator=ConstantMarketRiskEstimator(
            Decimal("100"), Decimal("100"), Decimal("100")
        ))

        assert scorer.market_score(make_position()) == Decimal("100")


class TestScorePool:
    """Tests for pool assessments."""

    def test_overall_is_rounded_weighted_sum(self, scorer, uniswap_pool):
        """Test the 4-factor pool model."""
        assessment = scorer.score_pool(uniswap_pool)

        # 35*.25 + 2*.30 + 10*.25 + 15*.20 = 14.85
        assert assessment.weighted_total == Decimal("14.85")
        assert assessment.overall == 15
        assert assessment.severity == Severity.LOW
        assert [f.category for f in assessment.factors] == [
            RiskCategory.IMPERMANENT_LOSS,
            RiskCategory.SMART_CONTRACT,
            RiskCategory.LIQUIDITY,
            RiskCategory.PROTOCOL,
        ]
        assert assessment.recommendations == [MANAGEABLE_MESSAGE]

    def test_rounds_half_up(self, make_pool):
        """Test that x.5 rounds up."""
        config = RiskConfig(
            pool_weights={RiskCategory.PROTOCOL: Decimal("1")},
            protocols={"HalfSwap": ProtocolReputation(name="HalfSwap", base_risk=Decimal("22.5"))},
        )
        assessment = RiskScorer(config).score_pool(make_pool(protocol="HalfSwap"))

        assert assessment.overall == 23

    def test_idempotent(self, scorer, aerodrome_pool):
        """Test that scoring the same pool twice yields the same result."""
        assert scorer.score_pool(aerodrome_pool) == scorer.score_pool(aerodrome_pool)

    @pytest.mark.parametrize("pair,apy,tvl,volume,protocol", [
        ("USDC/USDT", "0", "100000000", "100000000", "Uniswap V3"),
        ("PEPE/WETH", "500", "0", "0", "MysterySwap"),
        ("WETH/USDC", "12", "99999", "1", "BaseSwap"),
    ])
    def test_overall_bounded(self, scorer, make_pool, pair, apy, tvl, volume, protocol):
        """Test that overall always lies in [0, 100]."""
        assessment = scorer.score_pool(
            make_pool(protocol=protocol, pair=pair, apy=apy, tvl=tvl, volume=volume)
        )

        assert 0 <= assessment.overall <= 100
        for factor in assessment.factors:
            assert Decimal("0") <= factor.score <= Decimal("100")

    def test_recommendation_order(self, scorer, make_pool):
        """Test banner, then factor messages in declaration order, then hints."""
        pool = make_pool(protocol="MysterySwap", pair="PEPE/WETH", apy="30", tvl="10000", volume="0")
        assessment = scorer.score_pool(pool)

        # 85*.25 + 70*.30 + 85*.25 + 50*.20 = 73.5
        assert assessment.overall == 74
        assert assessment.severity == Severity.HIGH
        recs = assessment.recommendations
        assert recs[0] == SEVERITY_BANNERS[Severity.HIGH]
        assert "impermanent loss" in recs[1]
        assert "Smart contract" in recs[2]
        assert "liquidity" in recs[3]
        assert recs[4] == HIGH_APY_HINT
        assert len(recs) == 5

    def test_critical_banner(self, make_pool):
        """Test the critical banner with a worst-case protocol."""
        config = RiskConfig(protocols={
            "Rugged": ProtocolReputation(
                name="Rugged", base_risk=Decimal("100"), audit_score=Decimal("0"),
                exploit_count=2, days_in_market=0,
            ),
        })
        pool = make_pool(protocol="Rugged", pair="PEPE/WETH", apy="30", tvl="0", volume="0")
        assessment = RiskScorer(config).score_pool(pool)

        assert assessment.severity == Severity.CRITICAL
        assert assessment.recommendations[0] == SEVERITY_BANNERS[Severity.CRITICAL]

    def test_unknown_protocol_never_raises(self, scorer, make_pool):
        """Test defaults for a protocol outside the table."""
        assessment = scorer.score_pool(make_pool(protocol="MysterySwap"))

        assert assessment.factor(RiskCategory.SMART_CONTRACT) == Decimal("70")
        assert assessment.factor(RiskCategory.PROTOCOL) == Decimal("50")
        assert assessment.factor(RiskCategory.MARKET) is None


class TestScorePosition:
    """Tests for position assessments."""

    def test_five_factor_model(self, scorer, make_position, uniswap_pool):
        """Test the position weights including market risk."""
        assessment = scorer.score_position(make_position(), uniswap_pool)

        # 35*.30 + 2*.20 + 10*.20 + 15*.15 + 46.5*.15 = 22.125
        assert assessment.weighted_total == Decimal("22.125")
        assert assessment.overall == 22
        assert assessment.factor(RiskCategory.MARKET) == Decimal("46.5")
        assert sum(f.weight for f in assessment.factors) == Decimal("1")

    def test_score_position_or_none_unmatched(self, scorer, make_position, uniswap_pool):
        """Test that a position without a pool yields None."""
        position = make_position(token0="DAI", token1="USDT")

        assert scorer.score_position_or_none(position, [uniswap_pool]) is None

    def test_score_position_or_none_matched(self, scorer, make_position, uniswap_pool):
        """Test scoring through pool matching."""
        assessment = scorer.score_position_or_none(make_position(), [uniswap_pool])

        assert assessment is not None
        assert assessment.overall == 22


class TestMatchPool:
    """Tests for position-to-pool matching."""

    def test_prefers_own_protocol(self, make_position, uniswap_pool, aerodrome_pool):
        """Test that a pool on the position's protocol wins."""
        position = make_position(protocol="Aerodrome")

        assert match_pool(position, [uniswap_pool, aerodrome_pool]) is aerodrome_pool

    def test_falls_back_to_first_pair_match(self, make_position, uniswap_pool, aerodrome_pool):
        """Test the first pair match when no pool shares the protocol."""
        position = make_position(protocol="SushiSwap")

        assert match_pool(position, [aerodrome_pool, uniswap_pool]) is aerodrome_pool

    def test_token_order_ignored(self, make_position, uniswap_pool):
        """Test unordered pair matching."""
        position = make_position(token0="usdc", token1="weth")

        assert match_pool(position, [uniswap_pool]) is uniswap_pool

    def test_requires_exact_pair(self, make_position, make_pool):
        """Test that a pool sharing only one token does not match."""
        position = make_position(token0="WETH", token1="DAI")

        assert match_pool(position, [make_pool(pair="WETH/USDC")]) is None
