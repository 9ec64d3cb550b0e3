"""Immutable risk configuration: factor weights and protocol reputation.

Loaded once at process start and injected into the scorer, aggregator and
rebalancing engine. Invalid tables are rejected at construction time with a
pydantic ``ValidationError``.
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from liquiditylink.config.settings import Settings, get_settings
from liquiditylink.core import constants as C
from liquiditylink.core.models import RiskCategory, RiskTolerance

WEIGHT_TOLERANCE = Decimal("1e-9")


class ProtocolReputation(BaseModel):
    """Static reputation data for one protocol.

    ``base_risk`` feeds the protocol factor. Audit score, exploit count and
    days in market feed the smart-contract factor; when any of them is
    unknown the smart-contract factor falls back to its default.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    base_risk: Decimal = Field(ge=0, le=100)
    audit_score: Optional[Decimal] = Field(default=None, ge=0, le=100)
    exploit_count: Optional[int] = Field(default=None, ge=0)
    days_in_market: Optional[int] = Field(default=None, ge=0)
    tvl_history: Tuple[Decimal, ...] = ()

    @property
    def has_contract_data(self) -> bool:
        return (
            self.audit_score is not None
            and self.exploit_count is not None
            and self.days_in_market is not None
        )


def default_protocols() -> Dict[str, ProtocolReputation]:
    """Built-in reputation table for the Base DEXes we track."""
    table = [
        ProtocolReputation(
            name=C.UNISWAP_V3, base_risk=Decimal("15"), audit_score=Decimal("95"),
            exploit_count=0, days_in_market=1200,
            tvl_history=(Decimal("1000000000"), Decimal("1100000000"), Decimal("1200000000")),
        ),
        ProtocolReputation(
            name=C.AERODROME, base_risk=Decimal("25"), audit_score=Decimal("85"),
            exploit_count=0, days_in_market=365,
            tvl_history=(Decimal("100000000"), Decimal("150000000"), Decimal("200000000")),
        ),
        ProtocolReputation(
            name=C.BASESWAP, base_risk=Decimal("55"), audit_score=Decimal("70"),
            exploit_count=1, days_in_market=180,
            tvl_history=(Decimal("50000000"), Decimal("45000000"), Decimal("40000000")),
        ),
        ProtocolReputation(
            name=C.SUSHISWAP, base_risk=Decimal("20"), audit_score=Decimal("80"),
            exploit_count=2, days_in_market=1400,
            tvl_history=(Decimal("500000000"), Decimal("480000000"), Decimal("520000000")),
        ),
        ProtocolReputation(name=C.CURVE, base_risk=Decimal("18")),
        ProtocolReputation(name=C.BALANCER, base_risk=Decimal("22")),
    ]
    return {p.name: p for p in table}


def default_pool_weights() -> Dict[RiskCategory, Decimal]:
    return {
        RiskCategory.IMPERMANENT_LOSS: Decimal("0.25"),
        RiskCategory.SMART_CONTRACT: Decimal("0.30"),
        RiskCategory.LIQUIDITY: Decimal("0.25"),
        RiskCategory.PROTOCOL: Decimal("0.20"),
    }


def default_position_weights() -> Dict[RiskCategory, Decimal]:
    return {
        RiskCategory.IMPERMANENT_LOSS: Decimal("0.30"),
        RiskCategory.SMART_CONTRACT: Decimal("0.20"),
        RiskCategory.LIQUIDITY: Decimal("0.20"),
        RiskCategory.PROTOCOL: Decimal("0.15"),
        RiskCategory.MARKET: Decimal("0.15"),
    }


def default_tolerance_ceilings() -> Dict[RiskTolerance, Decimal]:
    return {
        RiskTolerance.LOW: Decimal("40"),
        RiskTolerance.MEDIUM: Decimal("60"),
        RiskTolerance.HIGH: Decimal("80"),
    }


class RiskConfig(BaseModel):
    """Static configuration consumed by the risk scorer and policy engine.

    Defaults are validated too, and table fields are stored as read-only
    mappings.
    """

    model_config = ConfigDict(frozen=True, validate_default=True)

    pool_weights: Mapping[RiskCategory, Decimal] = Field(default_factory=default_pool_weights)
    position_weights: Mapping[RiskCategory, Decimal] = Field(default_factory=default_position_weights)
    protocols: Mapping[str, ProtocolReputation] = Field(default_factory=default_protocols)
    liquidity_threshold: Decimal = Field(default=Decimal("100000"), gt=0)
    tolerance_ceilings: Mapping[RiskTolerance, Decimal] = Field(default_factory=default_tolerance_ceilings)

    stable_tokens: FrozenSet[str] = C.STABLE_TOKENS
    eth_tokens: FrozenSet[str] = C.ETH_TOKENS
    btc_tokens: FrozenSet[str] = C.BTC_TOKENS

    @field_validator("pool_weights", "position_weights")
    @classmethod
    def check_weights(cls, v: Mapping[RiskCategory, Decimal]) -> Mapping[RiskCategory, Decimal]:
        """Weights must lie in [0, 1] and sum to 1.0."""
        if not v:
            raise ValueError("at least one factor weight is required")
        for category, weight in v.items():
            if weight < 0 or weight > 1:
                raise ValueError(f"weight for {category.value} must be in [0, 1], got {weight}")
        total = sum(v.values(), Decimal("0"))
        if abs(total - Decimal("1")) > WEIGHT_TOLERANCE:
            raise ValueError(f"factor weights must sum to 1.0, got {total}")
        return MappingProxyType(dict(v))

    @field_validator("protocols", "tolerance_ceilings")
    @classmethod
    def read_only(cls, v: Mapping) -> Mapping:
        return MappingProxyType(dict(v))

    @field_validator("stable_tokens", "eth_tokens", "btc_tokens", mode="before")
    @classmethod
    def upper_tokens(cls, v):
        return frozenset(str(t).strip().upper() for t in v)

    @model_validator(mode="after")
    def check_ceilings(self) -> "RiskConfig":
        missing = [t.value for t in RiskTolerance if t not in self.tolerance_ceilings]
        if missing:
            raise ValueError(f"tolerance ceilings missing for: {', '.join(missing)}")
        return self

    def reputation(self, protocol: str) -> Optional[ProtocolReputation]:
        """Look up a protocol, case-insensitively. None if unknown."""
        if protocol in self.protocols:
            return self.protocols[protocol]
        wanted = protocol.strip().lower()
        for name, rep in self.protocols.items():
            if name.lower() == wanted:
                return rep
        return None

    def ceiling(self, tolerance: RiskTolerance) -> Decimal:
        """Maximum acceptable pool risk score for a tolerance level."""
        return self.tolerance_ceilings[tolerance]

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RiskConfig":
        """Build the default configuration with settings-driven overrides."""
        settings = settings or get_settings()
        return cls(liquidity_threshold=settings.liquidity_threshold)
