"""Constants for LP risk scoring and rebalancing policy."""

from decimal import Decimal

# Time constants
DAYS_PER_YEAR = Decimal("365")
SECONDS_PER_DAY = 24 * 3600

# Protocol names as reported by the data adapters
UNISWAP_V3 = "Uniswap V3"
AERODROME = "Aerodrome"
BASESWAP = "BaseSwap"
SUSHISWAP = "SushiSwap"
CURVE = "Curve"
BALANCER = "Balancer"

# Token categories used by the impermanent-loss pair model
STABLE_TOKENS = frozenset({"USDC", "USDT", "DAI", "USDBC", "LUSD", "FRAX"})
ETH_TOKENS = frozenset({"ETH", "WETH", "STETH", "WSTETH", "CBETH"})
BTC_TOKENS = frozenset({"BTC", "WBTC", "CBBTC", "TBTC"})

# Impermanent-loss base scores by pair category
IL_BASE_STABLE_STABLE = Decimal("5")
IL_BASE_MAJOR_STABLE = Decimal("35")
IL_BASE_MAJOR_MAJOR = Decimal("60")
IL_BASE_UNKNOWN = Decimal("70")

# APY bumps: outsized yield tends to come with larger divergence
IL_HIGH_APY = Decimal("20")
IL_HIGH_APY_PENALTY = Decimal("15")
IL_MID_APY = Decimal("10")
IL_MID_APY_PENALTY = Decimal("5")

# Liquidity factor
TARGET_DAILY_TURNOVER = Decimal("0.1")
TURNOVER_PENALTY_SCALE = Decimal("300")
MAX_TURNOVER_PENALTY = Decimal("30")
LOW_TVL_MAX_PENALTY = Decimal("50")
CONCENTRATION_BASELINE = Decimal("10")

# Protocol trend (portfolio variant)
TVL_SHARP_DECLINE = Decimal("0.90")
TVL_SHARP_DECLINE_PENALTY = Decimal("30")
TVL_DECLINE = Decimal("0.95")
TVL_DECLINE_PENALTY = Decimal("15")
GOVERNANCE_BASELINE = Decimal("15")
REGULATORY_BASELINE = Decimal("10")

# Defaults for protocols missing from the reputation table
UNKNOWN_SMART_CONTRACT_RISK = Decimal("70")
UNKNOWN_PROTOCOL_RISK = Decimal("50")
UNKNOWN_PROTOCOL_TREND_RISK = Decimal("60")

# Score bounds
MIN_SCORE = Decimal("0")
MAX_SCORE = Decimal("100")

# Impermanent-loss estimate caps
TIME_DECAY_IL_PER_DAY = Decimal("0.1")
TIME_DECAY_IL_CAP = Decimal("15")
GENERAL_IL_CAP = Decimal("100")

# Rebalancing policy
EXIT_IL_MULTIPLIER = Decimal("2")
UNDERPERFORMANCE_RATIO = Decimal("0.7")
BETTER_POOL_MIN_APY_RATIO = Decimal("1.1")
SAFER_POOL_MAX_RISK_RATIO = Decimal("0.8")
SAFER_POOL_MIN_APY_RATIO = Decimal("0.7")
BETTER_POOL_RISK_PENALTY = Decimal("0.1")
SAFER_POOL_RISK_PENALTY = Decimal("1.0")

# Portfolio
MAX_DIVERSIFICATION_BENEFIT = Decimal("0.3")
DIVERSIFICATION_BENEFIT_PER_POSITION = Decimal("0.05")
FULLY_DIVERSIFIED_PROTOCOLS = Decimal("5")
FULLY_DIVERSIFIED_TOKENS = Decimal("10")
HIGH_RISK_POSITION = Decimal("70")
MIN_DIVERSIFIED_POSITIONS = 3
VAR_CONFIDENCE = 0.95

# Strategy validation bounds (inclusive)
TARGET_APY_RANGE = (Decimal("0"), Decimal("100"))
MAX_IL_RANGE = (Decimal("0"), Decimal("50"))
REBALANCE_THRESHOLD_RANGE = (Decimal("5"), Decimal("50"))
