"""GraphQL queries for the Uniswap V3 subgraph."""


class UniswapQueries:
    """GraphQL query definitions for the Uniswap V3 subgraph."""

    # Pools by TVL with their latest hourly snapshots; pool-level feesUSD and
    # volumeUSD are lifetime totals, so 24h figures come from poolHourDatas
    POOLS_QUERY = """
    query GetPools($first: Int!, $orderBy: String!, $orderDirection: String!) {
        pools(
            first: $first
            orderBy: $orderBy
            orderDirection: $orderDirection
            where: { liquidity_gt: "0" }
        ) {
            id
            token0 {
                id
                symbol
                decimals
            }
            token1 {
                id
                symbol
                decimals
            }
            feeTier
            totalValueLockedUSD
            poolHourDatas(first: 24, orderBy: periodStartUnix, orderDirection: desc) {
                periodStartUnix
                volumeUSD
                feesUSD
            }
        }
    }
    """

    # Positions owned by a wallet, plus the ETH/USD price for valuation
    POSITIONS_QUERY = """
    query GetPositions($owner: String!) {
        bundle(id: "1") {
            ethPriceUSD
        }
        positions(where: { owner: $owner }) {
            id
            owner
            pool {
                id
                feeTier
            }
            token0 {
                symbol
                derivedETH
            }
            token1 {
                symbol
                derivedETH
            }
            liquidity
            depositedToken0
            depositedToken1
            withdrawnToken0
            withdrawnToken1
            transaction {
                timestamp
            }
        }
    }
    """
