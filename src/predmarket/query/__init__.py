"""Market list queries and display helpers."""

from predmarket.query.engine import (
    MarketQuery,
    MarketStatus,
    SortMode,
    StatusFilter,
    claimable_markets,
    filter_and_sort,
    find_market,
    market_status,
    outcome_probabilities,
    resolvable_markets,
)

__all__ = [
    "MarketQuery",
    "MarketStatus",
    "SortMode",
    "StatusFilter",
    "claimable_markets",
    "filter_and_sort",
    "find_market",
    "market_status",
    "outcome_probabilities",
    "resolvable_markets",
]
