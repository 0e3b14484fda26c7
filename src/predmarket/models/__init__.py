"""Canonical schema (Pydantic) - Market, MarketSnapshot, ViewerStats, transactions."""

from predmarket.models.market import Market, MarketSnapshot, ViewerStakes, has_position, stake_of
from predmarket.models.stats import ViewerStats
from predmarket.models.transaction import (
    BatchResult,
    ClaimParams,
    CreateMarketParams,
    PlaceBetParams,
    ResolveMarketParams,
    TransactionHandle,
    TxAction,
    TxState,
)

__all__ = [
    "Market",
    "MarketSnapshot",
    "ViewerStakes",
    "ViewerStats",
    "has_position",
    "stake_of",
    "BatchResult",
    "ClaimParams",
    "CreateMarketParams",
    "PlaceBetParams",
    "ResolveMarketParams",
    "TransactionHandle",
    "TxAction",
    "TxState",
]
