"""Pydantic schemas for API responses and request bodies."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str
    code: str


class OutcomeView(BaseModel):
    index: int
    label: str
    stake: str
    probability: str
    viewer_stake: str | None = None


class MarketView(BaseModel):
    market_id: int
    owner: str
    question: str
    outcomes: list[OutcomeView]
    deadline: int
    time_remaining: str
    status: str
    resolved: bool
    winning_outcome: int | None = None
    total_staked: str
    owned_by_viewer: bool = False
    claimable: bool = False
    bookmarked: bool = False


class MarketsListResponse(BaseModel):
    markets: list[MarketView]
    total: int
    selected: MarketView | None = None
    skipped: list[int] = Field(default_factory=list)


class StatsResponse(BaseModel):
    viewer: str
    markets_created: int
    markets_won: int
    markets_lost: int
    total_resolved_bets: int
    win_rate: str
    total_earnings: str


class RefreshResponse(BaseModel):
    market_count: int
    loaded: int
    skipped: list[int]
    fetched_at: int


class CreateMarketRequest(BaseModel):
    question: str
    outcomes: list[str]
    deadline: int = Field(..., description="Unix timestamp (seconds)")


class PlaceBetRequest(BaseModel):
    outcome: int = Field(..., ge=0)
    amount: Decimal = Field(..., description="Amount in ether")


class ResolveRequest(BaseModel):
    winning_outcome: int = Field(..., ge=0)


class TxResponse(BaseModel):
    action: str
    state: str
    tx_hash: str | None = None
    explorer_url: str | None = None
    block_number: int | None = None
    created_market_id: int | None = None
    error: str | None = None


class ClaimAllResponse(BaseModel):
    succeeded: list[int]
    failed: dict[int, str]
    message: str


class BookmarksResponse(BaseModel):
    market_ids: list[int]
