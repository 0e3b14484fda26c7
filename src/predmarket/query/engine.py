"""Market list query - search, status filter, participation filter, sort. Pure functions."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from predmarket.models.market import Market, ViewerStakes, has_position, stake_of


class MarketStatus(str, Enum):
    ACTIVE = "active"
    RESOLVED = "resolved"
    EXPIRED = "expired"


class StatusFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    RESOLVED = "resolved"
    EXPIRED = "expired"
    MINE = "mine"  # owned by viewer


class SortMode(str, Enum):
    NEWEST = "newest"
    DEADLINE = "deadline"
    TOTAL_STAKED = "total_staked"
    MOST_POPULAR = "most_popular"


class MarketQuery(BaseModel):
    """Current list controls. Filters compose by AND."""

    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    my_bets: bool = False
    bookmarked_only: bool = False
    sort: SortMode = SortMode.NEWEST


def market_status(market: Market, now: int) -> MarketStatus:
    """Resolved wins over expired; expiry is relative to now."""
    if market.resolved:
        return MarketStatus.RESOLVED
    if now >= market.deadline:
        return MarketStatus.EXPIRED
    return MarketStatus.ACTIVE


def matches_search(market: Market, search: str) -> bool:
    """Case-insensitive substring match on the question or any outcome label."""
    needle = search.lower()
    if not needle:
        return True
    if needle in market.question.lower():
        return True
    return any(needle in o.lower() for o in market.outcomes)


def matches_status(market: Market, status: StatusFilter, viewer: str | None, now: int) -> bool:
    if status is StatusFilter.ALL:
        return True
    if status is StatusFilter.MINE:
        return market.is_owned_by(viewer)
    return market_status(market, now).value == status.value


def _sort_key(mode: SortMode):
    if mode is SortMode.NEWEST:
        return lambda m: m.market_id
    if mode is SortMode.DEADLINE:
        return lambda m: m.deadline
    if mode is SortMode.TOTAL_STAKED:
        return lambda m: m.total_staked
    return lambda m: m.backed_outcomes


def filter_and_sort(
    markets: Iterable[Market],
    viewer_stakes: ViewerStakes,
    viewer: str | None,
    query: MarketQuery,
    now: int,
    bookmarks: Iterable[int] | None = None,
) -> list[Market]:
    """Apply search, then status, then participation (and bookmarks), then a stable sort."""
    result = [m for m in markets if matches_search(m, query.search)]
    result = [m for m in result if matches_status(m, query.status, viewer, now)]
    if query.my_bets:
        result = [m for m in result if has_position(viewer_stakes, m.market_id)]
    if query.bookmarked_only:
        marked = set(bookmarks or ())
        result = [m for m in result if m.market_id in marked]
    # sorted() keeps equal elements in input order, also with reverse=True
    descending = query.sort is not SortMode.DEADLINE
    return sorted(result, key=_sort_key(query.sort), reverse=descending)


_ONE_DP = Decimal("0.1")


def outcome_probabilities(market: Market) -> list[Decimal]:
    """Implied probability per outcome in percent (stake / total * 100), one decimal.

    An unbacked market shows 50.0 for every outcome.
    """
    if market.total_staked == 0:
        return [Decimal("50.0") for _ in market.outcomes]
    return [
        (stake / market.total_staked * 100).quantize(_ONE_DP, rounding=ROUND_HALF_UP)
        for stake in market.outcome_stakes
    ]


def resolvable_markets(markets: Iterable[Market], viewer: str | None, now: int) -> list[Market]:
    """Markets the viewer owns that are unresolved and past their deadline."""
    if not viewer:
        return []
    return [m for m in markets if m.is_owned_by(viewer) and m.is_expired(now)]


def claimable_markets(markets: Iterable[Market], viewer_stakes: ViewerStakes) -> list[Market]:
    """Resolved markets where the viewer holds a positive stake in the winning outcome."""
    return [
        m
        for m in markets
        if m.resolved and stake_of(viewer_stakes, m.market_id, m.winning_outcome) > 0
    ]


def find_market(markets: Iterable[Market], market_id: int) -> Market | None:
    for m in markets:
        if m.market_id == market_id:
            return m
    return None
