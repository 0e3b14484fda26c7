"""Snapshot reader - assemble all markets and viewer stakes from contract reads.

Every market and every per-outcome stake is read independently: a failed read
skips that market (or zeroes that stake) and never cancels sibling reads.
"""

from __future__ import annotations

import asyncio
import time
from decimal import Decimal
from typing import Any, Sequence

import structlog

from predmarket.chain.abi import MARKET_BASIC_FIELDS
from predmarket.chain.base import MarketContract
from predmarket.chain.units import wei_to_ether
from predmarket.models.market import ZERO, Market, MarketSnapshot

log = structlog.get_logger(__name__)


def decode_market(market_id: int, raw: Sequence[Any]) -> Market:
    """Convert a raw getMarketBasic tuple (wei amounts) to a Market. Raises on invariant violations."""
    fields = dict(zip(MARKET_BASIC_FIELDS, raw))
    return Market(
        market_id=market_id,
        owner=str(fields["owner"]),
        question=str(fields["question"]),
        outcomes=[str(o) for o in fields["outcomes"]],
        deadline=int(fields["deadline"]),
        resolved=bool(fields["resolved"]),
        winning_outcome=int(fields["winningOutcome"]),
        outcome_stakes=[wei_to_ether(s) for s in fields["outcomeStakes"]],
        total_staked=wei_to_ether(fields["totalStaked"]),
    )


class MarketSnapshotReader:
    """Reads a full MarketSnapshot. max_concurrency=1 reads one call at a time."""

    def __init__(self, contract: MarketContract, max_concurrency: int = 8):
        self.contract = contract
        self.max_concurrency = max(1, max_concurrency)

    async def read(self, viewer: str | None = None, now: int | None = None) -> MarketSnapshot:
        fetched_at = int(time.time()) if now is None else now
        try:
            count = await self.contract.market_count()
        except Exception as e:
            log.warning("market_count_read_failed", error=str(e))
            return MarketSnapshot(viewer=viewer, fetched_at=fetched_at)

        sem = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(*(self._load(i, viewer, sem) for i in range(count)))

        markets: list[Market] = []
        stakes: dict[int, dict[int, Decimal]] = {}
        skipped: list[int] = []
        for market_id, (market, market_stakes) in zip(range(count), results):
            if market is None:
                skipped.append(market_id)
                continue
            markets.append(market)
            if market_stakes is not None:
                stakes[market_id] = market_stakes
        log.info("snapshot_refreshed", market_count=count, loaded=len(markets), skipped=len(skipped))
        return MarketSnapshot(
            markets=markets,
            viewer_stakes=stakes,
            viewer=viewer,
            market_count=count,
            skipped=skipped,
            fetched_at=fetched_at,
        )

    async def _load(
        self, market_id: int, viewer: str | None, sem: asyncio.Semaphore
    ) -> tuple[Market | None, dict[int, Decimal] | None]:
        async with sem:
            try:
                raw = await self.contract.get_market(market_id)
                market = decode_market(market_id, raw)
            except Exception as e:
                log.warning("market_read_failed", market_id=market_id, error=str(e))
                return None, None
        if not viewer:
            return market, None
        amounts = await asyncio.gather(
            *(self._load_stake(market_id, viewer, idx, sem) for idx in range(len(market.outcomes)))
        )
        return market, dict(enumerate(amounts))

    async def _load_stake(self, market_id: int, viewer: str, outcome: int, sem: asyncio.Semaphore) -> Decimal:
        async with sem:
            try:
                return wei_to_ether(await self.contract.user_stake_in(market_id, viewer, outcome))
            except Exception as e:
                log.warning("stake_read_failed", market_id=market_id, outcome=outcome, error=str(e))
                return ZERO


async def read_snapshot(
    contract: MarketContract,
    viewer: str | None = None,
    max_concurrency: int = 8,
    now: int | None = None,
) -> MarketSnapshot:
    """Convenience wrapper around MarketSnapshotReader.read."""
    return await MarketSnapshotReader(contract, max_concurrency).read(viewer=viewer, now=now)
