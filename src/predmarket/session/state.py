"""Application state and session - snapshot + query, refresh, and transaction helpers."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Iterable

import structlog

from predmarket.analytics.position import compute_stats
from predmarket.chain.base import MarketContract
from predmarket.errors import MarketNotFoundError, ViewerMismatchError, ViewerRequiredError
from predmarket.models.market import Market, MarketSnapshot
from predmarket.models.stats import ViewerStats
from predmarket.models.transaction import (
    BatchResult,
    PlaceBetParams,
    ResolveMarketParams,
    TransactionHandle,
)
from predmarket.query.engine import (
    MarketQuery,
    claimable_markets,
    filter_and_sort,
    resolvable_markets,
)
from predmarket.snapshot.reader import MarketSnapshotReader
from predmarket.transactions.orchestrator import TransactionOrchestrator
from predmarket.transactions.validation import build_params

if TYPE_CHECKING:
    from predmarket.config import Settings

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AppState:
    """Immutable view state. Replaced wholesale, never mutated."""

    snapshot: MarketSnapshot
    query: MarketQuery


class MarketSession:
    """One viewer's session against the contract.

    Refresh is event-driven: explicit refresh() calls and confirmed transactions.
    With a signer, the viewer is the signing account; a different viewer is refused.
    """

    def __init__(
        self,
        contract: MarketContract,
        viewer: str | None = None,
        sender: str | None = None,
        max_concurrency: int = 8,
        clock: Callable[[], float] = time.time,
    ):
        if sender and viewer and viewer.lower() != sender.lower():
            raise ViewerMismatchError(
                f"Viewer {viewer} differs from the signing account {sender}; drop --address or the signing key"
            )
        self.contract = contract
        self.sender = sender
        self.viewer = viewer or sender
        self._clock = clock
        self.reader = MarketSnapshotReader(contract, max_concurrency=max_concurrency)
        self.orchestrator = TransactionOrchestrator(contract, sender=sender, clock=clock)
        self.orchestrator.subscribe(self._on_tx_terminal)
        self._state = AppState(snapshot=MarketSnapshot(viewer=self.viewer), query=MarketQuery())
        self._refresh_lock = asyncio.Lock()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def snapshot(self) -> MarketSnapshot:
        return self._state.snapshot

    def now(self) -> int:
        return int(self._clock())

    async def refresh(self) -> MarketSnapshot:
        """Read a fresh snapshot and swap it in. The old one stays current until then."""
        async with self._refresh_lock:
            snapshot = await self.reader.read(viewer=self.viewer, now=self.now())
            self._state = replace(self._state, snapshot=snapshot)
        return snapshot

    def update_query(self, **changes: Any) -> AppState:
        """Replace the current query with changed fields (validated)."""
        query = MarketQuery(**{**self._state.query.model_dump(), **changes})
        self._state = replace(self._state, query=query)
        return self._state

    def view(
        self,
        query: MarketQuery | None = None,
        bookmarks: Iterable[int] | None = None,
        now: int | None = None,
    ) -> list[Market]:
        snap = self._state.snapshot
        return filter_and_sort(
            snap.markets,
            snap.viewer_stakes,
            self.viewer,
            query or self._state.query,
            self.now() if now is None else now,
            bookmarks=bookmarks,
        )

    def market(self, market_id: int) -> Market:
        market = self._state.snapshot.get(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def stats(self) -> ViewerStats | None:
        snap = self._state.snapshot
        return compute_stats(snap.markets, snap.viewer_stakes, self.viewer)

    def resolvable(self, now: int | None = None) -> list[Market]:
        return resolvable_markets(self._state.snapshot.markets, self.viewer, self.now() if now is None else now)

    def claimable(self) -> list[Market]:
        snap = self._state.snapshot
        return claimable_markets(snap.markets, snap.viewer_stakes)

    def _require_signer(self) -> None:
        if not self.sender:
            raise ViewerRequiredError("No signing account configured; this session is read-only")

    async def create_market(self, question: str, outcomes: list[str], deadline: int) -> TransactionHandle:
        self._require_signer()
        return await self.orchestrator.create_market(question, outcomes, deadline)

    async def place_bet(self, market_id: int, outcome: int, amount: Decimal) -> TransactionHandle:
        self._require_signer()
        params = build_params(PlaceBetParams, market_id=market_id, outcome=outcome, amount=amount)
        return await self.orchestrator.place_bet(params, self._state.snapshot.get(market_id))

    async def resolve_market(self, market_id: int, winning_outcome: int) -> TransactionHandle:
        self._require_signer()
        params = build_params(ResolveMarketParams, market_id=market_id, winning_outcome=winning_outcome)
        return await self.orchestrator.resolve_market(params, self._state.snapshot.get(market_id))

    async def claim(self, market_id: int) -> TransactionHandle:
        self._require_signer()
        return await self.orchestrator.claim(market_id, self._state.snapshot.get(market_id))

    async def claim_all(self) -> BatchResult:
        """Claim every market the snapshot shows as claimable."""
        self._require_signer()
        return await self.orchestrator.claim_all([m.market_id for m in self.claimable()])

    async def _on_tx_terminal(self, handle: TransactionHandle) -> None:
        if handle.ok:
            await self.refresh()


def build_session(settings: Settings, viewer: str | None = None) -> MarketSession:
    """Session on the configured chain. Signs with the key from settings.private_key_env if set."""
    from predmarket.chain.web3_client import Web3MarketContract

    contract = Web3MarketContract(
        rpc_url=settings.rpc_url,
        contract_address=settings.contract_address,
        chain_id=settings.chain_id,
        private_key=settings.private_key,
        receipt_poll_interval_sec=settings.receipt_poll_interval_sec,
        create_gas_limit=settings.create_gas_limit,
    )
    viewer = viewer or contract.sender or settings.viewer_address
    log.debug("session_built", viewer=viewer, signer=contract.sender is not None)
    return MarketSession(
        contract,
        viewer=viewer,
        sender=contract.sender,
        max_concurrency=settings.max_concurrency,
    )
