"""FastAPI backend - market listing, stats, transactions, bookmarks."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path as FsPath
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Path, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from predmarket.api.schemas import (
    BookmarksResponse,
    ClaimAllResponse,
    CreateMarketRequest,
    ErrorResponse,
    HealthResponse,
    MarketsListResponse,
    MarketView,
    OutcomeView,
    PlaceBetRequest,
    RefreshResponse,
    ResolveRequest,
    StatsResponse,
    TxResponse,
)
from predmarket.config import get_settings
from predmarket.errors import (
    InputValidationError,
    InvalidTransition,
    MarketNotFoundError,
    PredMarketError,
    TransactionBusyError,
    ViewerMismatchError,
    ViewerRequiredError,
)
from predmarket.models.market import Market, stake_of
from predmarket.models.transaction import TransactionHandle
from predmarket.query.display import explorer_url, format_amount, format_percent, format_time_remaining
from predmarket.query.engine import (
    MarketQuery,
    SortMode,
    StatusFilter,
    market_status,
    outcome_probabilities,
)
from predmarket.session.state import MarketSession, build_session
from predmarket.storage.bookmarks import add_bookmark, list_bookmarks, remove_bookmark
from predmarket.storage.db import get_connection, init_schema

# Set by run_api() so lifespan can build the session for the chosen profile.
_config_profile: str | None = None
_config_dir: FsPath | None = None
_viewer: str | None = None
_session: MarketSession | None = None

MarketIdPath = Annotated[int, Path(ge=0, description="Market ID")]


def _get_conn():
    settings = get_settings(_config_profile, _config_dir)
    conn = get_connection(settings.db_path)
    init_schema(conn)
    return conn


def get_session() -> MarketSession:
    if _session is None:
        raise RuntimeError("Session not initialised")
    return _session


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _session
    settings = get_settings(_config_profile, _config_dir)
    _session = build_session(settings, viewer=_viewer)
    await _session.refresh()
    yield
    _session = None


app = FastAPI(title="PredMarket API", version="0.1.0", lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


@app.exception_handler(InputValidationError)
async def _validation_error(request, exc: InputValidationError) -> JSONResponse:
    return _error_json("validation_error", str(exc), 400)


@app.exception_handler(MarketNotFoundError)
async def _not_found(request, exc: MarketNotFoundError) -> JSONResponse:
    return _error_json("not_found", str(exc), 404)


@app.exception_handler(TransactionBusyError)
async def _busy(request, exc: TransactionBusyError) -> JSONResponse:
    return _error_json("transaction_pending", str(exc), 409)


@app.exception_handler(ViewerRequiredError)
async def _viewer_required(request, exc: ViewerRequiredError) -> JSONResponse:
    return _error_json("viewer_required", str(exc), 400)


@app.exception_handler(ViewerMismatchError)
async def _viewer_mismatch(request, exc: ViewerMismatchError) -> JSONResponse:
    return _error_json("viewer_mismatch", str(exc), 400)


@app.exception_handler(InvalidTransition)
async def _invalid_transition(request, exc: InvalidTransition) -> JSONResponse:
    return _error_json("invalid_transition", str(exc), 409)


@app.exception_handler(PredMarketError)
async def _predmarket_error(request, exc: PredMarketError) -> JSONResponse:
    return _error_json("error", str(exc), 400)


def _bookmark_ids() -> set[int]:
    conn = _get_conn()
    try:
        return set(list_bookmarks(conn))
    finally:
        conn.close()


def _market_view(session: MarketSession, market: Market, now: int, bookmarks: set[int]) -> MarketView:
    stakes = session.snapshot.viewer_stakes
    has_viewer = market.market_id in stakes
    probabilities = outcome_probabilities(market)
    outcomes = [
        OutcomeView(
            index=idx,
            label=label,
            stake=format_amount(market.outcome_stakes[idx]),
            probability=format_percent(probabilities[idx]),
            viewer_stake=format_amount(stake_of(stakes, market.market_id, idx)) if has_viewer else None,
        )
        for idx, label in enumerate(market.outcomes)
    ]
    return MarketView(
        market_id=market.market_id,
        owner=market.owner,
        question=market.question,
        outcomes=outcomes,
        deadline=market.deadline,
        time_remaining=format_time_remaining(market.deadline, now),
        status=market_status(market, now).value,
        resolved=market.resolved,
        winning_outcome=market.winning_outcome if market.resolved else None,
        total_staked=format_amount(market.total_staked),
        owned_by_viewer=market.is_owned_by(session.viewer),
        claimable=market.resolved and stake_of(stakes, market.market_id, market.winning_outcome) > 0,
        bookmarked=market.market_id in bookmarks,
    )


def _tx_response(handle: TransactionHandle) -> TxResponse:
    template = get_settings(_config_profile, _config_dir).explorer_tx_url
    return TxResponse(
        action=handle.action.value,
        state=handle.state.value,
        tx_hash=handle.tx_hash,
        explorer_url=explorer_url(template, handle.tx_hash) if handle.tx_hash else None,
        block_number=handle.block_number,
        created_market_id=handle.created_market_id,
        error=handle.error,
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@app.get("/markets", response_model=MarketsListResponse)
def markets_list(
    search: str = Query("", description="Substring of question or outcome label"),
    status: StatusFilter = Query(StatusFilter.ALL),
    sort: SortMode = Query(SortMode.NEWEST),
    my_bets: bool = Query(False, description="Only markets the viewer has staked in"),
    bookmarked: bool = Query(False, description="Only bookmarked markets"),
    market: int | None = Query(None, ge=0, description="Deep link: market id to select"),
    session: MarketSession = Depends(get_session),
) -> MarketsListResponse:
    """Filtered, sorted market list. `market` selects one market regardless of filters."""
    now = session.now()
    bookmarks = _bookmark_ids()
    query = MarketQuery(search=search, status=status, sort=sort, my_bets=my_bets, bookmarked_only=bookmarked)
    markets = session.view(query, bookmarks=bookmarks, now=now)
    selected = None
    if market is not None:
        found = session.snapshot.get(market)
        if found is not None:
            selected = _market_view(session, found, now, bookmarks)
    return MarketsListResponse(
        markets=[_market_view(session, m, now, bookmarks) for m in markets],
        total=len(markets),
        selected=selected,
        skipped=list(session.snapshot.skipped),
    )


@app.get("/markets/resolvable", response_model=list[MarketView])
def markets_resolvable(session: MarketSession = Depends(get_session)) -> list[MarketView]:
    """Viewer-owned markets past their deadline and not yet resolved."""
    now = session.now()
    bookmarks = _bookmark_ids()
    return [_market_view(session, m, now, bookmarks) for m in session.resolvable(now)]


@app.get("/markets/claimable", response_model=list[MarketView])
def markets_claimable(session: MarketSession = Depends(get_session)) -> list[MarketView]:
    now = session.now()
    bookmarks = _bookmark_ids()
    return [_market_view(session, m, now, bookmarks) for m in session.claimable()]


@app.get(
    "/markets/{market_id}",
    response_model=MarketView,
    responses={404: {"description": "Market not found", "model": ErrorResponse}},
)
def market_detail(market_id: MarketIdPath, session: MarketSession = Depends(get_session)) -> MarketView:
    market = session.market(market_id)
    return _market_view(session, market, session.now(), _bookmark_ids())


@app.post("/refresh", response_model=RefreshResponse)
async def refresh(session: MarketSession = Depends(get_session)) -> RefreshResponse:
    snap = await session.refresh()
    return RefreshResponse(
        market_count=snap.market_count,
        loaded=len(snap.markets),
        skipped=list(snap.skipped),
        fetched_at=snap.fetched_at,
    )


@app.get(
    "/stats",
    response_model=StatsResponse,
    responses={400: {"description": "No viewer address", "model": ErrorResponse}},
)
def stats(session: MarketSession = Depends(get_session)):
    result = session.stats()
    if result is None:
        return _error_json("viewer_required", "Connect a wallet or set a viewer address to view stats.", 400)
    return StatsResponse(**result.model_dump())


@app.post("/markets", response_model=TxResponse)
async def create_market(body: CreateMarketRequest, session: MarketSession = Depends(get_session)) -> TxResponse:
    handle = await session.create_market(body.question, body.outcomes, body.deadline)
    return _tx_response(handle)


@app.post("/markets/{market_id}/bets", response_model=TxResponse)
async def place_bet(
    market_id: MarketIdPath, body: PlaceBetRequest, session: MarketSession = Depends(get_session)
) -> TxResponse:
    handle = await session.place_bet(market_id, body.outcome, body.amount)
    return _tx_response(handle)


@app.post("/markets/{market_id}/resolve", response_model=TxResponse)
async def resolve_market(
    market_id: MarketIdPath, body: ResolveRequest, session: MarketSession = Depends(get_session)
) -> TxResponse:
    handle = await session.resolve_market(market_id, body.winning_outcome)
    return _tx_response(handle)


@app.post("/markets/{market_id}/claim", response_model=TxResponse)
async def claim(market_id: MarketIdPath, session: MarketSession = Depends(get_session)) -> TxResponse:
    handle = await session.claim(market_id)
    return _tx_response(handle)


@app.post("/claims", response_model=ClaimAllResponse)
async def claim_all(session: MarketSession = Depends(get_session)) -> ClaimAllResponse:
    """Claim every claimable market; partial failures are reported, not raised."""
    result = await session.claim_all()
    return ClaimAllResponse(
        succeeded=result.succeeded,
        failed=result.failed,
        message=f"Claimed {len(result.succeeded)} of {result.attempted} markets",
    )


@app.get("/bookmarks", response_model=BookmarksResponse)
def bookmarks_list() -> BookmarksResponse:
    conn = _get_conn()
    try:
        return BookmarksResponse(market_ids=list_bookmarks(conn))
    finally:
        conn.close()


@app.put("/bookmarks/{market_id}", response_model=BookmarksResponse)
def bookmarks_add(market_id: MarketIdPath) -> BookmarksResponse:
    conn = _get_conn()
    try:
        add_bookmark(conn, market_id)
        return BookmarksResponse(market_ids=list_bookmarks(conn))
    finally:
        conn.close()


@app.delete(
    "/bookmarks/{market_id}",
    response_model=BookmarksResponse,
    responses={404: {"description": "Not bookmarked", "model": ErrorResponse}},
)
def bookmarks_remove(market_id: MarketIdPath) -> Any:
    conn = _get_conn()
    try:
        if not remove_bookmark(conn, market_id):
            return _error_json("not_found", f"Market {market_id} is not bookmarked")
        return BookmarksResponse(market_ids=list_bookmarks(conn))
    finally:
        conn.close()


def run_api(
    host: str = "127.0.0.1",
    port: int = 8000,
    profile: str | None = None,
    viewer: str | None = None,
    config_dir: FsPath | None = None,
) -> None:
    global _config_profile, _config_dir, _viewer
    _config_profile = profile
    _config_dir = config_dir
    _viewer = viewer
    import uvicorn
    uvicorn.run(app, host=host, port=port, reload=False)
