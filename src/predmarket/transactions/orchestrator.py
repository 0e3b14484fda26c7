"""Transaction orchestrator - validate, submit, await receipt, notify on terminal state."""

from __future__ import annotations

import inspect
import time
from typing import Any, Awaitable, Callable, Iterable

import structlog

from predmarket.chain.base import MarketContract
from predmarket.chain.units import ether_to_wei
from predmarket.errors import TransactionBusyError
from predmarket.models.market import Market
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
from predmarket.transactions.validation import build_params, validate

log = structlog.get_logger(__name__)

TerminalCallback = Callable[[TransactionHandle], Awaitable[None] | None]


def contract_call(action: TxAction, params: Any) -> tuple[tuple[Any, ...], int]:
    """Positional contract arguments and attached value (wei) for an action."""
    if action is TxAction.CREATE_MARKET:
        return (params.question, list(params.outcomes), params.deadline), 0
    if action is TxAction.PLACE_BET:
        return (params.market_id, params.outcome), ether_to_wei(params.amount)
    if action is TxAction.RESOLVE_MARKET:
        return (params.market_id, params.winning_outcome), 0
    return (params.market_id,), 0


class TransactionOrchestrator:
    """Runs one transaction at a time through idle -> submitted -> confirmed | failed.

    Validation errors raise InputValidationError before any external call.
    Rejections and reverts never raise: they come back as a failed handle.
    """

    def __init__(
        self,
        contract: MarketContract,
        sender: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.contract = contract
        self.sender = sender
        self._clock = clock
        self._subscribers: list[TerminalCallback] = []
        self._pending: TransactionHandle | None = None
        self.last: TransactionHandle | None = None

    @property
    def pending(self) -> TransactionHandle | None:
        return self._pending

    def subscribe(self, callback: TerminalCallback) -> None:
        """Call callback(handle) whenever a transaction reaches a terminal state."""
        self._subscribers.append(callback)

    async def submit(
        self,
        action: TxAction,
        params: Any,
        market: Market | None = None,
        notify: bool = True,
    ) -> TransactionHandle:
        if self._pending is not None:
            raise TransactionBusyError(
                f"Transaction {self._pending.tx_hash or self._pending.action.value} is still pending"
            )
        validate(action, params, market, self.sender, int(self._clock()))
        handle = TransactionHandle(action=action, params=params)
        self._pending = handle
        try:
            await self._run(handle)
        finally:
            self._pending = None
            self.last = handle
        if notify:
            await self._notify(handle)
        return handle

    async def _run(self, handle: TransactionHandle) -> None:
        args, value_wei = contract_call(handle.action, handle.params)
        try:
            tx_hash = await self.contract.send_transaction(handle.action, args, value_wei)
        except Exception as e:
            log.warning("tx_rejected", action=handle.action.value, error=str(e))
            handle.mark_failed(str(e))
            return
        handle.mark_submitted(tx_hash)
        log.info("tx_submitted", action=handle.action.value, tx_hash=tx_hash)
        try:
            receipt = await self.contract.wait_for_receipt(tx_hash)
        except Exception as e:
            log.warning("tx_failed", action=handle.action.value, tx_hash=tx_hash, error=str(e))
            handle.mark_failed(str(e))
            return
        if receipt.get("status") != 1:
            log.warning("tx_failed", action=handle.action.value, tx_hash=tx_hash, error="reverted")
            handle.mark_failed("Transaction reverted")
            return
        created_id = None
        if handle.action is TxAction.CREATE_MARKET:
            created_id = self.contract.created_market_id(receipt)
        handle.mark_confirmed(block_number=receipt.get("blockNumber"), created_market_id=created_id)
        log.info("tx_confirmed", action=handle.action.value, tx_hash=tx_hash, block=handle.block_number)

    async def _notify(self, handle: TransactionHandle) -> None:
        for callback in self._subscribers:
            try:
                result = callback(handle)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                log.error("tx_subscriber_failed", tx_hash=handle.tx_hash, error=str(e))

    async def create_market(self, question: str, outcomes: list[str], deadline: int) -> TransactionHandle:
        params = build_params(CreateMarketParams, question=question, outcomes=outcomes, deadline=deadline)
        return await self.submit(TxAction.CREATE_MARKET, params)

    async def place_bet(self, params: PlaceBetParams, market: Market | None = None) -> TransactionHandle:
        return await self.submit(TxAction.PLACE_BET, params, market)

    async def resolve_market(self, params: ResolveMarketParams, market: Market | None) -> TransactionHandle:
        return await self.submit(TxAction.RESOLVE_MARKET, params, market)

    async def claim(self, market_id: int, market: Market | None = None) -> TransactionHandle:
        return await self.submit(TxAction.CLAIM, build_params(ClaimParams, market_id=market_id), market)

    async def claim_all(self, market_ids: Iterable[int]) -> BatchResult:
        """Claim each market in order; a failure is recorded and the batch moves on.

        Subscribers are notified once, with the last confirmed claim, if any succeeded.
        """
        result = BatchResult()
        last_ok: TransactionHandle | None = None
        for market_id in market_ids:
            params = build_params(ClaimParams, market_id=market_id)
            handle = await self.submit(TxAction.CLAIM, params, notify=False)
            if handle.state is TxState.CONFIRMED:
                result.succeeded.append(market_id)
                last_ok = handle
            else:
                result.failed[market_id] = handle.error or "failed"
        log.info("claim_all_finished", succeeded=len(result.succeeded), failed=len(result.failed))
        if last_ok is not None:
            await self._notify(last_ok)
        return result
