"""Transaction actions, parameters, and the submitted -> confirmed | failed state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from predmarket.errors import InvalidTransition


class TxAction(str, Enum):
    """State-changing contract calls. Values are the contract function names."""

    CREATE_MARKET = "createMarket"
    PLACE_BET = "placeBet"
    RESOLVE_MARKET = "resolveMarket"
    CLAIM = "claim"


class TxState(str, Enum):
    IDLE = "idle"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


_TRANSITIONS: dict[TxState, set[TxState]] = {
    TxState.IDLE: {TxState.SUBMITTED, TxState.FAILED},
    TxState.SUBMITTED: {TxState.CONFIRMED, TxState.FAILED},
    TxState.CONFIRMED: set(),
    TxState.FAILED: set(),
}


class CreateMarketParams(BaseModel):
    question: str
    outcomes: list[str]
    deadline: int  # unix seconds


class PlaceBetParams(BaseModel):
    market_id: int = Field(..., ge=0)
    outcome: int = Field(..., ge=0)
    amount: Decimal  # ether


class ResolveMarketParams(BaseModel):
    market_id: int = Field(..., ge=0)
    winning_outcome: int = Field(..., ge=0)


class ClaimParams(BaseModel):
    market_id: int = Field(..., ge=0)


TxParams = CreateMarketParams | PlaceBetParams | ResolveMarketParams | ClaimParams


@dataclass
class TransactionHandle:
    """Tracks one submitted transaction. Terminal states (confirmed, failed) are final."""

    action: TxAction
    params: Any
    state: TxState = TxState.IDLE
    tx_hash: str | None = None
    block_number: int | None = None
    error: str | None = None
    created_market_id: int | None = None  # createMarket only

    def _move(self, new_state: TxState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {new_state.value}")
        self.state = new_state

    def mark_submitted(self, tx_hash: str) -> None:
        self._move(TxState.SUBMITTED)
        self.tx_hash = tx_hash

    def mark_confirmed(self, block_number: int | None = None, created_market_id: int | None = None) -> None:
        self._move(TxState.CONFIRMED)
        self.block_number = block_number
        self.created_market_id = created_market_id

    def mark_failed(self, error: str) -> None:
        self._move(TxState.FAILED)
        self.error = error

    @property
    def done(self) -> bool:
        return self.state in (TxState.CONFIRMED, TxState.FAILED)

    @property
    def ok(self) -> bool:
        return self.state is TxState.CONFIRMED


@dataclass
class BatchResult:
    """Outcome of a sequential multi-transaction batch (claim all)."""

    succeeded: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.succeeded) + len(self.failed)
