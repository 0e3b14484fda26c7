"""Pre-submission input checks. Advisory only; the contract enforces the real rules."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from predmarket.chain.units import ether_to_wei
from predmarket.errors import InputValidationError
from predmarket.models.market import Market
from predmarket.models.transaction import (
    ClaimParams,
    CreateMarketParams,
    PlaceBetParams,
    ResolveMarketParams,
    TxAction,
)

ParamsT = TypeVar("ParamsT", bound=BaseModel)


def validate_create(params: CreateMarketParams, now: int) -> None:
    if not params.question.strip():
        raise InputValidationError("Please enter a question")
    if len(params.outcomes) < 2:
        raise InputValidationError("A market needs at least 2 outcomes")
    if any(not o.strip() for o in params.outcomes):
        raise InputValidationError("Please fill in all outcome fields")
    if params.deadline <= now:
        raise InputValidationError("End time must be in the future")


def _sendable_wei(amount: Decimal) -> int:
    if not amount.is_finite() or amount <= 0:
        return 0
    try:
        return ether_to_wei(amount)
    except ValueError as e:
        raise InputValidationError("Bet amount is too large") from e


def validate_bet(params: PlaceBetParams, market: Market | None, now: int) -> None:
    # amounts below one wei round down to a zero-value call
    if _sendable_wei(params.amount) == 0:
        raise InputValidationError("Bet amount must be greater than zero")
    if market is None:
        return
    if params.outcome >= len(market.outcomes):
        raise InputValidationError(
            f"Outcome {params.outcome} does not exist (market has {len(market.outcomes)})"
        )
    if market.resolved:
        raise InputValidationError("Market is already resolved")
    if now >= market.deadline:
        raise InputValidationError("Market deadline has passed")


def validate_resolve(params: ResolveMarketParams, market: Market | None, sender: str | None, now: int) -> None:
    if market is None:
        raise InputValidationError(f"Select a market to resolve (unknown id {params.market_id})")
    if not market.is_owned_by(sender):
        raise InputValidationError("Only the market owner can resolve this market")
    if market.resolved:
        raise InputValidationError("Market is already resolved")
    if now < market.deadline:
        raise InputValidationError("Market deadline has not passed yet")
    if params.winning_outcome >= len(market.outcomes):
        raise InputValidationError(
            f"Outcome {params.winning_outcome} does not exist (market has {len(market.outcomes)})"
        )


def validate_claim(params: ClaimParams, market: Market | None) -> None:
    if market is not None and not market.resolved:
        raise InputValidationError("Market is not resolved yet")


def validate(action: TxAction, params, market: Market | None, sender: str | None, now: int) -> None:
    """Dispatch to the per-action check. Raises InputValidationError."""
    if action is TxAction.CREATE_MARKET:
        validate_create(params, now)
    elif action is TxAction.PLACE_BET:
        validate_bet(params, market, now)
    elif action is TxAction.RESOLVE_MARKET:
        validate_resolve(params, market, sender, now)
    elif action is TxAction.CLAIM:
        validate_claim(params, market)


def build_params(model: type[ParamsT], **fields: Any) -> ParamsT:
    """Construct a parameter model; schema errors surface as InputValidationError."""
    try:
        return model(**fields)
    except ValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first["loc"]) or model.__name__
        raise InputValidationError(f"Invalid {field_name}: {first['msg']}") from e
