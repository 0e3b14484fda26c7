"""Market, MarketSnapshot, ViewerStakes - canonical on-chain state as read by the client."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# market_id -> outcome index -> staked amount (ether)
ViewerStakes = dict[int, dict[int, Decimal]]

ZERO = Decimal(0)


class Market(BaseModel):
    """One prediction market as stored by the contract. Amounts are in ether."""

    model_config = ConfigDict(frozen=True)

    market_id: int = Field(..., ge=0)
    owner: str
    question: str
    outcomes: list[str] = Field(..., min_length=2)
    deadline: int = Field(..., ge=0, description="Unix timestamp (seconds)")
    resolved: bool = False
    winning_outcome: int = 0  # meaningless until resolved
    outcome_stakes: list[Decimal]
    total_staked: Decimal = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_invariants(self) -> Market:
        if len(self.outcome_stakes) != len(self.outcomes):
            raise ValueError(
                f"outcome_stakes has {len(self.outcome_stakes)} entries for {len(self.outcomes)} outcomes"
            )
        if any(s < 0 for s in self.outcome_stakes):
            raise ValueError("outcome stakes must be non-negative")
        if sum(self.outcome_stakes, ZERO) != self.total_staked:
            raise ValueError("total_staked does not equal the sum of outcome_stakes")
        if self.resolved and not 0 <= self.winning_outcome < len(self.outcomes):
            raise ValueError(f"winning_outcome {self.winning_outcome} out of range")
        return self

    def is_owned_by(self, address: str | None) -> bool:
        """Case-insensitive owner comparison."""
        return bool(address) and self.owner.lower() == address.lower()

    def is_expired(self, now: int) -> bool:
        return not self.resolved and now >= self.deadline

    def is_active(self, now: int) -> bool:
        return not self.resolved and now < self.deadline

    @property
    def backed_outcomes(self) -> int:
        """Number of outcomes with a strictly positive stake."""
        return sum(1 for s in self.outcome_stakes if s > 0)


def stake_of(stakes: ViewerStakes, market_id: int, outcome: int) -> Decimal:
    """Viewer stake in (market, outcome); zero when unknown."""
    return stakes.get(market_id, {}).get(outcome, ZERO)


def has_position(stakes: ViewerStakes, market_id: int) -> bool:
    """True if the viewer has a strictly positive stake in any outcome."""
    return any(s > 0 for s in stakes.get(market_id, {}).values())


class MarketSnapshot(BaseModel):
    """Immutable result of one full read of the contract."""

    model_config = ConfigDict(frozen=True)

    markets: list[Market] = Field(default_factory=list)  # ascending market_id
    viewer_stakes: ViewerStakes = Field(default_factory=dict)
    viewer: str | None = None
    market_count: int = 0  # as reported by the contract
    skipped: list[int] = Field(default_factory=list)  # ids that failed to read
    fetched_at: int = 0  # unix seconds

    def get(self, market_id: int) -> Market | None:
        for m in self.markets:
            if m.market_id == market_id:
                return m
        return None
