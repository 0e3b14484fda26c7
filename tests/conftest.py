"""Shared fixtures: in-memory fake contract and market builders."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Sequence

import pytest

from predmarket.models.market import Market
from predmarket.models.transaction import TxAction

NOW = 1_700_000_000
ALICE = "0xA11CE00000000000000000000000000000000001"
BOB = "0xB0B0000000000000000000000000000000000002"
WEI = 10**18


class FakeMarketContract:
    """In-memory MarketContract. Amounts in wei, state changes applied on send."""

    def __init__(self, sender: str | None = ALICE) -> None:
        self.sender = sender
        self.markets: list[dict[str, Any]] = []
        self.stakes: dict[tuple[int, str, int], int] = {}
        self.failing_markets: set[int] = set()
        self.failing_stakes: set[tuple[int, int]] = set()
        self.count_error: Exception | None = None
        self.reject_with: str | None = None
        self.revert_claims: set[int] = set()
        self.sent: list[tuple[TxAction, tuple[Any, ...], int]] = []
        self.read_calls = 0
        self._receipts: dict[str, dict[str, Any]] = {}

    def add_market(
        self,
        owner: str,
        question: str,
        outcomes: list[str],
        deadline: int,
        stakes_wei: list[int] | None = None,
        resolved: bool = False,
        winning: int = 0,
    ) -> int:
        stakes_wei = stakes_wei or [0] * len(outcomes)
        self.markets.append(
            {
                "owner": owner,
                "question": question,
                "deadline": deadline,
                "resolved": resolved,
                "winningOutcome": winning,
                "totalStaked": sum(stakes_wei),
                "outcomeStakes": list(stakes_wei),
                "outcomes": list(outcomes),
            }
        )
        return len(self.markets) - 1

    def stake(self, market_id: int, user: str, outcome: int, wei: int) -> None:
        key = (market_id, user.lower(), outcome)
        self.stakes[key] = self.stakes.get(key, 0) + wei

    async def market_count(self) -> int:
        if self.count_error is not None:
            raise self.count_error
        return len(self.markets)

    async def get_market(self, market_id: int) -> Sequence[Any]:
        self.read_calls += 1
        if market_id in self.failing_markets:
            raise RuntimeError("execution reverted")
        m = self.markets[market_id]
        return (
            m["owner"],
            m["question"],
            m["deadline"],
            m["resolved"],
            m["winningOutcome"],
            m["totalStaked"],
            m["outcomeStakes"],
            m["outcomes"],
        )

    async def user_stake_in(self, market_id: int, user: str, outcome: int) -> int:
        if (market_id, outcome) in self.failing_stakes:
            raise RuntimeError("rpc timeout")
        return self.stakes.get((market_id, user.lower(), outcome), 0)

    async def send_transaction(self, action: TxAction, args: Sequence[Any], value_wei: int = 0) -> str:
        if self.reject_with is not None:
            raise RuntimeError(self.reject_with)
        self.sent.append((action, tuple(args), value_wei))
        tx_hash = "0x" + f"{len(self.sent):064x}"
        receipt: dict[str, Any] = {"status": 1, "blockNumber": 100 + len(self.sent), "logs": []}
        if action is TxAction.CREATE_MARKET:
            question, outcomes, deadline = args
            receipt["created_market_id"] = self.add_market(self.sender, question, outcomes, deadline)
        elif action is TxAction.PLACE_BET:
            market_id, outcome = args
            self.stake(market_id, self.sender, outcome, value_wei)
            m = self.markets[market_id]
            m["outcomeStakes"][outcome] += value_wei
            m["totalStaked"] += value_wei
        elif action is TxAction.RESOLVE_MARKET:
            market_id, winning = args
            self.markets[market_id]["resolved"] = True
            self.markets[market_id]["winningOutcome"] = winning
        elif action is TxAction.CLAIM:
            if args[0] in self.revert_claims:
                receipt["status"] = 0
        self._receipts[tx_hash] = receipt
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        return self._receipts[tx_hash]

    def created_market_id(self, receipt: dict[str, Any]) -> int | None:
        return receipt.get("created_market_id")


def make_market(
    market_id: int,
    stakes: list[str] | None = None,
    outcomes: list[str] | None = None,
    owner: str = BOB,
    question: str = "Will it rain tomorrow?",
    deadline: int = NOW + 3600,
    resolved: bool = False,
    winning: int = 0,
) -> Market:
    outcomes = outcomes or ["Yes", "No"]
    amounts = [Decimal(s) for s in (stakes or ["0"] * len(outcomes))]
    return Market(
        market_id=market_id,
        owner=owner,
        question=question,
        outcomes=outcomes,
        deadline=deadline,
        resolved=resolved,
        winning_outcome=winning,
        outcome_stakes=amounts,
        total_staked=sum(amounts, Decimal(0)),
    )


@pytest.fixture
def fake_contract() -> FakeMarketContract:
    return FakeMarketContract()


@pytest.fixture
def market_factory():
    return make_market
