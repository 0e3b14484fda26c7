"""ABI for the PredictionMarket contract."""

from __future__ import annotations

from typing import Any


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list[tuple[str, str]], mutability: str) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"internalType": t, "name": n, "type": t} for n, t in inputs],
        "outputs": [{"internalType": t, "name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


def _event(name: str, inputs: list[tuple[str, str, bool]]) -> dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [{"indexed": idx, "internalType": t, "name": n, "type": t} for n, t, idx in inputs],
    }


PREDICTION_MARKET_ABI: list[dict[str, Any]] = [
    _fn("marketCount", [], [("", "uint256")], "view"),
    _fn(
        "createMarket",
        [("_question", "string"), ("_outcomes", "string[]"), ("_deadline", "uint256")],
        [("", "uint256")],
        "nonpayable",
    ),
    _fn(
        "getMarketBasic",
        [("marketId", "uint256")],
        [
            ("owner", "address"),
            ("question", "string"),
            ("deadline", "uint256"),
            ("resolved", "bool"),
            ("winningOutcome", "uint256"),
            ("totalStaked", "uint256"),
            ("outcomeStakes", "uint256[]"),
            ("outcomes", "string[]"),
        ],
        "view",
    ),
    _fn("placeBet", [("marketId", "uint256"), ("outcome", "uint256")], [], "payable"),
    _fn("resolveMarket", [("marketId", "uint256"), ("winningOutcome", "uint256")], [], "nonpayable"),
    _fn("claim", [("marketId", "uint256")], [], "nonpayable"),
    _fn(
        "userStakeIn",
        [("marketId", "uint256"), ("user", "address"), ("outcome", "uint256")],
        [("", "uint256")],
        "view",
    ),
    _event(
        "MarketCreated",
        [
            ("marketId", "uint256", True),
            ("owner", "address", True),
            ("question", "string", False),
            ("outcomes", "string[]", False),
            ("deadline", "uint256", False),
        ],
    ),
    _event(
        "BetPlaced",
        [
            ("marketId", "uint256", True),
            ("bettor", "address", True),
            ("outcome", "uint256", True),
            ("amount", "uint256", False),
        ],
    ),
    _event("MarketResolved", [("marketId", "uint256", True), ("winningOutcome", "uint256", False)]),
    _event(
        "PayoutClaimed",
        [("marketId", "uint256", True), ("claimer", "address", True), ("amount", "uint256", False)],
    ),
]

# Field order of getMarketBasic's return tuple
MARKET_BASIC_FIELDS = (
    "owner",
    "question",
    "deadline",
    "resolved",
    "winningOutcome",
    "totalStaked",
    "outcomeStakes",
    "outcomes",
)
