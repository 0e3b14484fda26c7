"""Contract boundary protocol. The snapshot reader and orchestrator only talk to this."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from predmarket.models.transaction import TxAction


class MarketContract(Protocol):
    """Async view of the external PredictionMarket contract. Amounts are in wei."""

    async def market_count(self) -> int: ...

    async def get_market(self, market_id: int) -> Sequence[Any]:
        """Raw getMarketBasic tuple (see chain.abi.MARKET_BASIC_FIELDS)."""
        ...

    async def user_stake_in(self, market_id: int, user: str, outcome: int) -> int: ...

    async def send_transaction(self, action: TxAction, args: Sequence[Any], value_wei: int = 0) -> str:
        """Sign and broadcast; return the transaction hash (0x-hex)."""
        ...

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        """Block until the transaction is mined. No timeout."""
        ...

    def created_market_id(self, receipt: dict[str, Any]) -> int | None:
        """Market id from a MarketCreated log in the receipt, if any."""
        ...
