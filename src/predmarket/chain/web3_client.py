"""web3.py implementation of MarketContract - async reads, locally signed writes."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

import structlog
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound
from web3.logs import DISCARD

from predmarket.chain.abi import PREDICTION_MARKET_ABI
from predmarket.models.transaction import TxAction

log = structlog.get_logger(__name__)


class Web3MarketContract:
    """MarketContract over an HTTP JSON-RPC endpoint.

    Without a private key the instance is read-only; send_transaction raises.
    """

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        chain_id: int,
        private_key: str | None = None,
        receipt_poll_interval_sec: float = 2.0,
        create_gas_limit: int | None = None,
    ):
        self.w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.address = Web3.to_checksum_address(contract_address)
        self.chain_id = chain_id
        self.receipt_poll_interval_sec = receipt_poll_interval_sec
        self.create_gas_limit = create_gas_limit
        self._contract = self.w3.eth.contract(address=self.address, abi=PREDICTION_MARKET_ABI)
        self._account = self.w3.eth.account.from_key(private_key) if private_key else None

    @property
    def sender(self) -> str | None:
        """Address of the signing account, if any."""
        return self._account.address if self._account is not None else None

    async def market_count(self) -> int:
        return int(await self._contract.functions.marketCount().call())

    async def get_market(self, market_id: int) -> Sequence[Any]:
        return await self._contract.functions.getMarketBasic(market_id).call()

    async def user_stake_in(self, market_id: int, user: str, outcome: int) -> int:
        user = Web3.to_checksum_address(user)
        return int(await self._contract.functions.userStakeIn(market_id, user, outcome).call())

    async def send_transaction(self, action: TxAction, args: Sequence[Any], value_wei: int = 0) -> str:
        if self._account is None:
            raise RuntimeError("No signing key configured; session is read-only")
        function_call = getattr(self._contract.functions, action.value)(*args)
        tx_options: dict[str, Any] = {
            "from": self._account.address,
            "chainId": self.chain_id,
            "nonce": await self.w3.eth.get_transaction_count(self._account.address),
            "value": value_wei,
        }
        if action is TxAction.CREATE_MARKET and self.create_gas_limit:
            tx_options["gas"] = self.create_gas_limit
        tx = await function_call.build_transaction(tx_options)
        signed = self._account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        while True:
            try:
                receipt = await self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                receipt = None
            if receipt is not None:
                return dict(receipt)
            await asyncio.sleep(self.receipt_poll_interval_sec)

    def created_market_id(self, receipt: dict[str, Any]) -> int | None:
        events = self._contract.events.MarketCreated().process_receipt(receipt, errors=DISCARD)
        if not events:
            return None
        return int(events[0]["args"]["marketId"])
