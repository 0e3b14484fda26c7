"""Wei <-> ether conversion. The core works in exact Decimal ether."""

from __future__ import annotations

from decimal import Decimal

from web3 import Web3


def wei_to_ether(value: int) -> Decimal:
    return Decimal(Web3.from_wei(int(value), "ether"))


def ether_to_wei(amount: Decimal | str | float) -> int:
    return int(Web3.to_wei(Decimal(str(amount)), "ether"))
