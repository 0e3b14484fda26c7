"""Formatting for amounts, percentages, time remaining, and explorer links."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_FOUR_DP = Decimal("0.0001")
_ONE_DP = Decimal("0.1")


def format_amount(value: Decimal | int | str) -> str:
    """Ether amount rounded half-up to four decimals."""
    return str(Decimal(str(value)).quantize(_FOUR_DP, rounding=ROUND_HALF_UP))


def format_percent(value: Decimal | int | str) -> str:
    """Percentage rounded half-up to one decimal."""
    return str(Decimal(str(value)).quantize(_ONE_DP, rounding=ROUND_HALF_UP))


def format_time_remaining(deadline: int, now: int) -> str:
    """Human countdown to deadline: '2d 3h', '3h 12m', '4m 05s', or 'Ended'."""
    remaining = deadline - now
    if remaining <= 0:
        return "Ended"
    days, rem = divmod(remaining, 86400)
    hours, rem = divmod(rem, 3600)
    minutes, seconds = divmod(rem, 60)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m {seconds:02d}s"


def explorer_url(template: str, tx_hash: str) -> str:
    """Block explorer link for a transaction, e.g. 'https://.../tx/{tx_hash}'."""
    return template.format(tx_hash=tx_hash)
