"""ViewerStats - aggregate position statistics for one address."""

from pydantic import BaseModel


class ViewerStats(BaseModel):
    """Derived from a snapshot; percentages and amounts are pre-formatted strings."""

    viewer: str
    markets_created: int = 0
    markets_won: int = 0
    markets_lost: int = 0
    total_resolved_bets: int = 0
    win_rate: str = "0.0"  # percent, one decimal
    total_earnings: str = "0.0000"  # ether, four decimals
