"""Error taxonomy shared by the core and the surfaces."""

from __future__ import annotations


class PredMarketError(Exception):
    """Base for errors raised by predmarket."""


class InputValidationError(PredMarketError):
    """User input failed a pre-submission check. No external call was made."""


class TransactionBusyError(PredMarketError):
    """A transaction is already outstanding."""


class MarketNotFoundError(PredMarketError):
    """Market id is not present in the current snapshot."""

    def __init__(self, market_id: int) -> None:
        super().__init__(f"Market not found: {market_id}")
        self.market_id = market_id


class ViewerRequiredError(PredMarketError):
    """Operation needs a viewer address or signing account."""


class ViewerMismatchError(PredMarketError):
    """Viewer address differs from the signing account in a signing session."""


class InvalidTransition(PredMarketError):
    """Transaction handle moved out of a terminal state or skipped a step."""
