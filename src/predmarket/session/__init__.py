"""Application state and per-viewer session."""

from predmarket.session.state import AppState, MarketSession, build_session

__all__ = ["AppState", "MarketSession", "build_session"]
