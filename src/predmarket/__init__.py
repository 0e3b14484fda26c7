"""Client for an on-chain prediction market: snapshots, search, stats, and transactions."""

__version__ = "0.1.0"
