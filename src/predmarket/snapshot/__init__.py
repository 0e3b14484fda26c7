"""Snapshot assembly from contract reads."""

from predmarket.snapshot.reader import MarketSnapshotReader, decode_market, read_snapshot

__all__ = ["MarketSnapshotReader", "decode_market", "read_snapshot"]
