"""Viewer position analytics."""

from predmarket.analytics.position import compute_stats, estimated_payout

__all__ = ["compute_stats", "estimated_payout"]
