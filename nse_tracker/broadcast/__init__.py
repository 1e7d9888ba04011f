"""Snapshot fan-out to subscribers."""

from .broadcaster import STOCKS_TOPIC, Broadcaster, Subscription

__all__ = ["Broadcaster", "STOCKS_TOPIC", "Subscription"]
