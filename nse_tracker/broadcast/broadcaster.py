"""In-process topic publisher for per-cycle stock snapshots.

Subscribers register a callback per topic. ``publish`` hands the payload to
every callback synchronously on the publishing thread; there is no queueing,
acknowledgment or replay. Callbacks that need to cross into another thread or
event loop (e.g. the WebSocket bridge) must hand the payload off themselves.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from nse_tracker.core.types import SubscriberCallback
from nse_tracker.data_feed.stocks import StockRecord

LOGGER = logging.getLogger(__name__)

STOCKS_TOPIC = "/topic/stocks"


@dataclass(slots=True, eq=False)
class Subscription:
    """Handle returned by :meth:`Broadcaster.subscribe`."""

    topic: str
    callback: SubscriberCallback
    _broadcaster: "Broadcaster" = field(repr=False)

    def cancel(self) -> None:
        self._broadcaster.unsubscribe(self)


class Broadcaster:
    """Fire-and-forget fan-out of snapshot messages to topic subscribers."""

    def __init__(self, default_topic: str = STOCKS_TOPIC) -> None:
        self.default_topic = default_topic
        self._lock = threading.Lock()
        self._subscribers: Dict[str, List[Subscription]] = {}

    def subscribe(self, topic: str, callback: SubscriberCallback) -> Subscription:
        subscription = Subscription(topic=topic, callback=callback, _broadcaster=self)
        with self._lock:
            self._subscribers.setdefault(topic, []).append(subscription)
        LOGGER.debug("Subscriber added", extra={"topic": topic})
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            current = self._subscribers.get(subscription.topic, [])
            self._subscribers[subscription.topic] = [sub for sub in current if sub is not subscription]

    def subscriber_count(self, topic: str | None = None) -> int:
        with self._lock:
            return len(self._subscribers.get(topic or self.default_topic, []))

    def publish(self, topic: str, payload: Any) -> int:
        """Deliver ``payload`` to every subscriber of ``topic``.

        Returns the number of callbacks that accepted the payload. A failing
        callback is logged and skipped; the remaining ones still receive it.
        """

        with self._lock:
            targets = list(self._subscribers.get(topic, []))
        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(payload)
            except Exception:  # noqa: BLE001 - one bad subscriber must not starve the others
                LOGGER.exception("Subscriber callback failed", extra={"topic": topic})
                continue
            delivered += 1
        return delivered

    def broadcast(self, records: Sequence[StockRecord]) -> int:
        """Publish the full snapshot ``records`` as one message on the stocks topic."""

        message = [record.to_dict() for record in records]
        delivered = self.publish(self.default_topic, message)
        LOGGER.info(
            "Broadcasted %s stocks",
            len(message),
            extra={"topic": self.default_topic, "subscribers": delivered},
        )
        return delivered


__all__ = ["Broadcaster", "STOCKS_TOPIC", "Subscription"]
