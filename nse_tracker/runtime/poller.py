"""Jittered poll loop: fetch -> parse -> broadcast, forever.

The loop runs on a single worker thread, so cycles never overlap: the next
wait only starts once the current cycle (including error handling) has
returned. Waiting is done on a :class:`threading.Event`, which lets
:meth:`Poller.stop` interrupt a pending 60-90 s pause immediately.
"""
from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from nse_tracker.config.models import PollingConfig
from nse_tracker.data_feed.stocks import StockRecord, parse_stock_snapshot

LOGGER = logging.getLogger(__name__)


class SnapshotFetcher(Protocol):
    def fetch(self, index_name: Optional[str] = None) -> Optional[str]:
        ...


class SnapshotPublisher(Protocol):
    def broadcast(self, records: Sequence[StockRecord]) -> int:
        ...


Parser = Callable[[str], Optional[Sequence[StockRecord]]]


class CycleStatus(str, Enum):
    """How a single poll cycle ended."""

    BROADCAST = "broadcast"
    NO_DATA = "no_data"
    MALFORMED = "malformed"
    FAILED = "failed"


@dataclass(slots=True)
class CycleOutcome:
    status: CycleStatus
    records: int = 0
    duration_ms: float = 0.0


class Poller:
    """Drive :class:`NseClient` -> parser -> :class:`Broadcaster` on a jittered cadence.

    Parameters
    ----------
    fetcher:
        Object with ``fetch(index_name)`` returning the raw body or ``None``.
    publisher:
        Object with ``broadcast(records)``.
    config:
        :class:`PollingConfig` with the initial delay and the inclusive jitter
        window in milliseconds.
    parser:
        Body -> records callable returning ``None`` for a malformed payload,
        :func:`parse_stock_snapshot` by default.
    rng:
        Random source for the jitter (inject a seeded one in tests).
    """

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        publisher: SnapshotPublisher,
        config: PollingConfig | None = None,
        *,
        parser: Parser = parse_stock_snapshot,
        index_name: Optional[str] = None,
        rng: random.Random | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._publisher = publisher
        self._config = config or PollingConfig()
        self._parser = parser
        self._index_name = index_name
        self._rng = rng or random.Random()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.cycles_run = 0
        self.last_outcome: CycleOutcome | None = None

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    def next_delay_ms(self) -> int:
        """Draw the next inter-cycle delay, inclusive on both ends."""

        return self._rng.randint(self._config.min_delay_ms, self._config.max_delay_ms)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the loop on a daemon worker thread."""

        if self.running:
            raise RuntimeError("Poller is already running")
        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run_forever, name="nse-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 10.0) -> None:
        """Stop scheduling further cycles and wait for the worker to exit."""

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                LOGGER.warning("Poller thread did not exit within %ss", timeout)
            else:
                self._thread = None

    def run_forever(self) -> None:
        """Blocking loop: wait, run one cycle, repeat until :meth:`stop`."""

        delay_ms = self._config.initial_delay_ms
        LOGGER.info("Poller started", extra={"first_cycle_in_ms": delay_ms})
        while not self._stop_event.wait(delay_ms / 1_000.0):
            self.run_cycle()
            delay_ms = self.next_delay_ms()
            LOGGER.info("Next NSE data fetch scheduled in %s seconds", delay_ms // 1_000, extra={"delay_ms": delay_ms})
        LOGGER.info("Poller stopped", extra={"cycles_run": self.cycles_run})

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------
    def run_cycle(self) -> CycleOutcome:
        """Run fetch -> parse -> broadcast exactly once.

        Empty bodies skip both parsing and broadcasting, as do payloads the
        parser rejects as malformed. A valid but empty ``data`` array is still
        broadcast so subscribers see the true snapshot. Any exception raised by
        a step is logged and reported as :attr:`CycleStatus.FAILED`.
        """

        start = time.perf_counter()
        self.cycles_run += 1
        try:
            outcome = self._execute()
        except Exception:  # noqa: BLE001 - nothing may escape the cycle boundary
            LOGGER.exception("Poll cycle failed")
            outcome = CycleOutcome(status=CycleStatus.FAILED)
        outcome.duration_ms = (time.perf_counter() - start) * 1_000.0
        self.last_outcome = outcome
        LOGGER.debug(
            "Poll cycle finished",
            extra={"status": outcome.status.value, "records": outcome.records, "duration_ms": round(outcome.duration_ms, 1)},
        )
        return outcome

    def _execute(self) -> CycleOutcome:
        body = self._fetcher.fetch(self._index_name)
        if body is None:
            return CycleOutcome(status=CycleStatus.NO_DATA)
        records = self._parser(body)
        if records is None:
            return CycleOutcome(status=CycleStatus.MALFORMED)
        self._publisher.broadcast(records)
        return CycleOutcome(status=CycleStatus.BROADCAST, records=len(records))


__all__ = ["CycleOutcome", "CycleStatus", "Poller"]
