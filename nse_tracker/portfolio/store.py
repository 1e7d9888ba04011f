"""File-backed portfolio symbol list.

The portfolio is a JSON array of symbols (``portfolio.json``). It is read
once when the store is created and rewritten synchronously after every
mutation. Disk problems never reach callers: they are logged and the
in-memory set stays authoritative until the next successful save.
"""
from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import List, Set

from nse_tracker.core.errors import PersistenceError

LOGGER = logging.getLogger(__name__)


class PortfolioStore:
    """Set of symbols the user holds, persisted to ``path``."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._symbols: Set[str] = set()
        try:
            self._symbols = self._load()
        except PersistenceError as exc:
            LOGGER.error("Failed to load portfolio: %s", exc)

    def add(self, symbol: str) -> None:
        with self._lock:
            self._symbols.add(symbol)
            self._save_logged()

    def remove(self, symbol: str) -> None:
        with self._lock:
            self._symbols.discard(symbol)
            self._save_logged()

    def list(self) -> List[str]:
        with self._lock:
            return sorted(self._symbols)

    # Persistence -------------------------------------------------------
    def _load(self) -> Set[str]:
        if not self.path.exists():
            return set()
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(payload, list):
            raise PersistenceError(f"{self.path} must contain a JSON array of symbols")
        symbols = {str(item) for item in payload if isinstance(item, str) and item}
        LOGGER.info("Loaded %s stocks from %s", len(symbols), self.path.name)
        return symbols

    def _save(self) -> None:
        data = json.dumps(sorted(self._symbols), indent=2, ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(data, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to write {self.path}: {exc}") from exc

    def _save_logged(self) -> None:
        try:
            self._save()
        except PersistenceError as exc:
            LOGGER.error("Failed to save portfolio: %s", exc)
            return
        LOGGER.info("Saved portfolio", extra={"path": str(self.path), "symbols": len(self._symbols)})


__all__ = ["PortfolioStore"]
