"""Stock snapshot records and the ``equity-stockIndices`` response parser."""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from nse_tracker.core.errors import MalformedResponseError
from nse_tracker.core.types import JSONLike, Symbol

LOGGER = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass(slots=True)
class StockRecord:
    """Normalized per-symbol snapshot published every poll cycle.

    ``week_high``/``week_low`` carry NSE's ``nearWKH``/``nearWKL``: the distance
    in percent from the 52-week high/low, not prices.
    """

    symbol: Symbol
    price: float = 0.0
    day_high: float = 0.0
    day_low: float = 0.0
    week_high: float = 0.0
    week_low: float = 0.0
    year_high: float = 0.0
    year_low: float = 0.0
    p_change: float = 0.0
    per_change_30d: float = 0.0
    per_change_365d: float = 0.0
    ffmc: float = 0.0
    industry: str = NOT_AVAILABLE
    company_name: str = NOT_AVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        """Wire form consumed by the dashboard (camelCase keys)."""

        return {
            "symbol": self.symbol,
            "price": self.price,
            "dayHigh": self.day_high,
            "dayLow": self.day_low,
            "weekHigh": self.week_high,
            "weekLow": self.week_low,
            "yearHigh": self.year_high,
            "yearLow": self.year_low,
            "pChange": self.p_change,
            "perChange30d": self.per_change_30d,
            "perChange365d": self.per_change_365d,
            "ffmc": self.ffmc,
            "industry": self.industry,
            "companyName": self.company_name,
        }


def _as_float(value: Any, default: float = 0.0) -> float:
    # bool is an int subclass; NSE never sends it for a numeric field.
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return default
    elif isinstance(value, str):
        try:
            number = float(value.replace(",", ""))
        except ValueError:
            return default
    else:
        return default
    return number if math.isfinite(number) else default


def _as_text(value: Any, default: str = NOT_AVAILABLE) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _as_symbol(value: Any) -> Symbol | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return Symbol(str(value))
    if isinstance(value, str) and value.strip():
        return Symbol(value.strip())
    return None


def parse_stock_item(item: JSONLike) -> StockRecord | None:
    """Convert one ``data[]`` element, or return ``None`` when it has no symbol."""

    symbol = _as_symbol(item.get("symbol"))
    if symbol is None:
        return None
    meta = item.get("meta")
    if not isinstance(meta, Mapping):
        meta = {}
    return StockRecord(
        symbol=symbol,
        price=_as_float(item.get("lastPrice")),
        day_high=_as_float(item.get("dayHigh")),
        day_low=_as_float(item.get("dayLow")),
        week_high=_as_float(item.get("nearWKH")),
        week_low=_as_float(item.get("nearWKL")),
        year_high=_as_float(item.get("yearHigh")),
        year_low=_as_float(item.get("yearLow")),
        p_change=_as_float(item.get("pChange")),
        per_change_30d=_as_float(item.get("perChange30d")),
        per_change_365d=_as_float(item.get("perChange365d")),
        ffmc=_as_float(item.get("ffmc")),
        industry=_as_text(meta.get("industry")),
        company_name=_as_text(meta.get("companyName")),
    )


def _extract_rows(body: str) -> List[Any]:
    try:
        root = json.loads(body)
    except (TypeError, ValueError, RecursionError) as exc:
        raise MalformedResponseError(f"Snapshot body is not valid JSON: {exc}") from exc
    if not isinstance(root, dict):
        raise MalformedResponseError(f"Snapshot root must be an object, got {type(root).__name__}")
    if "data" not in root:
        raise MalformedResponseError("Snapshot object has no 'data' key")
    rows = root["data"]
    if not isinstance(rows, list):
        raise MalformedResponseError(f"Snapshot 'data' must be an array, got {type(rows).__name__}")
    return rows


def parse_stock_snapshot(body: str) -> Optional[List[StockRecord]]:
    """Parse an ``/api/equity-stockIndices`` body, telling "malformed" from "empty".

    Returns ``None`` when the payload cannot be interpreted at all (logged as a
    warning) and a possibly empty list when ``data`` is a valid array. Source
    order and multiplicity are preserved: a symbol listed twice yields two
    records. Rows without a symbol are skipped.
    """

    try:
        rows = _extract_rows(body)
    except MalformedResponseError as exc:
        LOGGER.warning("Ignoring malformed snapshot: %s", exc)
        return None

    records: List[StockRecord] = []
    skipped = 0
    for item in rows:
        record = parse_stock_item(item) if isinstance(item, Mapping) else None
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        LOGGER.debug("Skipped snapshot rows without a symbol", extra={"skipped": skipped})
    return records


def parse_stock_response(body: str) -> List[StockRecord]:
    """Like :func:`parse_stock_snapshot`, but a malformed payload yields ``[]``.

    Never raises for bad input.
    """

    records = parse_stock_snapshot(body)
    return records if records is not None else []


__all__ = ["NOT_AVAILABLE", "StockRecord", "parse_stock_item", "parse_stock_response", "parse_stock_snapshot"]
