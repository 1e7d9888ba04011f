"""NSE data ingestion package.

Session handshake, snapshot fetching and parsing of the raw
``equity-stockIndices`` payload into :class:`StockRecord` objects.
"""

from .nse_client import NseClient
from .session import SessionManager, SessionStatus, build_http_client
from .stocks import StockRecord, parse_stock_response, parse_stock_snapshot

__all__ = [
    "NseClient",
    "SessionManager",
    "SessionStatus",
    "StockRecord",
    "build_http_client",
    "parse_stock_response",
    "parse_stock_snapshot",
]
