"""NSE snapshot client.

Performs one cookie-authenticated ``GET /api/equity-stockIndices?index=...``
per call. HTTP failures are decoded into typed errors at a single point
(:meth:`NseClient._get`); :meth:`NseClient.fetch` then decides what each one
means for the session:

* ``AuthExpiredError`` (401/403) invalidates the session so the next cycle
  re-handshakes;
* any other ``TransportError`` is only logged.

Either way ``fetch`` returns ``None`` and the caller carries on with zero
records for the cycle.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Optional

import httpx

from nse_tracker.config.models import NseEndpointConfig
from nse_tracker.core.errors import AuthExpiredError, TransportError, transport_error_for_status

from .headers import ajax_headers
from .session import SessionManager, SessionStatus, build_http_client

LOGGER = logging.getLogger(__name__)


class NseClient:
    """Fetch raw snapshot bodies for an index bucket (``NIFTY 500`` by default)."""

    def __init__(
        self,
        config: NseEndpointConfig,
        session: SessionManager,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config
        self._session = session
        self._owns_client = client is None
        self._client = client or build_http_client(config)

    @property
    def session(self) -> SessionManager:
        return self._session

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""

        if self._owns_client:
            self._client.close()

    def _get(self, url: str, *, params: Mapping[str, Any], headers: Mapping[str, str]) -> tuple[httpx.Response, float]:
        """Issue a GET and translate failures into :class:`TransportError`."""

        start = time.perf_counter()
        try:
            response = self._client.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise transport_error_for_status(
                exc.response.status_code,
                f"NSE returned HTTP {exc.response.status_code}",
                url=url,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"NSE request failed: {exc}", url=url) from exc
        latency_ms = (time.perf_counter() - start) * 1_000.0
        return response, latency_ms

    def fetch(self, index_name: Optional[str] = None) -> Optional[str]:
        """Return the raw snapshot body, or ``None`` when there is no data.

        Performs the session handshake first when the jar is empty.
        """

        if self._session.status is SessionStatus.UNAUTHENTICATED:
            self._session.handshake()

        index = index_name or self._config.index_name
        url = self._config.url_for(self._config.snapshot_path)
        headers = ajax_headers(
            self._config.user_agent,
            referer=self._config.url_for(self._config.live_market_referer),
            cookie_header=self._session.cookie_header(),
        )
        LOGGER.info("Fetching NSE snapshot", extra={"url": url, "index": index})
        try:
            response, latency_ms = self._get(url, params={"index": index}, headers=headers)
        except AuthExpiredError as exc:
            LOGGER.warning(
                "NSE rejected session, will re-handshake next cycle",
                extra={"status_code": exc.status_code, "index": index},
            )
            self._session.invalidate()
            return None
        except TransportError as exc:
            LOGGER.error("Error fetching NSE data: %s", exc, extra={"status_code": exc.status_code, "index": index})
            return None

        body = response.text
        if not body or not body.strip():
            LOGGER.warning("Empty response body from NSE", extra={"status_code": response.status_code})
            return None
        LOGGER.debug(
            "NSE snapshot received",
            extra={"latency_ms": round(latency_ms, 1), "bytes": len(body), "index": index},
        )
        return body


__all__ = ["NseClient"]
