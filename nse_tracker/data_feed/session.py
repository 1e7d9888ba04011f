"""Cookie session management for the NSE site.

The NSE API refuses requests that do not carry the cookies handed out by a
normal page visit. :class:`SessionManager` obtains them with a two-step
handshake:

* ``GET`` the landing page (``/get-quotes/equity?symbol=SBIN``) with document
  navigation headers and capture every ``Set-Cookie`` header;
* after a short settle pause, ``GET /api/marketStatus`` as an XHR carrying
  those cookies so the session looks active before real data calls.

The jar is only ever replaced or cleared as a whole, under a lock, so that a
fetch running on the poll thread never observes a half-written jar when an
admin trigger invalidates the session from the HTTP thread.
"""
from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Callable, List, Sequence

import httpx

from nse_tracker.config.models import NseEndpointConfig

from .headers import ajax_headers, build_cookie_header, navigation_headers

LOGGER = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    """Authentication state derived from the cookie jar."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


def build_http_client(
    config: NseEndpointConfig,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Return an :class:`httpx.Client` that never stores cookies on its own.

    Cookies are owned by :class:`SessionManager`; letting httpx keep a second
    jar would resend stale cookies after :meth:`SessionManager.invalidate`.
    """

    refuse_all = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
    return httpx.Client(
        timeout=config.timeout_sec,
        follow_redirects=True,
        cookies=refuse_all,
        transport=transport,
    )


class SessionManager:
    """Owns the NSE cookie jar and the handshake that fills it.

    Parameters
    ----------
    config:
        :class:`NseEndpointConfig` with the landing/status URLs, user agent and
        warm-up settle delay.
    client:
        Optional pre-configured :class:`httpx.Client` (e.g. for tests). When
        omitted one is built with :func:`build_http_client` and owned here.
    sleep:
        Callable used for the settle pause, ``time.sleep`` by default.
    """

    def __init__(
        self,
        config: NseEndpointConfig,
        client: httpx.Client | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or build_http_client(config)
        self._sleep = sleep
        self._lock = threading.Lock()
        self._cookies: List[str] = []

    # ------------------------------------------------------------------
    # Jar access
    # ------------------------------------------------------------------
    def get(self) -> List[str]:
        """Return a copy of the current jar (empty when unauthenticated)."""

        with self._lock:
            return list(self._cookies)

    @property
    def status(self) -> SessionStatus:
        with self._lock:
            return SessionStatus.AUTHENTICATED if self._cookies else SessionStatus.UNAUTHENTICATED

    def cookie_header(self) -> str:
        return build_cookie_header(self.get())

    def invalidate(self) -> None:
        """Drop all cookies so the next fetch performs a fresh handshake."""

        with self._lock:
            dropped = len(self._cookies)
            self._cookies = []
        LOGGER.info("Session invalidated", extra={"dropped_cookies": dropped})

    def _replace(self, cookies: Sequence[str]) -> None:
        with self._lock:
            self._cookies = list(cookies)

    # ------------------------------------------------------------------
    # Handshake
    # ------------------------------------------------------------------
    def handshake(self) -> bool:
        """Visit the landing page, capture cookies and warm the session up.

        Returns ``True`` when the jar holds at least one cookie afterwards.
        Failures are logged; nothing is raised and nothing is retried here.
        """

        landing_url = self._config.url_for(self._config.landing_path)
        LOGGER.info("Refreshing NSE cookies", extra={"url": landing_url})
        try:
            response = self._client.get(landing_url, headers=navigation_headers(self._config.user_agent))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            LOGGER.error("Failed to refresh cookies: %s", exc)
            return self.status is SessionStatus.AUTHENTICATED

        cookies = response.headers.get_list("set-cookie")
        self._replace(cookies)
        if not cookies:
            LOGGER.warning(
                "Landing page returned no cookies",
                extra={"status_code": response.status_code},
            )
            return False

        LOGGER.info("Initial cookies captured, warming up session", extra={"cookie_count": len(cookies)})
        self._warm_up(landing_url, build_cookie_header(cookies))
        return True

    def _warm_up(self, referer: str, cookie_header: str) -> None:
        # The settle pause must sit between cookie capture and the warm-up call.
        self._sleep(self._config.warmup_delay_sec)
        status_url = self._config.url_for(self._config.status_path)
        headers = ajax_headers(self._config.user_agent, referer=referer, cookie_header=cookie_header)
        try:
            response = self._client.get(status_url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            LOGGER.warning("Warm-up call failed, proceeding with captured cookies: %s", exc)
            return
        LOGGER.info("Session warmed up", extra={"url": status_url})

    def close(self) -> None:
        """Close the HTTP client if this manager created it."""

        if self._owns_client:
            self._client.close()


__all__ = ["SessionManager", "SessionStatus", "build_http_client"]
