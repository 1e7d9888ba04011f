"""Browser-mimicking request headers for the NSE site.

NSE answers API calls with real content only when they look like they come
from a Chrome tab that has already visited the site: a document navigation
first, then same-origin XHRs carrying the cookies issued by that navigation.
"""
from __future__ import annotations

from typing import Dict, Iterable

_CLIENT_HINTS: Dict[str, str] = {
    "Sec-Ch-Ua": '"Not A(Brand";v="99", "Google Chrome";v="121", "Chromium";v="121"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
}


def navigation_headers(user_agent: str, *, referer: str = "https://www.google.com/") -> Dict[str, str]:
    """Headers of a top-level page load arriving from a search engine."""

    return {
        "Referer": referer,
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
            "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "Pragma": "no-cache",
        **_CLIENT_HINTS,
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "cross-site",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
        "User-Agent": user_agent,
    }


def ajax_headers(user_agent: str, *, referer: str, cookie_header: str = "") -> Dict[str, str]:
    """Headers of an in-page ``XMLHttpRequest`` issued from ``referer``."""

    headers = {
        "Referer": referer,
        "Accept": "application/json, text/plain, */*",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
        "X-Requested-With": "XMLHttpRequest",
        **_CLIENT_HINTS,
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-origin",
        "User-Agent": user_agent,
    }
    if cookie_header:
        headers["Cookie"] = cookie_header
    return headers


def build_cookie_header(cookies: Iterable[str]) -> str:
    """Collapse raw ``Set-Cookie`` values into one ``Cookie`` header value.

    Only the ``name=value`` part before the first ``;`` of each cookie is kept;
    attributes such as ``Path`` or ``HttpOnly`` are dropped.
    """

    return "; ".join(cookie.split(";", 1)[0].strip() for cookie in cookies)


__all__ = ["ajax_headers", "build_cookie_header", "navigation_headers"]
