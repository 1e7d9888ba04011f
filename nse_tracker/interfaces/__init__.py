"""Outer interfaces: HTTP/WebSocket API for the dashboard."""

from .http_api import create_app

__all__ = ["create_app"]
