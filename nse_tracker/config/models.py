"""Typed configuration models for the tracker.

The config subsystem relies on pydantic to validate ``tracker.yml`` and to
provide strongly-typed objects to the rest of the runtime. Every section has
defaults matching the public NSE endpoints, so an empty file is valid.
"""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


class NseEndpointConfig(BaseModel):
    """NSE endpoints and browser fingerprint used by the data feed."""

    base_url: str = "https://www.nseindia.com"
    landing_path: str = "/get-quotes/equity?symbol=SBIN"
    status_path: str = "/api/marketStatus"
    snapshot_path: str = "/api/equity-stockIndices"
    live_market_referer: str = "/market-data/live-equity-market"
    index_name: str = Field("NIFTY 500", min_length=1)
    user_agent: str = DEFAULT_USER_AGENT
    timeout_sec: float = Field(10.0, gt=0)
    warmup_delay_sec: float = Field(1.0, ge=0, description="Settle pause between cookie capture and warm-up")

    model_config = ConfigDict(frozen=True)

    def url_for(self, path: str) -> str:
        """Return an absolute URL for ``path`` (absolute URLs pass through)."""

        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"


class PollingConfig(BaseModel):
    """Poll cadence. Delays are in milliseconds; jitter bounds are inclusive."""

    initial_delay_ms: int = Field(1_000, ge=0)
    min_delay_ms: PositiveInt = 60_000
    max_delay_ms: PositiveInt = 90_000

    @model_validator(mode="after")
    def _check_jitter_window(self) -> "PollingConfig":
        if self.min_delay_ms > self.max_delay_ms:
            raise ValueError("polling.min_delay_ms must not exceed polling.max_delay_ms")
        return self


class BroadcastConfig(BaseModel):
    """Topic the per-cycle snapshot is published on."""

    topic: str = Field("/topic/stocks", min_length=1)


class PortfolioConfig(BaseModel):
    path: str = "portfolio.json"


class ServerConfig(BaseModel):
    """HTTP/WebSocket surface served by uvicorn."""

    enabled: bool = True
    host: str = "0.0.0.0"
    port: PositiveInt = 8080
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class TelemetryConfig(BaseModel):
    log_level: str = Field("INFO")
    log_dir: str = Field("data/logs")


class TrackerConfig(BaseModel):
    """Top-level runtime config composed of all sections."""

    nse: NseEndpointConfig = Field(default_factory=NseEndpointConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    broadcast: BroadcastConfig = Field(default_factory=BroadcastConfig)
    portfolio: PortfolioConfig = Field(default_factory=PortfolioConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
