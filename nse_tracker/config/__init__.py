"""Configuration loading and validation package."""

from .loader import load_or_default, load_tracker_config
from .models import (
    BroadcastConfig,
    NseEndpointConfig,
    PollingConfig,
    PortfolioConfig,
    ServerConfig,
    TelemetryConfig,
    TrackerConfig,
)

__all__ = [
    "BroadcastConfig",
    "NseEndpointConfig",
    "PollingConfig",
    "PortfolioConfig",
    "ServerConfig",
    "TelemetryConfig",
    "TrackerConfig",
    "load_or_default",
    "load_tracker_config",
]
