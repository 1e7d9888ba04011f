from __future__ import annotations

import logging
import os
import signal
import threading
from dataclasses import dataclass
from pathlib import Path

import httpx
import uvicorn

from nse_tracker.broadcast import Broadcaster
from nse_tracker.config import TrackerConfig, load_or_default
from nse_tracker.data_feed import NseClient, SessionManager, build_http_client
from nse_tracker.interfaces import create_app
from nse_tracker.portfolio import PortfolioStore
from nse_tracker.runtime import Poller
from nse_tracker.telemetry import configure_logging

CONFIG_ENV_VAR = "NSE_TRACKER_CONFIG"


@dataclass(slots=True)
class TrackerService:
    """All long-lived components wired together from one :class:`TrackerConfig`."""

    config: TrackerConfig
    session: SessionManager
    client: NseClient
    broadcaster: Broadcaster
    poller: Poller
    portfolio: PortfolioStore
    http_client: httpx.Client

    def close(self) -> None:
        self.poller.stop()
        # session and client share http_client, which neither of them owns.
        self.http_client.close()


def build_service(config: TrackerConfig, *, project_root: Path | None = None) -> TrackerService:
    """Wire session -> client -> poller -> broadcaster plus the portfolio store."""

    root = project_root or Path.cwd()
    http_client = build_http_client(config.nse)
    session = SessionManager(config.nse, http_client)
    client = NseClient(config.nse, session, http_client)
    broadcaster = Broadcaster(config.broadcast.topic)
    poller = Poller(client, broadcaster, config.polling, index_name=config.nse.index_name)
    portfolio = PortfolioStore(root / config.portfolio.path)
    return TrackerService(
        config=config,
        session=session,
        client=client,
        broadcaster=broadcaster,
        poller=poller,
        portfolio=portfolio,
        http_client=http_client,
    )


def main() -> None:
    project_root = Path.cwd()
    config_path = _resolve_config_path(project_root / "config")
    config = load_or_default(config_path)

    log_dir = (project_root / config.telemetry.log_dir).resolve()
    logger = configure_logging(
        log_dir=log_dir,
        level=config.telemetry.log_level,
        index_name=config.nse.index_name,
    )
    logger.info(
        "Bootstrapping tracker",
        extra={"config_path": str(config_path), "index": config.nse.index_name},
    )

    service = build_service(config, project_root=project_root)
    service.poller.start()

    try:
        if config.server.enabled:
            _serve(service, logger)
        else:
            _wait_for_signal(logger)
    except KeyboardInterrupt:  # pragma: no cover - manual exit
        logger.info("Interrupted by user")
    finally:
        service.close()
        logger.info("Shutdown complete")


def _serve(service: TrackerService, logger: logging.Logger) -> None:
    app = create_app(
        portfolio=service.portfolio,
        broadcaster=service.broadcaster,
        session=service.session,
        cors_origins=service.config.server.cors_origins,
        topic=service.config.broadcast.topic,
    )
    server_cfg = service.config.server
    logger.info("Starting HTTP server", extra={"host": server_cfg.host, "port": server_cfg.port})
    # uvicorn installs its own SIGINT/SIGTERM handlers and returns on shutdown.
    uvicorn.run(app, host=server_cfg.host, port=server_cfg.port, log_config=None)


def _wait_for_signal(logger: logging.Logger) -> None:
    stop_event = threading.Event()

    def _request_stop(signum: int, _: object) -> None:
        logger.info("Received signal", extra={"signal": signum})
        stop_event.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)
    stop_event.wait()


def _resolve_config_path(config_dir: Path) -> Path:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return config_dir / "tracker.yml"


if __name__ == "__main__":  # pragma: no cover
    main()
