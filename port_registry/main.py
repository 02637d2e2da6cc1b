"""Port Registry - Main entry point."""

from __future__ import annotations

import logging
import sys

from port_registry import __version__
from port_registry.config import PortRegistryConfig, load_config
from port_registry.errors import PortRegistryError
from port_registry.loader import RegistryLoader
from port_registry.service import PortsService
from port_registry.threading_utils import RefreshWorker

# Number of registered records echoed at debug level after loading
SAMPLE_SIZE = 100


def configure_logging(level: str) -> logging.Logger:
    """Configure root logging to stdout and quiet the HTTP client loggers.

    Args:
        level: Log level string

    Returns:
        Logger instance
    """
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
        force=True,
    )
    logger = logging.getLogger("port_registry")

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logger


def build_service(config: PortRegistryConfig, logger: logging.Logger) -> PortsService:
    """Wire a loader and service from configuration."""
    loader = RegistryLoader(
        url=config.registry_url,
        cache_path=config.cache_path,
        timeout=config.request_timeout,
        logger=logger,
    )
    return PortsService(loader, logger=logger)


def _log_sample(service: PortsService, logger: logging.Logger) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    for record in service.registered_ports()[:SAMPLE_SIZE]:
        logger.debug("%s", record)


def _run_refresh_loop(service: PortsService, config: PortRegistryConfig, logger: logging.Logger) -> None:
    worker = RefreshWorker(service, config.refresh_interval, logger)
    worker.start()
    logger.info("Refreshing port registry every %s seconds", config.refresh_interval)
    try:
        while True:
            worker.wait_for_refresh()
            try:
                logger.info("Random unassigned port: %d", service.random_unassigned_port())
            except PortRegistryError as exc:
                logger.warning("No unassigned port available: %s", exc)
    except KeyboardInterrupt:
        logger.info("Port registry shutting down...")
    finally:
        worker.stop()
        worker.join()


def main() -> None:
    """Main entry point for the port registry."""
    config = load_config()
    logger = configure_logging(config.log_level)
    logger.info("Port Registry v%s starting...", __version__)

    service = build_service(config, logger)
    try:
        catalog = service.refresh(force_download=config.force_download)
    except PortRegistryError:
        logger.exception("Failed to load port registry")
        raise SystemExit(1)

    logger.info("Found %d unregistered user ports", len(catalog.unregistered_ports))
    _log_sample(service, logger)

    try:
        for _ in range(config.draw_count):
            print(service.random_unassigned_port())
    except PortRegistryError:
        logger.exception("Failed to draw an unassigned port")
        raise SystemExit(1)

    if config.refresh_interval > 0:
        _run_refresh_loop(service, config, logger)


if __name__ == "__main__":
    main()
