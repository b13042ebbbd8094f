#!/usr/bin/env python3
"""
Local API server

Binds HOST:PORT from settings; when PORT is taken, walks up to
PORT_SEARCH_RANGE ports above it. Reload is on outside production.

    python -m autosathi.dev_server
"""
import socket
from typing import Optional

import structlog
import uvicorn

from autosathi.config import Settings, settings as app_settings

logger = structlog.get_logger()


def is_port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return True
        except (OSError, OverflowError):
            return False


def find_available_port(host: str, start: int, search_range: int) -> int:
    for port in range(start, start + search_range + 1):
        if is_port_available(host, port):
            return port
    raise RuntimeError(f"No available ports in range {start}-{start + search_range}")


def main(settings: Optional[Settings] = None):
    settings = settings or app_settings
    port = find_available_port(settings.host, settings.port, settings.port_search_range)
    if port != settings.port:
        logger.warning("dev_server_port_in_use", requested=settings.port, using=port)

    logger.info("dev_server_starting", host=settings.host, port=port, environment=settings.environment)
    uvicorn.run(
        "autosathi.main:app",
        host=settings.host,
        port=port,
        reload=not settings.is_production,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
