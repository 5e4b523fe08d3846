"""Uvicorn entrypoint for running the API server."""

from __future__ import annotations

import argparse
import dataclasses
import logging

import uvicorn

from sarthi.config.logging_config import setup_logging
from sarthi.config.settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the Sarthi completion server.")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address.")
    parser.add_argument("--port", type=int, default=8000, help="Bind port.")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload.")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level.")
    return parser


def main() -> int:
    args = build_parser().parse_args()

    settings = get_settings()
    if args.debug:
        settings = dataclasses.replace(settings, debug=True)
    setup_logging(settings)
    logger = logging.getLogger(__name__)

    remote = settings.remote
    logger.info("Starting API server on %s:%d", args.host, args.port)
    logger.info(
        "Suggestion backend: %s",
        remote.endpoint if remote.enabled else "disabled (local + static only)",
    )
    uvicorn.run(
        "sarthi.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if settings.debug else "info",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
