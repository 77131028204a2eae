"""Command-line entry point: ``python -m lighter_gateway``."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from typing import Sequence

import uvicorn
from dotenv import load_dotenv

from .api.app import create_app
from .core.config import Settings

logger = logging.getLogger("lighter_gateway")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the Lighter gateway HTTP/WebSocket API.")
    parser.add_argument("--host", help="listen address (default from LIGHTER_GATEWAY_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="listen port (default from LIGHTER_GATEWAY_PORT or 8080)")
    parser.add_argument("--log-level", help="logging level (default from LIGHTER_GATEWAY_LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    env_loaded = load_dotenv()

    settings = Settings.from_env()
    overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("log_level", args.log_level))
        if value is not None
    }
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    if env_loaded:
        logger.info(".env loaded")
    else:
        logger.info("no .env file found, using process environment")

    app = create_app(settings)
    logger.info("starting backend on %s:%s", settings.host, settings.port)
    # uvicorn exits the process with status 1 when the listener cannot bind.
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry point
    sys.exit(main())
