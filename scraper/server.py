"""Command-line entrypoint serving the media scraper API."""

from __future__ import annotations

import argparse
import logging
from typing import Mapping, Sequence

import uvicorn

from .api import create_app
from .config import ScraperConfig, load_config

LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the media scraper API")
    parser.add_argument(
        "--db-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL (defaults to $DATABASE_URL)",
    )
    parser.add_argument("--host", type=str, default=None, help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (defaults to $PORT or 8080)")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Number of URLs fetched concurrently per worker cycle (default: 20)",
    )
    parser.add_argument(
        "--fetch-timeout",
        type=float,
        default=None,
        help="Seconds before a page fetch is abandoned (default: 5)",
    )
    parser.add_argument("--user-agent", type=str, default=None, help="User-Agent header sent with page fetches")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        default="INFO",
        help="Logging verbosity (default: INFO)",
    )
    return parser


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def build_config(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> ScraperConfig:
    config = load_config(environ)
    if args.db_url:
        config.db_url = args.db_url
    if args.host:
        config.server.host = args.host
    if args.port is not None:
        config.server.port = args.port
    if args.batch_size is not None:
        config.worker.batch_size = args.batch_size
    if args.fetch_timeout is not None:
        config.timeout.request_timeout = args.fetch_timeout
    if args.user_agent:
        config.user_agent = args.user_agent
    config.log_level = args.log_level
    config.validate()
    return config


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(config.log_level)
    app = create_app(config)
    LOGGER.info("Starting media scraper on %s:%d", config.server.host, config.server.port)
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_config=None,
        log_level=config.log_level.lower(),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
