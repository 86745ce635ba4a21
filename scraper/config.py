"""Configuration shared by the API server and the ingestion worker."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DEFAULT_USER_AGENT = "Mozilla/5.0 (Compatible; MediaScraper/1.0)"
DEFAULT_BATCH_SIZE = 20
DEFAULT_PORT = 8080

_DB_URL_ENV = "DATABASE_URL"
_PORT_ENV = "PORT"


@dataclass(slots=True)
class TimeoutConfig:
    request_timeout: float = 5.0


@dataclass(slots=True)
class WorkerConfig:
    batch_size: int = DEFAULT_BATCH_SIZE


@dataclass(slots=True)
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_origins: tuple[str, ...] = ("*",)
    slow_request_threshold: float = 0.5


@dataclass(slots=True)
class ScraperConfig:
    db_url: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    worker: WorkerConfig = field(default_factory=WorkerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def validate(self) -> None:
        if not self.db_url:
            raise ValueError("A database URL is required")
        if self.worker.batch_size < 1:
            raise ValueError("Batch size must be at least 1")
        if self.timeout.request_timeout <= 0:
            raise ValueError("Fetch timeout must be positive")
        if not 0 < self.server.port < 65536:
            raise ValueError(f"Port {self.server.port} is out of range")


def _parse_port(raw_value: str | None) -> int:
    if raw_value is None or not raw_value.strip():
        return DEFAULT_PORT

    cleaned = raw_value.strip()
    try:
        return int(cleaned)
    except ValueError as exc:
        raise ValueError(f"Invalid port {cleaned!r}") from exc


def load_config(environ: Mapping[str, str] | None = None) -> ScraperConfig:
    """Build a configuration from the process environment.

    Only the storage connection string and the listening port are read from
    the environment; everything else keeps its default until the command line
    overrides it.
    """

    env = os.environ if environ is None else environ
    db_url = env.get(_DB_URL_ENV)
    config = ScraperConfig(db_url=db_url.strip() if db_url and db_url.strip() else None)
    config.server.port = _parse_port(env.get(_PORT_ENV))
    return config
