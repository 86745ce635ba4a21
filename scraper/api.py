"""FastAPI application exposing URL submission and media browsing."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import ScraperConfig
from .database import build_engine, build_session_factory, init_db
from .http_client import HttpFetcher
from .media_query import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MediaQuery, fetch_media_page
from .persistence import MediaPersistence
from .url_queue import UrlQueue
from .worker import BatchWorker

LOGGER = logging.getLogger(__name__)


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def create_app(
    config: ScraperConfig,
    *,
    engine: Engine | None = None,
    fetcher: HttpFetcher | None = None,
) -> FastAPI:
    """Wire the queue, worker and storage into a FastAPI app.

    ``engine`` and ``fetcher`` may be injected; otherwise they are built from
    ``config``. The app owns whatever it builds and releases it on shutdown.
    """

    owns_engine = engine is None
    if engine is None:
        if not config.db_url:
            raise ValueError("A database URL is required")
        engine = build_engine(config.db_url)
    session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        worker_fetcher = fetcher or HttpFetcher(config)
        queue = UrlQueue()
        worker = BatchWorker(
            queue,
            worker_fetcher,
            MediaPersistence(session_factory),
            batch_size=config.worker.batch_size,
        )
        app.state.queue = queue
        app.state.worker = worker
        LOGGER.info(
            "Media scraper ready (batch size %d, fetch timeout %.1fs)",
            config.worker.batch_size,
            config.timeout.request_timeout,
        )
        try:
            yield
        finally:
            remaining = await worker.stop()
            if remaining:
                LOGGER.warning("Discarding %d queued URLs on shutdown", remaining)
            if fetcher is None:
                await worker_fetcher.aclose()
            if owns_engine:
                engine.dispose()

    app = FastAPI(title="media-scraper", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    slow_threshold = config.server.slow_request_threshold

    @app.middleware("http")
    async def log_slow_requests(request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        duration = time.monotonic() - started
        if duration > slow_threshold:
            LOGGER.warning(
                "[SLOW API] %s %s took %dms",
                request.method,
                request.url.path,
                int(duration * 1000),
            )
        return response

    @app.get("/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "queueLength": len(request.app.state.queue),
            "workerRunning": request.app.state.worker.running,
        }

    @app.post("/api/scrape", status_code=202)
    async def scrape(request: Request):
        try:
            urls = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _bad_request("Invalid format: body must be a JSON array of URL strings.")

        if not isinstance(urls, list):
            return _bad_request("Invalid format: body must be a JSON array of URL strings.")
        if not all(isinstance(url, str) for url in urls):
            return _bad_request("Invalid format: every URL must be a string.")

        queue: UrlQueue = request.app.state.queue
        queue_length = queue.enqueue(urls)
        request.app.state.worker.trigger()
        LOGGER.info("Received %d URLs; queue length %d", len(urls), queue_length)
        return JSONResponse(
            status_code=202,
            content={
                "message": f"Accepted {len(urls)} URLs for processing.",
                "queueLength": queue_length,
            },
        )

    @app.get("/api/media")
    def list_media(
        page: int = Query(0, ge=0),
        size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
        media_type: Optional[str] = Query(None, alias="type"),
        search: Optional[str] = Query(None),
    ):
        query = MediaQuery(page=page, size=size, media_type=media_type, search=search)
        try:
            with session_factory() as session:
                result = fetch_media_page(session, query)
        except SQLAlchemyError:
            LOGGER.exception("Query error")
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
        return result.to_payload()

    return app
