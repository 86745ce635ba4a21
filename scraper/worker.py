"""Single-flight batch worker draining the URL queue into the media store."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from dataclasses import dataclass

from .http_client import HttpFetchError, HttpFetcher
from .parsers import MediaTriple
from .parsers.media import MediaParser
from .persistence import MediaPersistence, MediaPersistenceError
from .url_queue import UrlQueue

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchResult:
    dequeued: int = 0
    fetched: int = 0
    failed: int = 0
    extracted: int = 0
    persisted: int = 0
    write_failed: bool = False
    elapsed: float = 0.0


class BatchWorker:
    """Processes queued URLs one batch at a time.

    At most one cycle runs at any moment. Each cycle fetches and parses its
    batch concurrently, stores everything it found with one bulk write, then
    hands control back to the event loop before the next cycle starts.
    """

    def __init__(
        self,
        queue: UrlQueue,
        fetcher: HttpFetcher,
        persistence: MediaPersistence,
        *,
        parser: MediaParser | None = None,
        batch_size: int = 20,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._queue = queue
        self._fetcher = fetcher
        self._persistence = persistence
        self._parser = parser or MediaParser()
        self._batch_size = batch_size
        self._lock = threading.Lock()
        self._running = False
        self._closing = False
        self._task: asyncio.Task | None = None
        self.cycles_completed = 0

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def trigger(self) -> bool:
        """Start a cycle if none is running and work is pending.

        Must be called from the event loop thread. Returns False when a cycle
        is already in flight; that cycle reschedules itself for new entries.
        Always returns False once :meth:`stop` has been called.
        """

        loop = asyncio.get_running_loop()
        with self._lock:
            if self._closing or self._running or not self._queue:
                return False
            self._running = True
        self._task = loop.create_task(self._run_cycle())
        return True

    async def _run_cycle(self) -> None:
        loop = asyncio.get_running_loop()
        try:
            await self._process_batch()
        except Exception:
            LOGGER.exception("Critical batch error")
        finally:
            with self._lock:
                self._running = False
                closing = self._closing
            self.cycles_completed += 1
            if self._queue and not closing:
                loop.call_soon(self.trigger)

    async def _process_batch(self) -> BatchResult:
        started = time.monotonic()
        batch = self._queue.dequeue_up_to(self._batch_size)
        result = BatchResult(dequeued=len(batch))
        if not batch:
            return result

        outcomes = await asyncio.gather(
            *(self._scrape(url) for url in batch),
            return_exceptions=True,
        )

        triples: list[MediaTriple] = []
        for url, outcome in zip(batch, outcomes):
            if isinstance(outcome, HttpFetchError):
                LOGGER.debug("Skipping %s: %s", url, outcome)
                result.failed += 1
            elif isinstance(outcome, BaseException):
                LOGGER.error("Unexpected error while scraping %s", url, exc_info=outcome)
                result.failed += 1
            else:
                result.fetched += 1
                triples.extend(outcome)
        result.extracted = len(triples)

        if triples:
            try:
                result.persisted = await asyncio.to_thread(self._persistence.write_all, triples)
            except MediaPersistenceError as exc:
                result.write_failed = True
                LOGGER.error("Failed to store %d media records: %s", len(triples), exc)

        result.elapsed = time.monotonic() - started
        LOGGER.info(
            "Processed batch of %d URLs in %dms. Queue remaining: %d",
            result.dequeued,
            int(result.elapsed * 1000),
            len(self._queue),
        )
        return result

    async def _scrape(self, url: str) -> list[MediaTriple]:
        page = await self._fetcher.fetch_html(url)
        return await asyncio.to_thread(self._parser.parse, url, page.html)

    async def wait_for_cycle(self) -> None:
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)

    async def stop(self) -> int:
        """Stop scheduling cycles and wait for the in-flight one to finish.

        Returns the number of URLs left in the queue, which will not be
        processed.
        """

        with self._lock:
            self._closing = True
        while self._task is not None and not self._task.done():
            await self.wait_for_cycle()
        return len(self._queue)

    async def join(self) -> None:
        """Wait until the queue is drained and no cycle is running."""
        while True:
            await self.wait_for_cycle()
            if self.running:
                continue
            if not self._queue or self._closing:
                return
            self.trigger()
            await asyncio.sleep(0)
