"""Media scraping pipeline: URL queue, batch worker and gallery API."""

from .url_queue import UrlQueue
from .worker import BatchResult, BatchWorker

__all__ = ["BatchResult", "BatchWorker", "UrlQueue"]
