"""Database persistence helpers for extracted media."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError

from models import MediaItem

from .parsers import MediaTriple

LOGGER = logging.getLogger(__name__)


class MediaPersistenceError(RuntimeError):
    """Raised when a bulk write of media records fails."""


class MediaPersistence:
    """Writes batches of extracted media as one multi-row insert."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    def write_all(self, triples: Sequence[MediaTriple]) -> int:
        if not triples:
            return 0

        rows = [
            {
                "original_url": triple.source_url,
                "media_url": triple.media_url,
                "type": triple.media_type.value,
            }
            for triple in triples
        ]
        # One multi-row VALUES statement per batch.
        statement = insert(MediaItem.__table__).values(rows)
        try:
            with self._session_factory() as session:
                session.execute(statement)
                session.commit()
        except SQLAlchemyError as exc:
            raise MediaPersistenceError(str(exc)) from exc

        LOGGER.debug("Stored %d media records", len(rows))
        return len(rows)
