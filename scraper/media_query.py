"""Read-side queries for stored media, shaped for the gallery API."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import MediaItem

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 1000


@dataclass(slots=True)
class MediaQuery:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    media_type: Optional[str] = None
    search: Optional[str] = None

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must not be negative")
        if self.size < 1:
            raise ValueError("size must be at least 1")
        self.media_type = _blank_to_none(self.media_type)
        self.search = _blank_to_none(self.search)


@dataclass(slots=True, frozen=True)
class MediaRecord:
    id: int
    original_url: str
    media_url: str
    media_type: str
    created_at: Optional[datetime]

    @classmethod
    def from_row(cls, item: MediaItem) -> "MediaRecord":
        return cls(
            id=item.id,
            original_url=item.original_url,
            media_url=item.media_url,
            media_type=item.media_type,
            created_at=item.created_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "originalUrl": self.original_url,
            "mediaUrl": self.media_url,
            "type": self.media_type,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(slots=True, frozen=True)
class MediaPage:
    content: list[MediaRecord]
    total_elements: int
    number: int
    size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size)

    def to_payload(self) -> dict[str, Any]:
        return {
            "content": [record.to_payload() for record in self.content],
            "totalPages": self.total_pages,
            "totalElements": self.total_elements,
            "number": self.number,
            "size": self.size,
        }


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def fetch_media_page(session: Session, query: MediaQuery) -> MediaPage:
    """Return one page of media, newest first, honouring type and search filters."""

    conditions = []
    if query.media_type:
        conditions.append(MediaItem.media_type == query.media_type)
    if query.search:
        pattern = f"%{_escape_like(query.search)}%"
        conditions.append(MediaItem.original_url.ilike(pattern, escape="\\"))

    statement = (
        select(MediaItem)
        .where(*conditions)
        .order_by(MediaItem.id.desc())
        .limit(query.size)
        .offset(query.page * query.size)
    )
    count_statement = select(func.count()).select_from(MediaItem).where(*conditions)

    total = session.execute(count_statement).scalar_one()
    items = session.execute(statement).scalars().all()
    return MediaPage(
        content=[MediaRecord.from_row(item) for item in items],
        total_elements=int(total),
        number=query.page,
        size=query.size,
    )
