"""Parser interfaces and data models for media extraction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MediaType(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


@dataclass(slots=True, frozen=True)
class MediaTriple:
    source_url: str
    media_url: str
    media_type: MediaType


def is_absolute_http_url(raw_url: str | None) -> bool:
    """Returns True only for URLs carrying an explicit http(s) scheme."""
    if not raw_url:
        return False
    lowered = raw_url[:8].lower()
    return lowered.startswith("http://") or lowered.startswith("https://")
