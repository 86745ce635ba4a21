"""HTML parser collecting image and video references from arbitrary pages."""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from . import MediaTriple, MediaType, is_absolute_http_url

LOGGER = logging.getLogger(__name__)


class MediaParser:
    """Extract absolute image and video URLs from a page in document order."""

    def parse(self, source_url: str, html: str | None) -> list[MediaTriple]:
        if not html or not html.strip():
            return []

        try:
            soup = BeautifulSoup(html, "html.parser")
        except ParserRejectedMarkup as exc:
            LOGGER.debug("Markup rejected for %s: %s", source_url, exc)
            return []

        triples: list[MediaTriple] = []
        for img in soup.find_all("img"):
            media_url = self._source_attribute(img)
            if media_url:
                triples.append(MediaTriple(source_url, media_url, MediaType.IMAGE))

        for source in soup.find_all("source"):
            if source.find_parent("video") is None:
                continue
            media_url = self._source_attribute(source)
            if media_url:
                triples.append(MediaTriple(source_url, media_url, MediaType.VIDEO))

        return triples

    @staticmethod
    def _source_attribute(element: Tag) -> str | None:
        raw_value = element.get("src")
        if not isinstance(raw_value, str):
            return None
        url = raw_value.strip()
        if not is_absolute_http_url(url):
            return None
        return url
