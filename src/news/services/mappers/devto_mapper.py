"""
DEV Community mapper
Maps ``.crayons-story`` blocks of a DEV listing page to tip candidates
"""

from typing import Optional
from urllib.parse import urljoin

from bs4 import Tag

from .base_mapper import BaseMapper
from ..sources.base import TipCandidate

STORY_SELECTOR = ".crayons-story"
TITLE_SELECTOR = ".crayons-story__title"
SNIPPET_SELECTOR = ".crayons-story__snippet"
AUTHOR_SELECTOR = ".crayons-story__meta a"
LINK_SELECTOR = ".crayons-story__title a"


def resolve_link(href: Optional[str], base_url: str) -> Optional[str]:
    """Absolute http(s) URL for ``href`` against ``base_url``, or None"""
    if not href or not href.strip():
        return None
    url = urljoin(base_url, href.strip())
    if not url.startswith(("http://", "https://")):
        return None
    return url


class DevToMapper(BaseMapper):
    """Mapper for DEV Community story cards"""

    def __init__(self, base_url: str = "https://dev.to"):
        super().__init__("DEV Community")
        self.base_url = base_url

    def map_entry(self, raw_data: Tag, category: str) -> Optional[TipCandidate]:
        url = resolve_link(self._attr(raw_data, LINK_SELECTOR, "href"), self.base_url)
        if not url:
            return None

        title = self.clean_title(self._text(raw_data, TITLE_SELECTOR))
        if not title:
            return None

        return TipCandidate(
            title=title,
            url=url,
            source=self.source_name,
            category=category,
            content=self.clean_content(self._text(raw_data, SNIPPET_SELECTOR)),
            author=self._text(raw_data, AUTHOR_SELECTOR) or None,
        )

    @staticmethod
    def _text(block: Tag, selector: str) -> str:
        node = block.select_one(selector)
        return node.get_text(strip=True) if node else ""

    @staticmethod
    def _attr(block: Tag, selector: str, attr: str) -> Optional[str]:
        node = block.select_one(selector)
        return node.get(attr) if node else None
