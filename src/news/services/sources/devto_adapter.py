"""
DEV Community scraper
Fetches the configured listing pages per category and extracts story cards
"""

from typing import AsyncIterator, List

import structlog
from bs4 import BeautifulSoup

from .base import SourceAdapter, TipCandidate
from ..mappers.devto_mapper import DevToMapper, STORY_SELECTOR
from ...categories import Category, get_profile
from ....exceptions import AdapterError
from ....repositories.content_repository import EntityKind

logger = structlog.get_logger(__name__)


class DevToScraperAdapter(SourceAdapter):
    """Adapter for DEV Community listing pages"""

    entity_kind = EntityKind.TIP

    def __init__(self, base_url: str = "https://dev.to", user_agent: str = "TechTipsBot/1.0", timeout: float = 15.0):
        super().__init__("DEV Community", base_url, timeout=timeout, headers={"User-Agent": user_agent})
        self.mapper = DevToMapper(base_url)

    def page_urls(self, category: Category) -> List[str]:
        return [self.base_url.rstrip("/") + path for path in get_profile(category).tip_paths]

    async def fetch(self, category: Category) -> AsyncIterator[TipCandidate]:
        async with self.create_client() as client:
            for page_url in self.page_urls(category):
                try:
                    response = await self.get(client, page_url)
                    blocks = self.extract_blocks(response.text)
                except AdapterError as e:
                    logger.error("Error scraping tips", source=self.name, category=category.value, url=page_url, error=str(e))
                    continue

                logger.info("Scraped tip page", source=self.name, category=category.value, url=page_url, blocks=len(blocks))

                for block in blocks:
                    candidate = self.mapper.map_entry(block, category.value)
                    if candidate is not None:
                        yield candidate

    def extract_blocks(self, markup: str) -> list:
        try:
            soup = BeautifulSoup(markup, "html.parser")
        except Exception as e:
            raise AdapterError(self.name, f"unparsable page: {e}") from e
        return soup.select(STORY_SELECTOR)
