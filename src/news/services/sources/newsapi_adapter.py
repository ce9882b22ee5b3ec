"""
NewsAPI adapter
Runs one search per category against the NewsAPI ``everything`` endpoint
"""

from typing import AsyncIterator, Optional

import structlog

from .base import SourceAdapter, ArticleCandidate
from ..mappers.newsapi_mapper import NewsApiMapper
from ...categories import Category, get_profile
from ....exceptions import AdapterError
from ....repositories.content_repository import EntityKind

logger = structlog.get_logger(__name__)


class NewsApiAdapter(SourceAdapter):
    """Adapter for the NewsAPI structured search API"""

    entity_kind = EntityKind.ARTICLE

    def __init__(self, api_key: Optional[str], endpoint: str = "https://newsapi.org/v2/everything", timeout: float = 15.0):
        super().__init__("NewsAPI", endpoint, timeout=timeout)
        self.api_key = api_key
        self.mapper = NewsApiMapper()

    def build_params(self, category: Category) -> dict:
        return {
            "q": get_profile(category).news_query,
            "sortBy": "publishedAt",
            "apiKey": self.api_key,
        }

    async def fetch(self, category: Category) -> AsyncIterator[ArticleCandidate]:
        if not self.api_key:
            logger.warning("NewsAPI key not configured, skipping", category=category.value)
            return

        try:
            async with self.create_client() as client:
                response = await self.get(client, self.base_url, params=self.build_params(category))
                entries = self._parse_entries(response)
        except AdapterError as e:
            logger.error("Error fetching news articles", source=self.name, category=category.value, error=str(e))
            return

        logger.info("Fetched news entries", source=self.name, category=category.value, count=len(entries))

        for entry in entries:
            candidate = self.mapper.map_entry(entry, category.value)
            if candidate is not None:
                yield candidate

    def _parse_entries(self, response) -> list:
        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(self.name, f"invalid JSON body: {e}") from e

        if not isinstance(data, dict):
            raise AdapterError(self.name, "unexpected response shape")
        if data.get("status") == "error":
            raise AdapterError(self.name, data.get("message") or data.get("code") or "provider error")

        articles = data.get("articles") or []
        if not isinstance(articles, list):
            raise AdapterError(self.name, "'articles' is not a list")
        return articles
