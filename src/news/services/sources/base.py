"""
Base class for content source adapters
Each adapter pulls one provider and yields normalized candidates
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, Optional, Union

import httpx

from ...categories import Category
from ....exceptions import AdapterError
from ....repositories.content_repository import EntityKind



@dataclass
class ArticleCandidate:
    """News article as fetched, before classification and persistence"""
    title: str
    url: str
    source: str
    category: str
    description: Optional[str] = None
    published_at: Optional[datetime] = None

    kind = EntityKind.ARTICLE

    def to_record(self) -> dict:
        return {
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "category": self.category,
            "description": self.description,
            "published_at": self.published_at,
        }


@dataclass
class TipCandidate:
    """Community tip as scraped, before classification and persistence"""
    title: str
    url: str
    source: str
    category: str
    content: Optional[str] = None
    author: Optional[str] = None

    kind = EntityKind.TIP

    def to_record(self) -> dict:
        return {
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "category": self.category,
            "content": self.content,
            "author": self.author,
        }


Candidate = Union[ArticleCandidate, TipCandidate]


class SourceAdapter(ABC):
    """Base adapter for content sources"""

    entity_kind: EntityKind

    def __init__(self, name: str, base_url: str, timeout: float = 15.0, headers: Optional[dict] = None):
        self.name = name
        self.base_url = base_url
        self.timeout = timeout
        self.headers = headers or {}

    @abstractmethod
    def fetch(self, category: Category) -> AsyncIterator[Candidate]:
        """
        Pull candidates for one category. Every call is a fresh pull; failures
        are logged and end the sequence early instead of raising.
        """

    def create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers=self.headers, follow_redirects=True)

    async def get(self, client: httpx.AsyncClient, url: str, **kwargs) -> httpx.Response:
        """GET with provider errors normalized to AdapterError"""
        try:
            response = await client.get(url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise AdapterError(self.name, f"request to {url} timed out") from e
        except httpx.HTTPStatusError as e:
            raise AdapterError(self.name, f"HTTP {e.response.status_code} from {url}") from e
        except httpx.HTTPError as e:
            raise AdapterError(self.name, f"request to {url} failed: {e}") from e
