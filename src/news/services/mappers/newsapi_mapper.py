"""
NewsAPI mapper
Maps entries of the NewsAPI ``/v2/everything`` response to article candidates
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from .base_mapper import BaseMapper
from ..sources.base import ArticleCandidate

logger = structlog.get_logger(__name__)

UNKNOWN_SOURCE = "Unknown"


def _text(value: Any) -> str:
    # Provider fields are loosely typed; anything but a string counts as missing
    return value if isinstance(value, str) else ""


class NewsApiMapper(BaseMapper):
    """Mapper for NewsAPI articles"""

    def __init__(self):
        super().__init__("NewsAPI")

    def map_entry(self, raw_data: Dict[str, Any], category: str) -> Optional[ArticleCandidate]:
        """
        Map a NewsAPI article entry

        Entries without a title or URL are dropped. ``source.name`` names the
        outlet; ``publishedAt`` falls back to the fetch time when missing.
        """
        if not isinstance(raw_data, dict):
            return None

        title = self.clean_title(_text(raw_data.get("title")))
        url = _text(raw_data.get("url")).strip()
        if not title or not url:
            return None

        return ArticleCandidate(
            title=title,
            url=url,
            source=self._source_name(raw_data.get("source")),
            category=category,
            description=self.clean_content(_text(raw_data.get("description"))),
            published_at=self.parse_published_at(raw_data.get("publishedAt")),
        )

    def _source_name(self, source: Any) -> str:
        if isinstance(source, dict):
            name = _text(source.get("name")).strip()
            if name:
                return name
        return UNKNOWN_SOURCE

    @staticmethod
    def parse_published_at(value: Any) -> datetime:
        """ISO-8601 timestamp as naive UTC"""
        if value and isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
                if parsed.tzinfo is not None:
                    parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
                return parsed
            except (TypeError, ValueError):
                logger.warning("Unparsable publishedAt, using fetch time", value=value)
        elif value:
            logger.warning("Non-string publishedAt, using fetch time", value=repr(value))
        return datetime.now(timezone.utc).replace(tzinfo=None)
