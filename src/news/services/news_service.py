"""
Read-only query service for API endpoints
Validates the request, reads one page from the store and shapes the response
"""

from ..categories import CATEGORY_PROFILES, parse_category
from ..schemas.responses import (
    ArticleResponse,
    CategoriesListResponse,
    CategoryResponse,
    NewsListResponse,
    TipResponse,
    TipsListResponse,
)
from ...exceptions import ValidationError
from ...repositories.content_repository import ContentRepository, EntityKind, Page


class NewsQueryService:
    """Category-filtered, paginated reads over articles and tips"""

    def __init__(self, repository: ContentRepository, max_page_size: int = 100):
        self.repository = repository
        self.max_page_size = max_page_size

    def list_articles(self, category: str, page: int = 1, limit: int = 20) -> NewsListResponse:
        result = self._read(EntityKind.ARTICLE, category, page, limit)
        return NewsListResponse(
            articles=[ArticleResponse.model_validate(item) for item in result.items],
            current_page=result.page,
            total_pages=result.total_pages,
            total_articles=result.total,
        )

    def list_tips(self, category: str, page: int = 1, limit: int = 10) -> TipsListResponse:
        result = self._read(EntityKind.TIP, category, page, limit)
        return TipsListResponse(
            tips=[TipResponse.model_validate(item) for item in result.items],
            current_page=result.page,
            total_pages=result.total_pages,
            total_tips=result.total,
        )

    def list_categories(self) -> CategoriesListResponse:
        article_counts = self.repository.category_counts(EntityKind.ARTICLE)
        tip_counts = self.repository.category_counts(EntityKind.TIP)
        return CategoriesListResponse(
            categories=[
                CategoryResponse(
                    id=category.value,
                    label=profile.label,
                    badge_color=profile.badge_color,
                    total_articles=article_counts.get(category.value, 0),
                    total_tips=tip_counts.get(category.value, 0),
                )
                for category, profile in CATEGORY_PROFILES.items()
            ]
        )

    def _read(self, kind: EntityKind, category: str, page: int, limit: int) -> Page:
        # Reject before the store sees the request
        parsed = parse_category(category)
        if page < 1:
            raise ValidationError("page must be a positive integer")
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        return self.repository.find(kind, parsed, page, min(limit, self.max_page_size))
