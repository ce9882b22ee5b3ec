"""News and tips API response schemas"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Serializes snake_case fields under the camelCase keys clients expect"""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# ============================================================================
# Records
# ============================================================================

class ArticleResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    url: str
    source: str
    category: str
    published_at: Optional[datetime] = Field(default=None, serialization_alias="publishedAt")
    created_at: datetime = Field(serialization_alias="createdAt")


class TipResponse(CamelModel):
    id: int
    title: str
    content: Optional[str] = None
    url: str
    author: Optional[str] = None
    source: str
    category: str
    created_at: datetime = Field(serialization_alias="createdAt")


# ============================================================================
# Paginated lists
# ============================================================================

class NewsListResponse(CamelModel):
    articles: List[ArticleResponse]
    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")
    total_articles: int = Field(serialization_alias="totalArticles")


class TipsListResponse(CamelModel):
    tips: List[TipResponse]
    current_page: int = Field(serialization_alias="currentPage")
    total_pages: int = Field(serialization_alias="totalPages")
    total_tips: int = Field(serialization_alias="totalTips")


# ============================================================================
# Categories & control
# ============================================================================

class CategoryResponse(CamelModel):
    id: str
    label: str
    badge_color: str = Field(serialization_alias="badgeColor")
    total_articles: int = Field(default=0, serialization_alias="totalArticles")
    total_tips: int = Field(default=0, serialization_alias="totalTips")


class CategoriesListResponse(CamelModel):
    categories: List[CategoryResponse]


class RefreshResponse(CamelModel):
    message: str
    report: Optional[Dict[str, object]] = None
