from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_app_settings, get_query_service
from src.config import Settings
from src.news.schemas.responses import NewsListResponse, CategoriesListResponse
from src.news.services.news_service import NewsQueryService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/news/{category}", response_model=NewsListResponse)
async def get_news_list(
    category: str,
    page: int = Query(1, description="1-based page number"),
    limit: Optional[int] = Query(None, description="Articles per page"),
    query_service: NewsQueryService = Depends(get_query_service),
    settings: Settings = Depends(get_app_settings)
):
    """Get news articles for a category, newest first"""
    limit = limit if limit is not None else settings.default_news_page_size
    return query_service.list_articles(category, page=page, limit=limit)


@router.get("/categories", response_model=CategoriesListResponse)
async def get_categories(query_service: NewsQueryService = Depends(get_query_service)):
    """Get all categories with display metadata and stored counts"""
    return query_service.list_categories()
