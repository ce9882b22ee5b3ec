from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_app_settings, get_query_service
from src.config import Settings
from src.news.schemas.responses import TipsListResponse
from src.news.services.news_service import NewsQueryService

router = APIRouter()


@router.get("/tips/{category}", response_model=TipsListResponse)
async def get_tips_list(
    category: str,
    page: int = Query(1, description="1-based page number"),
    limit: Optional[int] = Query(None, description="Tips per page"),
    query_service: NewsQueryService = Depends(get_query_service),
    settings: Settings = Depends(get_app_settings)
):
    """Get community tips for a category, most recently stored first"""
    limit = limit if limit is not None else settings.default_tips_page_size
    return query_service.list_tips(category, page=page, limit=limit)
