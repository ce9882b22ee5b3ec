from fastapi import APIRouter

from .endpoints import news, tips, refresh

api_router = APIRouter()

api_router.include_router(news.router, tags=["news"])
api_router.include_router(tips.router, tags=["tips"])
api_router.include_router(refresh.router, tags=["ingestion"])
