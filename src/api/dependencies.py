from fastapi import Request
from sqlalchemy.engine import Engine

from ..config import Settings
from ..core.scheduler import CancellationToken, Scheduler
from ..news.services.ingestion_service import IngestionOrchestrator
from ..news.services.news_service import NewsQueryService


# Collaborators are built once in the application lifespan and kept on app.state

def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_query_service(request: Request) -> NewsQueryService:
    return request.app.state.query_service


def get_orchestrator(request: Request) -> IngestionOrchestrator:
    return request.app.state.orchestrator


def get_scheduler(request: Request) -> Scheduler:
    return request.app.state.scheduler


def get_cancellation_token(request: Request) -> CancellationToken:
    return request.app.state.cancellation_token


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
