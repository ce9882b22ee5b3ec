import pytest
from unittest.mock import MagicMock, AsyncMock
from datetime import datetime

import httpx


@pytest.fixture
def test_settings():
    from src.config import Settings

    return Settings(
        database_url="sqlite:///:memory:",
        news_api_key="test-news-key",
        scheduler_enabled=False,
        ingest_on_startup=False,
        rate_limit_max_requests=1000,
        log_format="text",
    )


@pytest.fixture
def test_engine(tmp_path):
    from src.core.database import create_db_engine, create_tables, drop_tables

    # File-backed SQLite so store writes from executor threads get their own connections
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture
def repository(test_engine):
    from src.core.database import create_session_factory
    from src.repositories.content_repository import ContentRepository

    return ContentRepository(create_session_factory(test_engine))


@pytest.fixture
def make_article():
    from src.news.services.sources.base import ArticleCandidate

    def _make(title="New AI chip for developers", category="world", source="TechCrunch", **overrides):
        values = dict(
            title=title,
            url=f"https://example.com/{abs(hash(title))}",
            source=source,
            category=category,
            description="A software story",
            published_at=datetime(2024, 5, 1, 12, 0, 0),
        )
        values.update(overrides)
        return ArticleCandidate(**values)

    return _make


@pytest.fixture
def make_tip():
    from src.news.services.sources.base import TipCandidate

    def _make(title="Ten Python tricks", category="world", source="DEV Community", **overrides):
        values = dict(
            title=title,
            url=f"https://dev.to/someone/{abs(hash(title))}",
            source=source,
            category=category,
            content="Snippet",
            author="Ama",
        )
        values.update(overrides)
        return TipCandidate(**values)

    return _make


@pytest.fixture
def mock_orchestrator():
    from src.news.services.ingestion_service import RunState

    orchestrator = MagicMock()
    orchestrator.run = AsyncMock()
    orchestrator.state = RunState.IDLE
    return orchestrator


@pytest.fixture
def app(test_settings, test_engine, repository, mock_orchestrator):
    from src.main import create_application
    from src.core.scheduler import CancellationToken, Scheduler
    from src.news.services.news_service import NewsQueryService

    application = create_application(test_settings)
    application.state.engine = test_engine
    application.state.repository = repository
    application.state.query_service = NewsQueryService(repository, max_page_size=test_settings.max_page_size)
    application.state.orchestrator = mock_orchestrator
    application.state.scheduler = Scheduler()
    application.state.cancellation_token = CancellationToken()
    return application


@pytest.fixture
async def async_client(app):
    from httpx import AsyncClient, ASGITransport

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def mock_httpx_response():
    response = MagicMock(spec=httpx.Response)
    response.status_code = 200
    response.raise_for_status = MagicMock()
    return response
