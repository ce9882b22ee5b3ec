import asyncio
import pytest
from datetime import datetime
from unittest.mock import MagicMock

from src.exceptions import PersistenceError
from src.main import start_background_ingestion, stop_background_ingestion
from src.news.services.ingestion_service import IngestionReport
from src.news.services.news_service import NewsQueryService
from src.repositories.content_repository import EntityKind


def _seed_articles(repository, count, category="world"):
    for i in range(count):
        repository.upsert(EntityKind.ARTICLE, {
            "title": f"Tech story {i}",
            "source": "Wired",
            "category": category,
            "url": f"https://wired.example/{i}",
            "description": "software",
            "published_at": datetime(2024, 1, 1 + i, 9, 0, 0),
        })


@pytest.mark.asyncio
async def test_liveness(async_client):
    response = await async_client.get("/")
    assert response.status_code == 200
    assert response.text == "API working"


@pytest.mark.asyncio
async def test_health(async_client):
    response = await async_client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


class TestNewsEndpoint:
    @pytest.mark.asyncio
    async def test_paginated_news(self, async_client, repository):
        _seed_articles(repository, 5)

        response = await async_client.get("/api/news/world", params={"page": 2, "limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["currentPage"] == 2
        assert data["totalPages"] == 3
        assert data["totalArticles"] == 5
        assert [a["title"] for a in data["articles"]] == ["Tech story 2", "Tech story 1"]
        assert data["articles"][0]["publishedAt"].startswith("2024-01-03")
        assert "createdAt" in data["articles"][0]

    @pytest.mark.asyncio
    async def test_last_page_and_past_the_end(self, async_client, repository):
        _seed_articles(repository, 5)

        last = (await async_client.get("/api/news/world", params={"page": 3, "limit": 2})).json()
        beyond = await async_client.get("/api/news/world", params={"page": 4, "limit": 2})

        assert len(last["articles"]) == 1
        assert beyond.status_code == 200
        assert beyond.json()["articles"] == []

    @pytest.mark.asyncio
    async def test_default_page_size(self, async_client, repository):
        _seed_articles(repository, 25)

        data = (await async_client.get("/api/news/world")).json()

        assert data["currentPage"] == 1
        assert len(data["articles"]) == 20
        assert data["totalPages"] == 2

    @pytest.mark.asyncio
    async def test_invalid_category_never_reaches_store(self, app, async_client):
        store = MagicMock()
        app.state.query_service = NewsQueryService(store)

        response = await async_client.get("/api/news/mars")

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid category"}
        assert store.find.call_count == 0

    @pytest.mark.asyncio
    async def test_non_positive_page_is_rejected(self, async_client):
        response = await async_client.get("/api/news/world", params={"page": 0})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, app, async_client):
        store = MagicMock()
        store.find.side_effect = PersistenceError("connection lost")
        app.state.query_service = NewsQueryService(store)

        response = await async_client.get("/api/news/ghana")

        assert response.status_code == 500
        assert response.json() == {"message": "Error fetching news"}

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, app, async_client, repository):
        store = MagicMock(wraps=repository)
        app.state.query_service = NewsQueryService(store, max_page_size=5)

        await async_client.get("/api/news/world", params={"limit": 500})

        assert store.find.call_args.args[3] == 5


class TestTipsEndpoint:
    @pytest.mark.asyncio
    async def test_tips_listing(self, async_client, repository):
        for title in ("Older tip", "Newer tip"):
            repository.upsert(EntityKind.TIP, {
                "title": title,
                "source": "DEV Community",
                "category": "africa",
                "url": "https://dev.to/a/b",
                "content": "body",
                "author": "Zainab",
            })

        response = await async_client.get("/api/tips/africa")

        assert response.status_code == 200
        data = response.json()
        assert data["totalTips"] == 2
        assert data["totalPages"] == 1
        assert [t["title"] for t in data["tips"]] == ["Newer tip", "Older tip"]
        assert data["tips"][0]["author"] == "Zainab"

    @pytest.mark.asyncio
    async def test_invalid_category(self, async_client):
        response = await async_client.get("/api/tips/mars")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_store_failure_message(self, app, async_client):
        store = MagicMock()
        store.find.side_effect = PersistenceError("connection lost")
        app.state.query_service = NewsQueryService(store)

        response = await async_client.get("/api/tips/world")

        assert response.status_code == 500
        assert response.json() == {"message": "Error fetching tips"}


@pytest.mark.asyncio
async def test_categories(async_client, repository):
    _seed_articles(repository, 2, category="ghana")

    data = (await async_client.get("/api/categories")).json()

    by_id = {c["id"]: c for c in data["categories"]}
    assert set(by_id) == {"ghana", "africa", "world"}
    assert by_id["ghana"]["totalArticles"] == 2
    assert by_id["ghana"]["badgeColor"] == "green"


class TestRefreshEndpoint:
    @pytest.mark.asyncio
    async def test_refresh_runs_ingestion(self, async_client, mock_orchestrator):
        mock_orchestrator.run.return_value = IngestionReport(
            run_id="abc", trigger="on_demand", started_at=datetime(2024, 1, 1), finished_at=datetime(2024, 1, 1)
        )

        response = await async_client.get("/api/refresh")

        assert response.status_code == 200
        assert response.json()["message"] == "Data refresh completed"
        mock_orchestrator.run.assert_awaited_once_with(trigger="on_demand")

    @pytest.mark.asyncio
    async def test_refresh_failure_is_500(self, async_client, mock_orchestrator):
        mock_orchestrator.run.side_effect = RuntimeError("unexpected")

        response = await async_client.get("/api/refresh")

        assert response.status_code == 500
        assert response.json() == {"message": "Error refreshing data"}


class TestBackgroundIngestionShutdown:
    @pytest.mark.asyncio
    async def test_pending_startup_run_is_cancelled_and_awaited(self, app, test_settings, mock_orchestrator):
        async def never_finishes(trigger):
            await asyncio.sleep(10)

        mock_orchestrator.run.side_effect = never_finishes
        settings = test_settings.model_copy(update={"ingest_on_startup": True})

        startup_run = start_background_ingestion(app, settings)
        await asyncio.sleep(0.01)
        await stop_background_ingestion(app, startup_run)

        assert startup_run.cancelled()
        assert app.state.cancellation_token.cancelled

    @pytest.mark.asyncio
    async def test_failed_startup_run_is_collected(self, app, test_settings, mock_orchestrator):
        mock_orchestrator.run.side_effect = RuntimeError("upstream down")
        settings = test_settings.model_copy(update={"ingest_on_startup": True})

        startup_run = start_background_ingestion(app, settings)
        await asyncio.sleep(0.01)
        await stop_background_ingestion(app, startup_run)

        assert startup_run.done()
        assert isinstance(startup_run.exception(), RuntimeError)

    @pytest.mark.asyncio
    async def test_no_startup_run(self, app):
        await stop_background_ingestion(app, None)

        assert app.state.cancellation_token.cancelled
