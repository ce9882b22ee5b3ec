import pytest
from datetime import datetime, timezone
from unittest.mock import patch, MagicMock, AsyncMock

import httpx
from bs4 import BeautifulSoup

from src.news.categories import Category
from src.news.services.mappers import DevToMapper, NewsApiMapper, resolve_link
from src.news.services.sources.devto_adapter import DevToScraperAdapter
from src.news.services.sources.newsapi_adapter import NewsApiAdapter


DEV_PAGE = """
<html><body>
  <div class="crayons-story">
    <h2 class="crayons-story__title"><a href="/x/y">Building APIs in Accra</a></h2>
    <div class="crayons-story__meta"><a href="/ama">Ama Mensah</a><a href="/org">Org</a></div>
    <div class="crayons-story__snippet">  Lessons   learned   </div>
  </div>
  <div class="crayons-story">
    <h2 class="crayons-story__title">No link here</h2>
  </div>
  <div class="crayons-story">
    <h2 class="crayons-story__title"><a href="https://example.org/post">External post</a></h2>
  </div>
</body></html>
"""


async def _collect(iterator):
    return [item async for item in iterator]


def _response(text="", json_data=None):
    response = MagicMock(spec=httpx.Response)
    response.status_code = 200
    response.text = text
    response.json = MagicMock(return_value=json_data)
    response.raise_for_status = MagicMock()
    return response


class TestLinkResolution:
    def test_relative_link_resolves_against_base(self):
        assert resolve_link("/x/y", "https://dev.to") == "https://dev.to/x/y"

    def test_absolute_link_is_kept(self):
        assert resolve_link("https://example.org/a", "https://dev.to") == "https://example.org/a"

    @pytest.mark.parametrize("href", [None, "", "   "])
    def test_missing_link(self, href):
        assert resolve_link(href, "https://dev.to") is None

    def test_non_http_link_is_rejected(self):
        assert resolve_link("javascript:void(0)", "https://dev.to") is None


class TestDevToMapper:
    def test_maps_story_block(self):
        block = BeautifulSoup(DEV_PAGE, "html.parser").select(".crayons-story")[0]

        tip = DevToMapper("https://dev.to").map_entry(block, "ghana")

        assert tip.title == "Building APIs in Accra"
        assert tip.url == "https://dev.to/x/y"
        assert tip.author == "Ama Mensah"
        assert tip.content == "Lessons learned"
        assert tip.source == "DEV Community"
        assert tip.category == "ghana"

    def test_block_without_link_is_skipped(self):
        block = BeautifulSoup(DEV_PAGE, "html.parser").select(".crayons-story")[1]
        assert DevToMapper().map_entry(block, "ghana") is None


class TestNewsApiMapper:
    def test_maps_entry(self):
        article = NewsApiMapper().map_entry(
            {
                "title": "New AI breakthrough announced",
                "description": "<p>Researchers   unveiled a model</p>",
                "url": "https://news.example.com/ai",
                "source": {"id": None, "name": "TechCrunch"},
                "publishedAt": "2024-05-01T10:30:00Z",
            },
            "world",
        )

        assert article.source == "TechCrunch"
        assert article.description == "Researchers unveiled a model"
        assert article.published_at == datetime(2024, 5, 1, 10, 30, 0)
        assert article.category == "world"

    @pytest.mark.parametrize("entry", [
        {"title": "", "url": "https://a.example"},
        {"title": "No url"},
        "not-a-dict",
    ])
    def test_unusable_entries(self, entry):
        assert NewsApiMapper().map_entry(entry, "world") is None

    def test_non_string_fields_are_treated_as_missing(self):
        mapper = NewsApiMapper()

        assert mapper.map_entry({"title": "AI one", "url": 123}, "world") is None

        article = mapper.map_entry(
            {"title": "AI two", "url": "https://x/2", "description": 7, "source": {"name": None}, "publishedAt": 1714559400},
            "world",
        )
        assert article.description is None
        assert article.source == "Unknown"
        assert isinstance(article.published_at, datetime)

    def test_unparsable_date_falls_back_to_now(self):
        before = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
        parsed = NewsApiMapper.parse_published_at("yesterday-ish")
        assert parsed >= before


class TestDevToScraperAdapter:
    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_yields_only_linked_blocks(self, mock_client):
        mock_get = AsyncMock(return_value=_response(text=DEV_PAGE))
        mock_client.return_value.__aenter__.return_value.get = mock_get

        adapter = DevToScraperAdapter(base_url="https://dev.to", user_agent="TechTipsBot/1.0")
        tips = await _collect(adapter.fetch(Category.GHANA))

        # two pages per category, two usable blocks per page
        assert len(tips) == 4
        assert {tip.url for tip in tips} == {"https://dev.to/x/y", "https://example.org/post"}
        assert mock_get.await_count == 2
        requested = [call.args[0] for call in mock_get.await_args_list]
        assert requested == ["https://dev.to/t/ghana", "https://dev.to/search?q=ghana+tech"]

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_sends_custom_user_agent(self, mock_client):
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(return_value=_response(text=""))

        adapter = DevToScraperAdapter(user_agent="TechTipsBot/1.0")
        await _collect(adapter.fetch(Category.WORLD))

        assert mock_client.call_args.kwargs["headers"] == {"User-Agent": "TechTipsBot/1.0"}

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_failed_page_does_not_stop_next_page(self, mock_client):
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            side_effect=[httpx.ConnectError("boom"), _response(text=DEV_PAGE)]
        )

        tips = await _collect(DevToScraperAdapter().fetch(Category.AFRICA))

        assert len(tips) == 2


class TestNewsApiAdapter:
    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_queries_category_expression(self, mock_client):
        payload = {
            "status": "ok",
            "articles": [
                {"title": "Fintech startup raises", "url": "https://a.example/1", "source": {"name": "Quartz"}},
                {"title": "", "url": "https://a.example/2", "source": {"name": "Quartz"}},
            ],
        }
        mock_get = AsyncMock(return_value=_response(json_data=payload))
        mock_client.return_value.__aenter__.return_value.get = mock_get

        adapter = NewsApiAdapter(api_key="secret", endpoint="https://newsapi.org/v2/everything")
        articles = await _collect(adapter.fetch(Category.AFRICA))

        assert [a.title for a in articles] == ["Fintech startup raises"]
        params = mock_get.await_args.kwargs["params"]
        assert params["q"] == "technology AND Africa NOT Ghana"
        assert params["sortBy"] == "publishedAt"
        assert params["apiKey"] == "secret"

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_network_error_yields_nothing(self, mock_client):
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            side_effect=httpx.TimeoutException("Request timeout")
        )

        articles = await _collect(NewsApiAdapter(api_key="secret").fetch(Category.WORLD))

        assert articles == []

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_provider_error_payload_yields_nothing(self, mock_client):
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=_response(json_data={"status": "error", "code": "apiKeyInvalid"})
        )

        articles = await _collect(NewsApiAdapter(api_key="bad").fetch(Category.WORLD))

        assert articles == []

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_missing_key_skips_request(self, mock_client):
        articles = await _collect(NewsApiAdapter(api_key=None).fetch(Category.WORLD))

        assert articles == []
        mock_client.assert_not_called()

    @patch("httpx.AsyncClient")
    @pytest.mark.asyncio
    async def test_malformed_entry_does_not_drop_rest_of_batch(self, mock_client):
        payload = {
            "status": "ok",
            "articles": [
                {"title": "AI one", "url": 123, "publishedAt": "2024-05-01T10:30:00Z"},
                {"title": "AI two", "url": "https://x/2", "publishedAt": ["2024-05-01"]},
            ],
        }
        mock_client.return_value.__aenter__.return_value.get = AsyncMock(
            return_value=_response(json_data=payload)
        )

        articles = await _collect(NewsApiAdapter(api_key="secret").fetch(Category.WORLD))

        assert [a.title for a in articles] == ["AI two"]
