"""Tests for the podfeed JSON API endpoints."""
from unittest.mock import patch

import pytest

from conftest import SAMPLE_FEED
from podfeed.config import Settings
from podfeed.core.mapper import parse_feed
from podfeed.errors import FetchTimeout, HttpStatusError, NetworkError, StructureError


def _feed_with_episodes(count: int) -> str:
    items = "".join(
        f'<item><guid>ep-{i}</guid><title>Episode {i}</title>'
        f'<enclosure url="https://cdn.example.com/{i}.mp3"/>'
        f"<pubDate>Mon, 01 Jan 2024 00:{i % 60:02d}:00 +0000</pubDate></item>"
        for i in range(count)
    )
    return f"<rss><channel><title>Big</title>{items}</channel></rss>"


@pytest.fixture
def app(test_settings):
    from podfeed.web.app import create_app

    application = create_app(settings=test_settings)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_load():
    with patch("podfeed.web.app.load_feed") as m:
        m.return_value = parse_feed(SAMPLE_FEED)
        yield m


# ---------------------------------------------------------------------------
# Health, routing, CORS
# ---------------------------------------------------------------------------

class TestHealthAndRouting:
    def test_health_endpoint(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.get_json()
        assert data["status"] == "ok"
        assert "time" in data
        assert data["version"] == "0.1.0"

    def test_unknown_route_returns_envelope(self, client):
        r = client.get("/api/nope")
        assert r.status_code == 404
        data = r.get_json()
        assert data["success"] is False
        assert data["error"] == "Route not found"
        assert "timestamp" in data

    @pytest.mark.parametrize("method", ["post", "put", "delete"])
    def test_non_get_is_405(self, client, mock_load, method):
        r = getattr(client, method)("/api/episodes")
        assert r.status_code == 405
        data = r.get_json()
        assert data["success"] is False
        assert data["error"] == "Method not allowed"
        mock_load.assert_not_called()

    def test_cors_headers_on_success(self, client, mock_load):
        r = client.get("/api/episodes")
        assert r.headers["Access-Control-Allow-Origin"] == "*"
        assert "GET" in r.headers["Access-Control-Allow-Methods"]
        assert "Content-Type" in r.headers["Access-Control-Allow-Headers"]

    def test_cors_headers_on_error(self, client):
        r = client.post("/api/podcast-info")
        assert r.headers["Access-Control-Allow-Origin"] == "*"

    def test_options_preflight(self, client, mock_load):
        r = client.options("/api/episodes")
        assert r.status_code == 200
        assert r.headers["Access-Control-Allow-Origin"] == "*"
        mock_load.assert_not_called()

    def test_custom_cors_origin(self, mock_load):
        from podfeed.web.app import create_app

        settings = Settings(
            _env_file=None,
            rss_feed_url="https://feeds.example.com/weird.xml",
            cors_origin="https://itgetsweird.example.com",
        )
        r = create_app(settings=settings).test_client().get("/api/episodes")
        assert r.headers["Access-Control-Allow-Origin"] == "https://itgetsweird.example.com"


# ---------------------------------------------------------------------------
# Episode list
# ---------------------------------------------------------------------------

class TestEpisodesEndpoint:
    def test_returns_envelope(self, client, mock_load):
        r = client.get("/api/episodes")
        assert r.status_code == 200
        data = r.get_json()
        assert data["success"] is True
        assert "timestamp" in data
        assert "error" not in data
        assert [ep["id"] for ep in data["data"]] == ["episode-1", "ep-101", "ep-099"]

    def test_episode_json_contract(self, client, mock_load):
        data = client.get("/api/episodes").get_json()
        ep = next(e for e in data["data"] if e["id"] == "ep-101")
        assert ep["audioUrl"] == "https://cdn.example.com/ep101.mp3"
        assert ep["publishDate"].startswith("2024-06-10T10:00:00")
        assert ep["duration"] == "1:02:05"
        assert ep["episodeNumber"] == 101
        assert ep["season"] == 2
        assert ep["imageUrl"] == "https://cdn.example.com/ep101.jpg"
        assert ep["keywords"] == ["lighthouse", "ghosts", "maine"]
        assert ep["explicit"] is True

    def test_absent_optional_fields_are_omitted(self, client, mock_load):
        data = client.get("/api/episodes").get_json()
        ep = next(e for e in data["data"] if e["id"] == "episode-1")
        assert "episodeNumber" not in ep
        assert "season" not in ep
        assert "keywords" not in ep
        assert "subtitle" not in ep

    def test_default_pagination(self, client, mock_load):
        data = client.get("/api/episodes").get_json()
        assert data["pagination"] == {"total": 3, "limit": 10, "offset": 0, "hasMore": False}

    def test_limit_and_offset(self, client, mock_load):
        data = client.get("/api/episodes?limit=1&offset=1").get_json()
        assert [ep["id"] for ep in data["data"]] == ["ep-101"]
        assert data["pagination"] == {"total": 3, "limit": 1, "offset": 1, "hasMore": True}

    def test_limit_clamped_to_100(self, client, mock_load):
        mock_load.return_value = parse_feed(_feed_with_episodes(150))
        data = client.get("/api/episodes?limit=200").get_json()
        assert data["pagination"]["limit"] == 100
        assert len(data["data"]) == 100
        assert data["pagination"]["total"] == 150
        assert data["pagination"]["hasMore"] is True

    def test_invalid_query_values_use_defaults(self, client, mock_load):
        data = client.get("/api/episodes?limit=abc&offset=-4").get_json()
        assert data["pagination"]["limit"] == 10
        assert data["pagination"]["offset"] == 0

    def test_underscored_limit_is_not_a_number(self, client, mock_load):
        data = client.get("/api/episodes?limit=1_0").get_json()
        assert data["pagination"]["limit"] == 10
        assert len(data["data"]) == 3

    def test_zero_limit_clamped_to_one(self, client, mock_load):
        data = client.get("/api/episodes?limit=0").get_json()
        assert data["pagination"]["limit"] == 1
        assert len(data["data"]) == 1

    def test_offset_past_end(self, client, mock_load):
        data = client.get("/api/episodes?offset=50").get_json()
        assert data["data"] == []
        assert data["pagination"]["hasMore"] is False

    def test_cache_control(self, client, mock_load):
        r = client.get("/api/episodes")
        assert r.headers["Cache-Control"] == "public, max-age=300"


# ---------------------------------------------------------------------------
# Podcast info
# ---------------------------------------------------------------------------

class TestPodcastInfoEndpoint:
    def test_returns_podcast(self, client, mock_load):
        r = client.get("/api/podcast-info")
        assert r.status_code == 200
        data = r.get_json()
        assert data["success"] is True
        podcast = data["data"]
        assert podcast["title"] == "It Gets Weird"
        assert podcast["imageUrl"] == "https://cdn.example.com/show.jpg"
        assert podcast["author"] == "Weird Hosts"
        assert podcast["lastBuildDate"].startswith("2024-06-18T08:30:00")
        assert podcast["email"] == "hosts@example.com"
        assert "pagination" not in data

    def test_cache_control_is_longer(self, client, mock_load):
        r = client.get("/api/podcast-info")
        assert r.headers["Cache-Control"] == "public, max-age=600"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_missing_feed_url(self, mock_load):
        from podfeed.web.app import create_app

        app = create_app(settings=Settings(_env_file=None, rss_feed_url=""))
        for path in ("/api/episodes", "/api/podcast-info"):
            r = app.test_client().get(path)
            assert r.status_code == 500
            data = r.get_json()
            assert data["success"] is False
            assert data["error"] == "RSS feed URL not configured"
        mock_load.assert_not_called()

    def test_structure_error_is_500(self, client, mock_load):
        mock_load.side_effect = StructureError()
        r = client.get("/api/episodes")
        assert r.status_code == 500
        data = r.get_json()
        assert data["success"] is False
        assert data["error"] == "Failed to fetch episodes"
        assert "no channel found" in data["details"]
        assert "Cache-Control" not in r.headers

    def test_upstream_http_error_is_500(self, client, mock_load):
        mock_load.side_effect = HttpStatusError(404, "Not Found")
        r = client.get("/api/podcast-info")
        assert r.status_code == 500
        data = r.get_json()
        assert data["error"] == "Failed to fetch podcast information"
        assert data["details"] == "HTTP 404: Not Found"

    def test_timeout_is_503(self, client, mock_load):
        mock_load.side_effect = FetchTimeout(10)
        r = client.get("/api/episodes")
        assert r.status_code == 503
        assert r.get_json()["details"] == "Request timeout after 10 seconds"

    def test_network_error_is_503(self, client, mock_load):
        mock_load.side_effect = NetworkError("connection refused")
        r = client.get("/api/podcast-info")
        assert r.status_code == 503

    def test_generic_failure_is_500(self, client, mock_load):
        mock_load.side_effect = RuntimeError("boom")
        r = client.get("/api/episodes")
        assert r.status_code == 500
        assert r.get_json()["details"] == "boom"


# ---------------------------------------------------------------------------
# Server-side feed cache
# ---------------------------------------------------------------------------

class TestFeedCaching:
    def test_endpoints_share_one_fetch(self, client, mock_load):
        client.get("/api/episodes")
        client.get("/api/podcast-info")
        client.get("/api/episodes?offset=1")
        assert mock_load.call_count == 1

    def test_failures_are_not_cached(self, client, mock_load):
        result = mock_load.return_value
        mock_load.side_effect = [NetworkError("down"), result]
        assert client.get("/api/episodes").status_code == 503
        assert client.get("/api/episodes").status_code == 200
        assert mock_load.call_count == 2

    def test_ttl_zero_disables_cache(self, mock_load):
        from podfeed.web.app import create_app

        settings = Settings(
            _env_file=None,
            rss_feed_url="https://feeds.example.com/weird.xml",
            feed_cache_ttl_seconds=0,
        )
        client = create_app(settings=settings).test_client()
        client.get("/api/episodes")
        client.get("/api/episodes")
        assert mock_load.call_count == 2
