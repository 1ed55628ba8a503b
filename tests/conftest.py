from datetime import datetime, timezone
from pathlib import Path

import pytest

from podfeed.config import Settings

FIXTURES = Path(__file__).parent / "fixtures"
SAMPLE_FEED = (FIXTURES / "sample_feed.xml").read_text(encoding="utf-8")

FIXED_NOW = datetime(2024, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


def rss(channel_body: str) -> str:
    """Wrap channel contents in a minimal RSS document with the usual namespaces."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"'
        ' xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd"'
        ' xmlns:content="http://purl.org/rss/1.0/modules/content/"'
        ' xmlns:media="http://search.yahoo.com/mrss/">'
        f"<channel><title>Test Podcast</title>{channel_body}</channel></rss>"
    )


@pytest.fixture
def sample_feed() -> str:
    return SAMPLE_FEED


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a feed URL and no .env loading."""
    return Settings(
        _env_file=None,
        rss_feed_url="https://feeds.example.com/weird.xml",
        feed_cache_ttl_seconds=300,
    )
