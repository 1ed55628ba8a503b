"""Feed mapping: generic XML tree -> PodcastInfo + sorted, valid Episodes."""

import logging
from datetime import datetime, timezone

from podfeed.config import Settings
from podfeed.core.extractors import (
    extract_attribute,
    extract_audio_url,
    extract_categories,
    extract_image_url,
    extract_text,
)
from podfeed.core.normalizers import (
    normalize_duration,
    parse_date,
    parse_explicit,
    parse_keywords,
    parse_positive_int,
    strip_html,
)
from podfeed.core.xml_tree import XmlNode, parse_xml
from podfeed.errors import StructureError
from podfeed.models.schemas import Episode, FeedResult, PodcastInfo
from podfeed.services.feed_service import fetch_feed

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _first_text(node: XmlNode, *tags: str) -> str:
    """Text of the first tag in *tags* that yields a non-empty value."""
    for tag in tags:
        text = extract_text(node.get(tag))
        if text:
            return text
    return ""


def find_channel(document: XmlNode) -> XmlNode:
    rss = document.first("rss")
    channel = rss.first("channel") if rss is not None else None
    if channel is None:
        raise StructureError()
    return channel


def build_podcast_info(channel: XmlNode, now: datetime) -> PodcastInfo:
    image_url = (
        extract_attribute(channel.get("itunes:image"), "href")
        or extract_image_url(channel.get("image"))
        or ""
    )
    owner = channel.first("itunes:owner")
    email = extract_text(owner.get("itunes:email")) if owner is not None else ""

    return PodcastInfo(
        title=extract_text(channel.get("title")),
        description=strip_html(_first_text(channel, "description", "itunes:summary")),
        image_url=image_url,
        author=_first_text(channel, "itunes:author", "managingEditor") or "Unknown",
        categories=extract_categories(channel),
        language=extract_text(channel.get("language")) or "en",
        last_build_date=(
            parse_date(extract_text(channel.get("lastBuildDate")))
            or parse_date(extract_text(channel.get("pubDate")))
            or now
        ),
        explicit=parse_explicit(extract_text(channel.get("itunes:explicit"))),
        type=extract_text(channel.get("itunes:type")) or "episodic",
        email=email or None,
    )


def build_episode(
    item: XmlNode,
    index: int,
    podcast_image_url: str | None,
    now: datetime,
) -> Episode:
    """Build one Episode from an ``<item>``; never raises for bad fields.

    Args:
        item: The item node.
        index: Position of the item in the feed, used for the fallback id.
        podcast_image_url: Channel artwork used when the item has none.
        now: Fallback publish date for missing or unparseable pubDate.
    """
    audio_url = extract_audio_url(item.get("enclosure")) or extract_attribute(
        item.get("media:content"), "url",
    )
    if not audio_url:
        logger.warning("Episode %d missing audio URL", index)

    subtitle = strip_html(extract_text(item.get("itunes:subtitle")))

    return Episode(
        id=extract_text(item.get("guid")) or f"episode-{index}",
        title=_first_text(item, "title", "itunes:title"),
        description=strip_html(
            _first_text(
                item, "content:encoded", "description", "itunes:summary", "itunes:subtitle",
            )
        ),
        audio_url=audio_url,
        publish_date=parse_date(extract_text(item.get("pubDate"))) or now,
        duration=normalize_duration(extract_text(item.get("itunes:duration"))),
        episode_number=parse_positive_int(extract_text(item.get("itunes:episode"))),
        season=parse_positive_int(extract_text(item.get("itunes:season"))),
        image_url=extract_image_url(item.get("itunes:image")) or podcast_image_url or None,
        keywords=parse_keywords(extract_text(item.get("itunes:keywords"))),
        explicit=parse_explicit(extract_text(item.get("itunes:explicit"))),
        subtitle=subtitle or None,
    )


def _dedupe_ids(indexed: list[tuple[int, Episode]]) -> list[Episode]:
    """Give repeated ids after the first their positional fallback id."""
    seen: set[str] = set()
    unique = []
    for index, ep in indexed:
        if ep.id in seen:
            logger.warning("Episode %d duplicates id %r", index, ep.id)
            ep = ep.model_copy(update={"id": f"episode-{index}"})
        seen.add(ep.id)
        unique.append(ep)
    return unique


def map_feed(document: XmlNode, now: datetime | None = None) -> FeedResult:
    """Map a parsed feed document onto the canonical model.

    Only a missing channel is fatal. Items without an audio URL or title
    are dropped; repeated ids fall back to ``episode-<index>``. The rest
    are sorted newest first, keeping feed order for equal dates.

    Raises:
        StructureError: No ``<rss><channel>`` in the document.
    """
    now = now or _utcnow()
    channel = find_channel(document)

    podcast = build_podcast_info(channel, now)
    logger.info("Podcast: %s by %s", podcast.title, podcast.author)

    items = channel.get("item")
    logger.info("Processing %d episodes", len(items))
    episodes = [
        build_episode(item, index, podcast.image_url, now)
        for index, item in enumerate(items)
    ]

    valid = _dedupe_ids(
        [(index, ep) for index, ep in enumerate(episodes) if ep.is_valid]
    )
    valid.sort(key=lambda ep: ep.publish_date, reverse=True)
    logger.info("%d valid episodes processed", len(valid))

    return FeedResult(podcast=podcast, episodes=valid)


def parse_feed(xml_text: str, now: datetime | None = None) -> FeedResult:
    """Parse raw feed XML and map it. Useful for testing without network access."""
    return map_feed(parse_xml(xml_text), now=now)


def load_feed(settings: Settings, url: str | None = None) -> FeedResult:
    """Fetch, parse and map the configured feed (or *url*)."""
    feed_url = url or settings.rss_feed_url
    if not feed_url:
        raise ValueError("No feed URL configured. Set RSS_FEED_URL.")
    feed_content = fetch_feed(
        feed_url,
        timeout=settings.fetch_timeout_seconds,
        user_agent=settings.user_agent,
    )
    return parse_feed(feed_content)
