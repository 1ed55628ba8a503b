from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Snapshot(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Episode(_Snapshot):
    """One feed item, normalized."""

    id: str
    title: str
    description: str = ""
    audio_url: str = ""
    publish_date: datetime
    duration: str = "00:00"
    episode_number: int | None = None
    season: int | None = None
    image_url: str | None = None
    keywords: list[str] | None = None
    explicit: bool | None = None
    subtitle: str | None = None

    @property
    def is_valid(self) -> bool:
        return bool(self.audio_url and self.title)


class PodcastInfo(_Snapshot):
    """Channel-level podcast metadata."""

    title: str
    description: str = ""
    image_url: str = ""
    author: str = "Unknown"
    categories: list[str] = Field(default_factory=list)
    language: str = "en"
    last_build_date: datetime
    explicit: bool = False
    type: str = "episodic"
    email: str | None = None


class FeedResult(_Snapshot):
    """Output of one mapping pass: podcast plus sorted, valid episodes."""

    podcast: PodcastInfo
    episodes: list[Episode] = Field(default_factory=list)


class Pagination(_Snapshot):
    total: int
    limit: int
    offset: int
    has_more: bool


class ApiResponse(_Snapshot):
    """Response envelope returned by every API route."""

    success: bool
    data: Any = None
    error: str | None = None
    details: str | None = None
    pagination: Pagination | None = None
    timestamp: datetime
