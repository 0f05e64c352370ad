"""Pydantic schemas for the video summarizer pipeline."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChannelRef(BaseModel):
    """A channel resolved from free-form user input.

    The URL is always absolute; the display name is optional because the
    channel page does not always expose one.
    """

    raw_input: str
    url: str
    display_name: str | None = None


class VideoRef(BaseModel):
    """One video published by a channel."""

    id: str
    title: str
    url: str  # Always absolute


class TranscriptText(BaseModel):
    """Scraped transcript for one video.

    ``cleaned_text`` has timestamps and bracketed annotations stripped and
    whitespace collapsed. ``title`` is captured from the watch page when
    available.
    """

    video_url: str
    raw_text: str
    cleaned_text: str
    title: str | None = None


class Chunk(BaseModel):
    """Bounded slice of a transcript sized to fit one summarization call."""

    index: int
    text: str
    char_length: int


class ChunkSummary(BaseModel):
    """Model output for one chunk, discarded after reduction."""

    index: int
    text: str


class FinalSummary(BaseModel):
    """Terminal artifact of the summarization engine."""

    text: str
    word_count: int
    target_word_count: int
    chunk_count: int
    expanded: bool = False


class ProviderConfig(BaseModel):
    """One configured AI backend, resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    name: str
    api_key: str = Field(repr=False)
    model: str
    priority: int


class SummaryData(BaseModel):
    """Payload returned to callers for a successful run."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    summary: str
    url: str
    channel_name: str | None = Field(default=None, alias="channelName")
    provider: str


class SummaryResponse(BaseModel):
    """Envelope returned by every pipeline entry point.

    Failures are reported with ``success=False`` and a user-facing ``error``
    message instead of raising.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: SummaryData | dict[str, Any] | None = None
    error: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    @classmethod
    def ok(cls, data: SummaryData | dict[str, Any]) -> "SummaryResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "SummaryResponse":
        return cls(success=False, error=error)
