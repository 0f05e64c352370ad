"""Input validation for channel and video identifiers."""

import re

from src.utils.logging import get_logger

from .exceptions import InvalidInputError

logger = get_logger(__name__)

MAX_CHANNEL_INPUT_LENGTH = 100

_CHANNEL_URL = re.compile(
    r"^(https?://)?(www\.|m\.)?youtube\.com/(@|c/|channel/|user/)?[\w.-]+(/[a-z]+)?/?$",
    re.I,
)
_CHANNEL_NAME = re.compile(r"^[\w\s.'&-]{1,100}$")
_VIDEO_URL = re.compile(
    r"^(https?://)?((www\.|m\.)?youtube\.com/(watch\?(.*&)?v=|shorts/|live/)|youtu\.be/)[\w-]{6,}",
    re.I,
)


def validate_channel_input(value: str) -> str:
    """Validate a channel name, handle or URL.

    Args:
        value: Raw user input.

    Returns:
        The trimmed input.

    Raises:
        InvalidInputError: If the input is empty, too long or malformed.
    """
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInputError("Channel name cannot be empty")
    if len(cleaned) > MAX_CHANNEL_INPUT_LENGTH:
        raise InvalidInputError("Channel name is too long")
    if cleaned.startswith("@"):
        cleaned_name = cleaned[1:]
    else:
        cleaned_name = cleaned
    if not (_CHANNEL_URL.match(cleaned) or _CHANNEL_NAME.match(cleaned_name)):
        logger.warning("channel_input_rejected", value=cleaned)
        raise InvalidInputError("Invalid channel name or URL format")
    return cleaned


def validate_video_url(value: str) -> str:
    """Validate a YouTube video URL.

    Returns:
        The trimmed URL, with ``https://`` added when the scheme is missing.

    Raises:
        InvalidInputError: If the URL is not a YouTube video URL.
    """
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidInputError("Video URL is required")
    if not _VIDEO_URL.match(cleaned):
        logger.warning("video_url_rejected", value=cleaned)
        raise InvalidInputError("Invalid YouTube URL")
    if not cleaned.lower().startswith(("http://", "https://")):
        cleaned = "https://" + cleaned
    return cleaned
