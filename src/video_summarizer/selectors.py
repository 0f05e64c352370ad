"""YouTube selector tables.

Pure data: ordered candidate lists per semantic target. The markup changes
between releases and locales, so each target lists several plausible
strategies, most specific first.
"""

from .locator import Candidate

YOUTUBE_BASE_URL = "https://www.youtube.com"
YOUTUBE_SEARCH_URL = f"{YOUTUBE_BASE_URL}/results"

# Consent wall
CONSENT_BUTTON = (
    Candidate('button[aria-label="Accept all"]', 5000),
    Candidate('button[aria-label*="Accept"]', 1500),
    Candidate('form[action*="consent"] button', 1500),
)

# Channel search results
SEARCH_RESULT_CARD = "ytd-channel-renderer, ytd-video-renderer"
SEARCH_RESULT_TIMEOUT_MS = 5000

CHANNEL_CARD_LINK = (
    Candidate("ytd-channel-renderer a#main-link", 2000),
    Candidate("ytd-channel-renderer a.channel-link", 1000),
    Candidate("ytd-video-renderer ytd-channel-name a", 1000),
    Candidate("ytd-video-renderer a.yt-formatted-string", 1000),
)
CHANNEL_CARD_NAME = (
    Candidate("ytd-channel-renderer #channel-title #text", 1500),
    Candidate("ytd-channel-renderer #channel-title", 1000),
    Candidate("ytd-video-renderer ytd-channel-name #text", 1000),
)

# Channel page
CHANNEL_NAME = (
    Candidate("#channel-name .ytd-channel-name", 3000),
    Candidate("#channel-header ytd-channel-name", 1500),
    Candidate("#inner-header-container #text", 1500),
    Candidate("ytd-channel-name yt-formatted-string#text", 1500),
    Candidate("yt-page-header-renderer h1", 1500),
)

# Channel video listing
VIDEO_GRID = (
    Candidate("ytd-rich-grid-renderer", 10000),
    Candidate("#contents.ytd-rich-grid-renderer", 3000),
    Candidate("#primary ytd-rich-grid-renderer", 3000),
    Candidate("#contents ytd-rich-item-renderer", 3000),
)
VIDEO_GRID_ITEM = "ytd-rich-item-renderer"
VIDEO_TITLE = (
    Candidate("a#video-title", 2000),
    Candidate("#video-title", 1000),
    Candidate("#video-title-link", 1000),
    Candidate("h3 a", 1000),
)
VIDEO_LINK = (
    Candidate("a#thumbnail[href]", 2000),
    Candidate("a#video-title-link[href]", 1000),
    Candidate('a[href*="watch?v="]', 1000),
)

# Watch page
VIDEO_PLAYER = (
    Candidate("video", 10000),
    Candidate("#movie_player", 3000),
)
WATCH_TITLE = (
    Candidate("ytd-watch-metadata h1 yt-formatted-string", 3000),
    Candidate("h1.ytd-watch-metadata", 1500),
    Candidate("#title h1", 1500),
)
DESCRIPTION_EXPAND = (
    Candidate("tp-yt-paper-button#expand", 2000),
    Candidate("#description-inline-expander #expand", 2000),
    Candidate("#expand", 2000),
    Candidate("#more", 2000),
    Candidate("#description-inline-expander button", 2000),
)
TRANSCRIPT_BUTTON = (
    Candidate('button[aria-label="Show transcript"]', 5000),
    Candidate("ytd-video-description-transcript-section-renderer button", 3000),
    Candidate(".ytd-video-description-transcript-section-renderer button", 2000),
    Candidate('button[aria-label*="transcript" i]', 2000),
    Candidate("#primary-button ytd-button-renderer button", 2000),
    Candidate("#button-container ytd-button-renderer button", 2000),
)
MORE_ACTIONS_BUTTON = (
    Candidate('button[aria-label="More actions"]', 3000),
    Candidate('yt-button-shape[aria-label="More actions"] button', 2000),
    Candidate("ytd-menu-renderer #button-shape button", 2000),
    Candidate('button[aria-label*="More"]', 2000),
)
# :has-text() matches case-insensitively on a substring
TRANSCRIPT_MENU_ITEM = (
    Candidate('ytd-menu-service-item-renderer:has-text("transcript")', 3000),
    Candidate('tp-yt-paper-item:has-text("transcript")', 2000),
    Candidate('[role="menuitem"]:has-text("transcript")', 2000),
    Candidate('yt-formatted-string:has-text("transcript")', 2000),
)
TRANSCRIPT_PANEL = (
    Candidate("ytd-transcript-renderer", 10000),
    Candidate("ytd-transcript-search-panel-renderer", 5000),
    Candidate('ytd-engagement-panel-section-list-renderer[target-id*="transcript"]', 3000),
)

# Segment scraping runs in a single page.evaluate, so these are plain selectors
TRANSCRIPT_SEGMENT_SELECTORS = (
    "ytd-transcript-segment-renderer",
    "transcript-segment-view-model",
)
TRANSCRIPT_TEXT_SELECTORS = (
    "yt-formatted-string.segment-text",
    ".segment-text",
    "#text",
    "span[role='text']",
)
TRANSCRIPT_TIMESTAMP_SELECTORS = (
    ".segment-timestamp",
    "#timestamp",
)
