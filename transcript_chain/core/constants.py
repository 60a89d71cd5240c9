"""
Shared constants for transcript-chain.
Single source of truth, imported by every other module.
"""

import os
import pathlib

# ── Application identity ──────────────────────────────────────────────
APP_NAME = "transcript-chain"
APP_VERSION = "1.0.0"

# ── Filesystem paths ─────────────────────────────────────────────────
HOME = pathlib.Path.home()

APP_CONFIG_DIR = HOME / ".config" / APP_NAME
APP_LOG_DIR = HOME / ".cache" / APP_NAME / "logs"
CONFIG_PATH = pathlib.Path(
    os.environ.get("TRANSCRIPT_CHAIN_CONFIG", str(APP_CONFIG_DIR / "config.json"))
)

# Cookies
DEFAULT_COOKIES_PATH = APP_CONFIG_DIR / "youtube_cookies.txt"

# ── Environment variables ────────────────────────────────────────────
SUPADATA_API_KEY_ENV = "SUPADATA_API_KEY"
DISABLE_STT_ENV = "TRANSCRIPT_CHAIN_DISABLE_STT"


# ── Transcript sources ───────────────────────────────────────────────
class TranscriptSource:
    REMOTE_CAPTION = "remote-caption"
    LOCAL_CAPTION = "local-caption"
    SPEECH_TO_TEXT = "speech-to-text"


# ── Error codes ───────────────────────────────────────────────────────
class ErrorCode:
    # Non-retryable
    NO_IDENTIFIER = "ERR_NO_IDENTIFIER"
    NO_TRANSCRIPT = "ERR_NO_TRANSCRIPT_AVAILABLE"
    SPEECH_TOO_SHORT = "ERR_SPEECH_RESULT_TOO_SHORT"
    UPSTREAM_FAILURE = "ERR_UPSTREAM_FAILURE"
    SPEECH_TO_TEXT_FAILED = "ERR_SPEECH_TO_TEXT_FAILED"
    UNKNOWN = "ERR_UNKNOWN"

    # Retryable
    RATE_LIMITED = "ERR_RATE_LIMITED"
    UPSTREAM_TIMEOUT = "ERR_UPSTREAM_TIMEOUT"
    CONNECTION_RESET = "ERR_CONNECTION_RESET"


RETRYABLE_ERRORS = {
    ErrorCode.RATE_LIMITED,
    ErrorCode.UPSTREAM_TIMEOUT,
    ErrorCode.CONNECTION_RESET,
}

HTTP_STATUS_BY_CODE = {
    ErrorCode.NO_IDENTIFIER: 400,
    ErrorCode.NO_TRANSCRIPT: 422,
    ErrorCode.SPEECH_TOO_SHORT: 422,
    ErrorCode.UPSTREAM_FAILURE: 502,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.UPSTREAM_TIMEOUT: 504,
    ErrorCode.CONNECTION_RESET: 504,
    ErrorCode.SPEECH_TO_TEXT_FAILED: 500,
    ErrorCode.UNKNOWN: 500,
}

USER_MESSAGES = {
    ErrorCode.NO_IDENTIFIER: "Could not extract a video ID. Use a youtube.com/watch?v=... or youtu.be/... link.",
    ErrorCode.NO_TRANSCRIPT: "No transcript could be obtained. Check that the video has captions (auto-generated included).",
    ErrorCode.SPEECH_TOO_SHORT: "The speech recognition result is too short. Check that the video contains speech.",
    ErrorCode.UPSTREAM_FAILURE: "The AI service is having a temporary problem. Please try again shortly.",
    ErrorCode.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    ErrorCode.UPSTREAM_TIMEOUT: "Processing timed out. Try a shorter video.",
    ErrorCode.CONNECTION_RESET: "The connection to an upstream service was interrupted. Please try again.",
    ErrorCode.SPEECH_TO_TEXT_FAILED: "Speech recognition failed for this video.",
    ErrorCode.UNKNOWN: "An unknown error occurred.",
}

# ── Identifier extraction ────────────────────────────────────────────
# Accepted reference shapes: canonical watch page and canonical short link.
VIDEO_ID_LENGTH = 11
YOUTUBE_URL_SHAPE = (
    r'^(?:https?://)?(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)'
    rf'[\w-]{{{VIDEO_ID_LENGTH}}}'
)
VIDEO_ID_TOKEN = rf'(?:v=|youtu\.be/)([\w-]{{{VIDEO_ID_LENGTH}}})'

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

# ── Producer success predicates ──────────────────────────────────────
MIN_REMOTE_CAPTION_CHARS = 50      # producers 1 and 2: len >= 50
MIN_LOCAL_CAPTION_CHARS = 50       # producer 3: len > 50
MIN_SPEECH_TEXT_CHARS = 30         # producer 4: len >= 30

# ── Remote caption APIs ──────────────────────────────────────────────
SUPADATA_API_BASE = "https://api.supadata.ai/v1"
SUPADATA_TRANSCRIPT_URL = f"{SUPADATA_API_BASE}/transcript"

DEFAULT_TRANSCRIPT_LANGUAGES = ["ko", "en", "ja"]
DEFAULT_SUBTITLE_LANGUAGES = ["ko", "en"]

# ── Speech-to-text ───────────────────────────────────────────────────
WHISPER_MODEL = "small"
WHISPER_LANGUAGE = "ko"
AUDIO_FORMAT_SELECTOR = "bestaudio[ext=m4a]/bestaudio"
AUDIO_BASENAME = "audio"
WORKSPACE_PREFIX = "yt-sub-"

# ── Timeouts (seconds) ───────────────────────────────────────────────
REMOTE_API_TIMEOUT_SEC = 30
SUBTITLE_DOWNLOAD_TIMEOUT_SEC = 60
AUDIO_DOWNLOAD_TIMEOUT_SEC = 120
WHISPER_TIMEOUT_SEC = 300
CHANNEL_LIST_TIMEOUT_SEC = 120
TOOL_VERSION_TIMEOUT_SEC = 10

# ── Retry ─────────────────────────────────────────────────────────────
MAX_RETRIES = 2
RETRY_BASE_DELAY_SEC = 3.0

# ── Text normalization ───────────────────────────────────────────────
DEDUPE_MIN_SENTENCE_CHARS = 5
DEDUPE_MIN_REFERENCE_CHARS = 10    # reference sentences must be longer than this
DEDUPE_PREFIX_RATIO = 0.8
DEDUPE_WINDOW_SIZE = 50

MAX_TRANSCRIPT_LENGTH = 20000
EBOOK_TRANSCRIPT_MAX = 25000
SAMPLE_LABELS = ("[Beginning]", "[Middle]", "[End]")
TRANSCRIPT_PREVIEW_CHARS = 500

# ── Cookies ───────────────────────────────────────────────────────────
class CookiesMode:
    OFF = "OFF"
    USE_FILE = "USE_FILE"


# ── Channel listing ──────────────────────────────────────────────────
CHANNEL_PAGE_SIZE = 50
CHANNEL_FIELD_SEP = "|||"
CHANNEL_UNTITLED = "(untitled)"
