"""
YouTube URL parsing and validation.
Only the canonical watch-page and short-link shapes are accepted.
"""

import re

from transcript_chain.core.constants import (
    YOUTUBE_URL_SHAPE, VIDEO_ID_TOKEN, WATCH_URL_TEMPLATE,
)
from transcript_chain.core.error_codes import NoIdentifier

_SHAPE_RE = re.compile(YOUTUBE_URL_SHAPE)
_TOKEN_RE = re.compile(VIDEO_ID_TOKEN)


def is_youtube_url(url: str) -> bool:
    """Quick check if a string has one of the accepted reference shapes."""
    if not url:
        return False
    return _SHAPE_RE.match(url.strip()) is not None


def extract_video_id(url: str) -> str | None:
    """
    Extract the 11-character video_id from a YouTube URL.
    Returns None if the URL does not match an accepted shape.
    """
    if not is_youtube_url(url):
        return None
    m = _TOKEN_RE.search(url.strip())
    return m.group(1) if m else None


def validate_youtube_url(url: str) -> str:
    """
    Validate a YouTube URL and return the video_id.
    Raises NoIdentifier if invalid.
    """
    video_id = extract_video_id(url or "")
    if not video_id:
        raise NoIdentifier(f"Could not extract a video ID from: {url!r}")
    return video_id


def watch_url(video_id: str) -> str:
    return WATCH_URL_TEMPLATE.format(video_id=video_id)


def parse_input_lines(text: str) -> list[str]:
    """
    Parse pasted text into a list of YouTube URLs.
    - Trims whitespace
    - Ignores empty lines
    - Rejects non-YouTube URLs (silently skips)
    """
    urls = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if is_youtube_url(line):
            urls.append(line)
    return urls


def parse_txt_file(filepath: str) -> list[str]:
    """Parse a .txt file containing one URL per line."""
    with open(filepath, 'r', encoding='utf-8', errors='replace') as f:
        return parse_input_lines(f.read())
