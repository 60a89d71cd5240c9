"""
Channel / playlist video listing via yt-dlp --flat-playlist.
"""

import logging
import subprocess

from transcript_chain.core.constants import (
    CHANNEL_PAGE_SIZE, CHANNEL_FIELD_SEP, CHANNEL_UNTITLED, CHANNEL_LIST_TIMEOUT_SEC,
)
from transcript_chain.core.error_codes import PipelineError, transient_error_from
from transcript_chain.core.models import ChannelVideo
from transcript_chain.core.security_utils import run_subprocess_capture

logger = logging.getLogger(__name__)

_CHANNEL_MARKERS = ('/@', '/channel/', '/c/', '/user/')


def is_channel_url(url: str) -> bool:
    return 'youtube.com/' in url or 'youtu.be/' in url


def videos_tab_url(channel_url: str) -> str:
    """Append /videos to bare channel URLs; playlists are left alone."""
    url = channel_url.strip()
    if '/playlist' in url or '/videos' in url:
        return url
    if any(marker in url for marker in _CHANNEL_MARKERS):
        return url.rstrip('/') + '/videos'
    return url


def parse_flat_playlist(stdout: str) -> list[ChannelVideo]:
    """Parse `id|||title|||duration` lines; lines without an id are skipped."""
    videos = []
    for line in stdout.splitlines():
        if not line.strip():
            continue
        parts = line.split(CHANNEL_FIELD_SEP)
        parts += [''] * (3 - len(parts))
        video_id, title, duration = (p.strip() for p in parts[:3])
        if not video_id:
            continue
        videos.append(ChannelVideo(id=video_id, title=title or CHANNEL_UNTITLED,
                                   duration=duration))
    return videos


async def list_channel_videos(channel_url: str, start: int = 1,
                              end: int = CHANNEL_PAGE_SIZE,
                              timeout: float = CHANNEL_LIST_TIMEOUT_SEC) -> tuple[list[ChannelVideo], bool]:
    """
    List videos of a channel or playlist.
    `start` is 1-indexed and `end` inclusive. One extra entry is requested
    to report whether more videos follow.
    Returns (videos, has_more).
    """
    if start < 1 or end < start:
        raise ValueError(f"Invalid range: start={start}, end={end}")

    url = videos_tab_url(channel_url)
    args = [
        "yt-dlp",
        "--flat-playlist",
        "--print", f"%(id)s{CHANNEL_FIELD_SEP}%(title)s{CHANNEL_FIELD_SEP}%(duration_string)s",
        "--playlist-start", str(start),
        "--playlist-end", str(end + 1),
        "--no-warnings",
        url,
    ]

    logger.info("[channel] listing %s (%d-%d)", url, start, end)
    try:
        result = await run_subprocess_capture(args, timeout=timeout)
    except (subprocess.TimeoutExpired, OSError) as e:
        raise transient_error_from(e, "Channel listing") or PipelineError(
            f"Channel listing failed: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr or ""
        raise transient_error_from(RuntimeError(stderr), "Channel listing") or PipelineError(
            f"yt-dlp channel listing failed (rc={result.returncode}): {stderr[:300]}")

    videos = parse_flat_playlist(result.stdout)
    expected = end - start + 1
    has_more = len(videos) > expected
    videos = videos[:expected]

    logger.info("[channel] parsed %d videos, has_more=%s", len(videos), has_more)
    return videos, has_more
