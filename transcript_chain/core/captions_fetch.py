"""
Subtitle file extraction via yt-dlp (creator or auto-generated captions).
Each language in the preference list is tried independently; a missing
file for one language just moves on to the next.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from transcript_chain.core.captions_parse import parse_caption_file
from transcript_chain.core.cleanup import scoped_workspace
from transcript_chain.core.constants import (
    TranscriptSource, CookiesMode, DEFAULT_COOKIES_PATH,
    DEFAULT_SUBTITLE_LANGUAGES, SUBTITLE_DOWNLOAD_TIMEOUT_SEC,
    MIN_LOCAL_CAPTION_CHARS, WORKSPACE_PREFIX,
)
from transcript_chain.core.models import TranscriptProducer
from transcript_chain.core.security_utils import run_subprocess_capture

logger = logging.getLogger(__name__)

SUBTITLE_EXTENSIONS = ("srt", "vtt")


def cookies_args(cookies_mode: str, cookies_path: Path | None) -> list[str]:
    """yt-dlp --cookies arguments, if a cookies file is enabled and present."""
    if cookies_mode != CookiesMode.USE_FILE:
        return []
    cp = cookies_path or DEFAULT_COOKIES_PATH
    if cp.exists():
        return ["--cookies", str(cp)]
    return []


def subtitle_path(out_template: Path, lang: str) -> Path | None:
    """Return the subtitle file yt-dlp wrote for `lang`, if any."""
    for ext in SUBTITLE_EXTENSIONS:
        candidate = out_template.parent / f"{out_template.name}.{lang}.{ext}"
        if candidate.exists():
            return candidate
    return None


async def fetch_subtitle_file(video_url: str, lang: str, out_template: Path,
                              cookies_mode: str = CookiesMode.OFF,
                              cookies_path: Path | None = None,
                              timeout: float = SUBTITLE_DOWNLOAD_TIMEOUT_SEC) -> Path | None:
    """
    Ask yt-dlp for one language's subtitles, skipping the media download.
    Returns the subtitle path, or None if yt-dlp produced no file.
    """
    args = [
        "yt-dlp",
        "--skip-download",
        "--write-subs",
        "--write-auto-subs",
        "--sub-langs", lang,
        "--sub-format", "srt/vtt/best",
        "--no-playlist",
        "-o", str(out_template),
    ]
    args.extend(cookies_args(cookies_mode, cookies_path))
    args.append(video_url)

    result = await run_subprocess_capture(args, timeout=timeout)
    if result.returncode != 0:
        logger.debug("yt-dlp subtitles (%s) rc=%d: %s",
                     lang, result.returncode, (result.stderr or "")[:200])

    return subtitle_path(out_template, lang)


class SubtitleFileProducer(TranscriptProducer):
    name = "yt-dlp-subtitles"
    source = TranscriptSource.LOCAL_CAPTION

    def __init__(self, languages: list[str] | None = None,
                 cookies_mode: str = CookiesMode.OFF,
                 cookies_path: Path | None = None,
                 timeout: float = SUBTITLE_DOWNLOAD_TIMEOUT_SEC):
        self.languages = list(languages or DEFAULT_SUBTITLE_LANGUAGES)
        self.cookies_mode = cookies_mode
        self.cookies_path = cookies_path
        self.timeout = timeout

    async def attempt(self, video_id: str, reference: str) -> Optional[str]:
        with scoped_workspace(prefix=WORKSPACE_PREFIX) as work_dir:
            out_template = work_dir / video_id

            for lang in self.languages:
                try:
                    path = await fetch_subtitle_file(
                        reference, lang, out_template,
                        self.cookies_mode, self.cookies_path, self.timeout,
                    )
                except (subprocess.TimeoutExpired, OSError) as e:
                    logger.warning("Subtitle fetch (%s) failed: %s", lang, e)
                    continue

                if path is None:
                    logger.debug("No %s subtitle file for %s", lang, video_id)
                    continue

                text = parse_caption_file(path)
                if len(text) > MIN_LOCAL_CAPTION_CHARS:
                    logger.info("Subtitle file (%s): %d chars", lang, len(text))
                    return text

        return None
