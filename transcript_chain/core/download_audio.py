"""
Audio download via yt-dlp.
"""

import logging
import subprocess
from pathlib import Path

from transcript_chain.core.captions_fetch import cookies_args
from transcript_chain.core.constants import (
    CookiesMode, AUDIO_FORMAT_SELECTOR, AUDIO_BASENAME, AUDIO_DOWNLOAD_TIMEOUT_SEC,
)
from transcript_chain.core.error_codes import SpeechToTextFailed, transient_error_from
from transcript_chain.core.security_utils import run_subprocess_capture

logger = logging.getLogger(__name__)


async def download_audio(video_url: str, output_dir: Path,
                         cookies_mode: str = CookiesMode.OFF,
                         cookies_path: Path | None = None,
                         timeout: float = AUDIO_DOWNLOAD_TIMEOUT_SEC) -> Path:
    """
    Download the best available audio-only stream using yt-dlp.
    Returns path to the downloaded file (extension not guaranteed).
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    output_template = str(output_dir / f"{AUDIO_BASENAME}.%(ext)s")

    args = [
        "yt-dlp",
        "-f", AUDIO_FORMAT_SELECTOR,
        "--no-playlist",
        "-o", output_template,
    ]
    args.extend(cookies_args(cookies_mode, cookies_path))
    args.append(video_url)

    logger.info("Downloading audio for speech-to-text...")
    try:
        result = await run_subprocess_capture(args, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise transient_error_from(e, "Audio download timed out") from e
    except OSError as e:
        raise SpeechToTextFailed(f"Audio download failed: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr or ""
        message = f"yt-dlp download failed (rc={result.returncode}): {stderr[:300]}"
        raise transient_error_from(RuntimeError(stderr), "Audio download") or SpeechToTextFailed(message)

    # Find the downloaded file
    source_files = sorted(p for p in output_dir.glob(f"{AUDIO_BASENAME}.*")
                          if p.suffix != ".part")
    if not source_files:
        raise SpeechToTextFailed("No audio file found after download")

    downloaded = source_files[0]
    logger.info("Downloaded audio: %s", downloaded)
    return downloaded
