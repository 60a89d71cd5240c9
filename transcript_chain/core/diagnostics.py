"""
Diagnostics: tool version detection and producer availability checks.
"""

import shutil
import logging
import importlib.util

from transcript_chain.core.config import AppConfig
from transcript_chain.core.constants import TOOL_VERSION_TIMEOUT_SEC
from transcript_chain.core.security_utils import run_subprocess_capture, mask_secret

logger = logging.getLogger(__name__)


async def get_ytdlp_version() -> str:
    """Return yt-dlp version string, or error message."""
    try:
        result = await run_subprocess_capture(["yt-dlp", "--version"],
                                              timeout=TOOL_VERSION_TIMEOUT_SEC)
        if result.returncode == 0:
            return result.stdout.strip()
        return f"Error (rc={result.returncode})"
    except FileNotFoundError:
        return "Not installed"
    except Exception as e:
        return f"Error: {e}"


def get_whisper_path() -> str:
    return shutil.which("whisper") or "Not installed"


def has_transcript_api() -> bool:
    return importlib.util.find_spec("youtube_transcript_api") is not None


async def get_diagnostics(config: AppConfig | None = None) -> dict:
    """Gather all diagnostic information."""
    config = config or AppConfig()
    return {
        "ytdlp_version": await get_ytdlp_version(),
        "whisper": get_whisper_path(),
        "youtube_transcript_api": has_transcript_api(),
        "supadata_api_key": mask_secret(config.supadata_api_key),
        "speech_to_text_enabled": config.speech_to_text_enabled,
    }
