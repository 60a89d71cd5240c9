"""
Whisper speech-to-text integration (last-resort producer).
Downloads audio into a scoped workspace, runs the whisper CLI with a fixed
model and language, and reads back the produced .txt file.
The workspace is removed on every exit path.
"""

import logging
import subprocess
from pathlib import Path
from typing import Awaitable, Callable, Optional

from transcript_chain.core.cleanup import scoped_workspace
from transcript_chain.core.constants import (
    TranscriptSource, CookiesMode, WHISPER_MODEL, WHISPER_LANGUAGE,
    WHISPER_TIMEOUT_SEC, MIN_SPEECH_TEXT_CHARS, WORKSPACE_PREFIX,
)
from transcript_chain.core.download_audio import download_audio
from transcript_chain.core.error_codes import (
    SpeechResultTooShort, SpeechToTextFailed, transient_error_from,
)
from transcript_chain.core.models import TranscriptProducer
from transcript_chain.core.security_utils import run_subprocess_capture

logger = logging.getLogger(__name__)


async def transcribe_with_whisper(audio_path: Path, output_dir: Path,
                                  model: str = WHISPER_MODEL,
                                  language: str = WHISPER_LANGUAGE,
                                  timeout: float = WHISPER_TIMEOUT_SEC) -> str:
    """
    Run the whisper CLI on an audio file and return the stripped text.
    Raises SpeechToTextFailed when no text output is produced.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    args = [
        "whisper",
        str(audio_path),
        "--model", model,
        "--language", language,
        "--output_format", "txt",
        "--output_dir", str(output_dir),
    ]

    logger.info("Whisper STT starting (model=%s, language=%s)", model, language)
    try:
        result = await run_subprocess_capture(args, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise transient_error_from(e, "Whisper transcription timed out") from e
    except OSError as e:
        raise SpeechToTextFailed(f"Whisper could not be started: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr or ""
        raise SpeechToTextFailed(f"Whisper failed (rc={result.returncode}): {stderr[:300]}")

    txt_files = sorted(output_dir.glob("*.txt"))
    if not txt_files:
        raise SpeechToTextFailed("Whisper produced no transcript file")

    return txt_files[0].read_text(encoding='utf-8', errors='replace').strip()


Downloader = Callable[..., Awaitable[Path]]
Recognizer = Callable[..., Awaitable[str]]


class SpeechToTextProducer(TranscriptProducer):
    """
    Audio download + whisper. Markedly slower than the caption producers,
    so it always runs last; its errors propagate out of the chain.
    """

    name = "whisper"
    source = TranscriptSource.SPEECH_TO_TEXT
    terminal = True

    def __init__(self, model: str = WHISPER_MODEL, language: str = WHISPER_LANGUAGE,
                 cookies_mode: str = CookiesMode.OFF, cookies_path: Path | None = None,
                 timeout: float = WHISPER_TIMEOUT_SEC,
                 workspace_parent: Path | None = None,
                 downloader: Downloader = download_audio,
                 recognizer: Recognizer = transcribe_with_whisper):
        self.model = model
        self.language = language
        self.cookies_mode = cookies_mode
        self.cookies_path = cookies_path
        self.timeout = timeout
        self.workspace_parent = workspace_parent
        self.downloader = downloader
        self.recognizer = recognizer

    async def attempt(self, video_id: str, reference: str) -> Optional[str]:
        with scoped_workspace(prefix=WORKSPACE_PREFIX, parent=self.workspace_parent) as workspace:
            audio_path = await self.downloader(
                reference, workspace,
                cookies_mode=self.cookies_mode, cookies_path=self.cookies_path,
            )
            text = await self.recognizer(
                audio_path, workspace / "text",
                model=self.model, language=self.language, timeout=self.timeout,
            )

        if len(text) < MIN_SPEECH_TEXT_CHARS:
            raise SpeechResultTooShort(
                f"Speech recognition result too short ({len(text)} chars)"
            )

        logger.info("Whisper STT complete: %d chars", len(text))
        return text
