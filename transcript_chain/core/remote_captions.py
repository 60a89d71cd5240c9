"""
Remote caption producers.

1. Supadata transcript API (HTTP, needs SUPADATA_API_KEY).
2. youtube-transcript-api, iterating a language preference list.

Both return text only when it is at least MIN_REMOTE_CAPTION_CHARS long.
HTTP failures and empty payloads are "no result" (None). Supadata network
errors propagate to the acquisition chain, which logs them and moves on;
youtube-transcript-api failures only skip to the next language.
"""

import asyncio
import logging
from typing import Callable, Optional

import requests
from youtube_transcript_api import YouTubeTranscriptApi, CouldNotRetrieveTranscript

from transcript_chain.core.captions_parse import normalize_caption_payload, join_segments
from transcript_chain.core.constants import (
    TranscriptSource, SUPADATA_TRANSCRIPT_URL, REMOTE_API_TIMEOUT_SEC,
    MIN_REMOTE_CAPTION_CHARS, DEFAULT_TRANSCRIPT_LANGUAGES,
)
from transcript_chain.core.models import TranscriptProducer
from transcript_chain.core.url_parse import watch_url

logger = logging.getLogger(__name__)


def _usable(text: str) -> bool:
    return len(text) >= MIN_REMOTE_CAPTION_CHARS


# ── Producer 1: Supadata ──────────────────────────────────────────────

def fetch_supadata_transcript(video_id: str, api_key: str,
                              timeout: float = REMOTE_API_TIMEOUT_SEC,
                              session: requests.Session | None = None) -> Optional[str]:
    """
    Fetch a transcript from the Supadata API (blocking).
    Returns flattened text, or None on non-200 / empty payload.
    """
    http = session or requests
    resp = http.get(
        SUPADATA_TRANSCRIPT_URL,
        params={"url": watch_url(video_id)},
        headers={"x-api-key": api_key},
        timeout=timeout,
    )

    if resp.status_code != 200:
        logger.info("Supadata returned HTTP %s for %s", resp.status_code, video_id)
        return None

    try:
        data = resp.json()
    except ValueError:
        logger.info("Supadata returned a non-JSON body for %s", video_id)
        return None

    text = normalize_caption_payload(data)
    if not text:
        return None

    lang = data.get('lang') if isinstance(data, dict) else None
    logger.info("Supadata transcript (%s): %d chars", lang or "?", len(text))
    return text


class SupadataProducer(TranscriptProducer):
    name = "supadata"
    source = TranscriptSource.REMOTE_CAPTION

    def __init__(self, api_key: str | None, timeout: float = REMOTE_API_TIMEOUT_SEC,
                 session: requests.Session | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session

    async def attempt(self, video_id: str, reference: str) -> Optional[str]:
        if not self.api_key:
            logger.debug("No Supadata API key configured, skipping")
            return None

        text = await asyncio.wait_for(
            asyncio.to_thread(fetch_supadata_transcript, video_id, self.api_key,
                              self.timeout, self.session),
            timeout=self.timeout + 5,
        )
        if text and _usable(text):
            return text
        return None


# ── Producer 2: youtube-transcript-api ────────────────────────────────

def fetch_transcript_api(api, video_id: str, language: str) -> str:
    """Fetch one language through youtube-transcript-api (blocking)."""
    fetched = api.fetch(video_id, languages=[language])
    return join_segments(getattr(fetched, 'snippets', fetched))


class TranscriptApiProducer(TranscriptProducer):
    name = "youtube-transcript-api"
    source = TranscriptSource.REMOTE_CAPTION

    def __init__(self, languages: list[str] | None = None,
                 timeout: float = REMOTE_API_TIMEOUT_SEC,
                 api_factory: Callable[[], object] = YouTubeTranscriptApi):
        self.languages = list(languages or DEFAULT_TRANSCRIPT_LANGUAGES)
        self.timeout = timeout
        self.api_factory = api_factory

    async def attempt(self, video_id: str, reference: str) -> Optional[str]:
        api = self.api_factory()

        for lang in self.languages:
            try:
                text = await asyncio.wait_for(
                    asyncio.to_thread(fetch_transcript_api, api, video_id, lang),
                    timeout=self.timeout,
                )
            except CouldNotRetrieveTranscript as e:
                logger.debug("No %s transcript for %s: %s", lang, video_id, type(e).__name__)
                continue
            except (requests.RequestException, asyncio.TimeoutError) as e:
                logger.warning("Transcript API error (%s) for %s: %s",
                               lang, video_id, str(e)[:100])
                continue
            except Exception as e:
                logger.warning("Transcript API (%s) failed for %s: %s: %s",
                               lang, video_id, type(e).__name__, str(e)[:100])
                continue

            if _usable(text):
                logger.info("Transcript API (%s): %d chars", lang, len(text))
                return text

        return None
