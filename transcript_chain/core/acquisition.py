"""
Transcript acquisition chain.

Producers are tried strictly in order, cheapest first:
  1. Supadata API          (seconds, needs an API key)
  2. youtube-transcript-api
  3. yt-dlp subtitle files
  4. audio download + whisper (minutes)

The first producer that returns text wins; later producers are never
called. Errors from non-terminal producers are logged and treated as
"no result". The terminal producer's errors propagate since nothing sits
behind it. Nothing is retried here; retries wrap the whole chain.
"""

import logging

from transcript_chain.core.captions_fetch import SubtitleFileProducer
from transcript_chain.core.config import AppConfig
from transcript_chain.core.error_codes import NoTranscriptAvailable
from transcript_chain.core.models import TranscriptProducer, TranscriptResult, ProducerAttempt
from transcript_chain.core.remote_captions import SupadataProducer, TranscriptApiProducer
from transcript_chain.core.transcribe_whisper import SpeechToTextProducer
from transcript_chain.core.url_parse import validate_youtube_url

logger = logging.getLogger(__name__)


class AcquisitionChain:
    """Ordered fallback over TranscriptProducer implementations."""

    def __init__(self, producers: list[TranscriptProducer]):
        if not producers:
            raise ValueError("AcquisitionChain needs at least one producer")
        self.producers = list(producers)

    async def _run_producer(self, producer: TranscriptProducer,
                            video_id: str, reference: str) -> ProducerAttempt:
        attempt = ProducerAttempt(producer=producer.name, video_id=video_id)
        try:
            attempt.text = await producer.attempt(video_id, reference)
        except Exception as e:
            if producer.terminal:
                raise
            attempt.error = e
            logger.warning("[transcript] %s failed: %s: %s",
                           producer.name, type(e).__name__, str(e)[:100])
        return attempt

    async def acquire(self, reference: str) -> TranscriptResult:
        """
        Resolve a video reference into transcript text.
        Raises NoIdentifier for unrecognised references and
        NoTranscriptAvailable when every producer comes back empty.
        """
        video_id = validate_youtube_url(reference)

        for producer in self.producers:
            logger.info("[transcript] trying %s...", producer.name)
            attempt = await self._run_producer(producer, video_id, reference)
            if attempt.succeeded:
                logger.info("[transcript] %s succeeded: %d chars",
                            producer.name, len(attempt.text))
                return TranscriptResult(text=attempt.text, source=producer.source,
                                        producer=producer.name)

        raise NoTranscriptAvailable(
            f"No transcript available for {video_id} "
            f"(tried: {', '.join(p.name for p in self.producers)})"
        )


def build_default_chain(config: AppConfig) -> AcquisitionChain:
    """The standard cost-ascending producer order, configured from AppConfig."""
    producers: list[TranscriptProducer] = [
        SupadataProducer(config.supadata_api_key),
        TranscriptApiProducer(config.transcript_languages),
        SubtitleFileProducer(config.subtitle_languages,
                             config.cookies_mode, config.cookies_path),
    ]
    if config.speech_to_text_enabled:
        producers.append(SpeechToTextProducer(
            model=config.whisper_model, language=config.whisper_language,
            cookies_mode=config.cookies_mode, cookies_path=config.cookies_path,
        ))
    else:
        logger.info("Speech-to-text disabled — chain ends at subtitle files")
    return AcquisitionChain(producers)
