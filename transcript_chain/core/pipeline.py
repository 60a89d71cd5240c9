"""
Pipeline boundary: reference → transcript → bounded text → generation.

Wraps acquisition and generation in the retry policy, classifies any
failure once, and always returns a structured PipelineOutcome.
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from transcript_chain.core.acquisition import AcquisitionChain, build_default_chain
from transcript_chain.core.config import AppConfig
from transcript_chain.core.error_codes import (
    PipelineError, UpstreamFailure, classify_error, transient_error_from,
)
from transcript_chain.core.models import TranscriptResult
from transcript_chain.core.retry import with_retry
from transcript_chain.core.truncate import truncate_transcript, transcript_preview
from transcript_chain.core.url_parse import validate_youtube_url

logger = logging.getLogger(__name__)

# generator(text, **options) -> dict, sync or async
Generator = Callable[..., Any]


@dataclass
class PipelineOutcome:
    success: bool
    data: dict = field(default_factory=dict)
    error: Optional[str] = None
    error_code: Optional[str] = None
    http_status: int = 200

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, "error": self.error, "code": self.error_code}


class TranscriptPipeline:
    """
    Runs one request end to end. Holds no per-request state, so a single
    instance can serve concurrent requests.
    """

    def __init__(self, config: AppConfig | None = None,
                 chain: AcquisitionChain | None = None,
                 sleep=None):
        self.config = config or AppConfig()
        self.chain = chain or build_default_chain(self.config)
        self._sleep = sleep

    # ── Config helpers ────────────────────────────────────────────────

    def _retry_kwargs(self) -> dict:
        kwargs = {
            "max_retries": self.config.max_retries,
            "base_delay": self.config.retry_base_delay_sec,
        }
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return kwargs

    # ── Stages ────────────────────────────────────────────────────────

    async def acquire(self, reference: str) -> TranscriptResult:
        validate_youtube_url(reference)
        transcript = await with_retry(
            lambda: self.chain.acquire(reference), label="transcript",
            **self._retry_kwargs(),
        )
        logger.info("[transcript] source=%s, length=%d",
                    transcript.source, len(transcript.text))
        return transcript

    def prepare_transcript(self, text: str, max_length: int | None = None) -> str:
        return truncate_transcript(text, max_length or self.config.max_transcript_length)

    async def generate(self, text: str, generator: Generator, **options) -> dict:
        async def _call():
            try:
                result = generator(text, **options)
                if inspect.isawaitable(result):
                    result = await result
            except PipelineError:
                raise
            except Exception as e:
                transient = transient_error_from(e, "Generation")
                if transient is not None:
                    raise transient from e
                raise UpstreamFailure(f"Generation provider error: {e}") from e
            return result

        return await with_retry(_call, label="generate", **self._retry_kwargs())

    # ── Boundary ──────────────────────────────────────────────────────

    async def run(self, reference: str, generator: Generator | None = None,
                  max_length: int | None = None, **generation_options) -> PipelineOutcome:
        """
        Process one reference. Never raises: failures come back as an
        unsuccessful outcome with fixed user-facing copy and an HTTP status.
        """
        try:
            transcript = await self.acquire(reference)
            prepared = self.prepare_transcript(transcript.text, max_length)

            data: dict = {}
            if generator is not None:
                generated = await self.generate(prepared, generator, **generation_options)
                if isinstance(generated, dict):
                    data.update(generated)
                else:
                    data["generated"] = generated

            data.update(
                transcript=transcript_preview(transcript.text),
                source=transcript.source,
                producer=transcript.producer,
                prepared_transcript=prepared,
            )
            return PipelineOutcome(success=True, data=data)

        except Exception as e:
            classification = classify_error(e)
            logger.error("[pipeline] %s error (%s): %s",
                         classification.http_status, classification.code, e)
            return PipelineOutcome(
                success=False,
                error=classification.user_message,
                error_code=classification.code,
                http_status=classification.http_status,
            )
