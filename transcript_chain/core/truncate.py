"""
Bounded sampling of long transcripts.
Texts over budget are replaced by labelled beginning/middle/end excerpts.
"""

import logging

from transcript_chain.core.constants import (
    MAX_TRANSCRIPT_LENGTH, SAMPLE_LABELS, TRANSCRIPT_PREVIEW_CHARS,
)
from transcript_chain.core.dedupe import deduplicate_transcript

logger = logging.getLogger(__name__)

_SAMPLE_FORMAT = "{start_label}\n{start}\n\n{middle_label}\n{middle}\n\n{end_label}\n{end}"


def sample_transcript(text: str, max_length: int = MAX_TRANSCRIPT_LENGTH) -> str:
    """
    Return `text` unchanged if it fits, otherwise three labelled chunks of
    max_length // 3 characters taken from the start, the centre and the end.
    """
    if len(text) <= max_length:
        return text

    chunk_size = max_length // 3
    start = text[:chunk_size]
    mid_start = max(0, int(len(text) / 2 - chunk_size / 2))
    middle = text[mid_start:mid_start + chunk_size]
    end = text[len(text) - chunk_size:] if chunk_size else ''

    start_label, middle_label, end_label = SAMPLE_LABELS
    return _SAMPLE_FORMAT.format(
        start_label=start_label, start=start,
        middle_label=middle_label, middle=middle,
        end_label=end_label, end=end,
    )


def truncate_transcript(text: str, max_length: int = MAX_TRANSCRIPT_LENGTH) -> str:
    """
    Deduplicate, then bound to `max_length` (plus label overhead).
    """
    if max_length < 3:
        raise ValueError("max_length must be at least 3")

    cleaned = deduplicate_transcript(text)
    if len(cleaned) <= max_length:
        return cleaned

    logger.info("Transcript over budget (%d > %d chars) — sampling start/middle/end",
                len(cleaned), max_length)
    return sample_transcript(cleaned, max_length)


def label_overhead() -> int:
    """Fixed number of characters the sample labels and separators add."""
    start_label, middle_label, end_label = SAMPLE_LABELS
    return len(_SAMPLE_FORMAT.format(
        start_label=start_label, start="",
        middle_label=middle_label, middle="",
        end_label=end_label, end="",
    ))


def transcript_preview(text: str, limit: int = TRANSCRIPT_PREVIEW_CHARS) -> str:
    """Short excerpt for responses: first `limit` chars, '...' if cut."""
    if len(text) > limit:
        return text[:limit] + '...'
    return text
