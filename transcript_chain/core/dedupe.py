"""
Near-duplicate sentence removal for noisy auto-generated captions.

A sentence is dropped when the leading 80% of a recently kept sentence
already appears inside it. Only the most recent kept sentences are
compared (RecentSentenceWindow), so repeats separated by more than the
window size are not caught.
"""

import re
import logging
from collections import OrderedDict

from transcript_chain.core.constants import (
    DEDUPE_MIN_SENTENCE_CHARS, DEDUPE_MIN_REFERENCE_CHARS,
    DEDUPE_PREFIX_RATIO, DEDUPE_WINDOW_SIZE,
)

logger = logging.getLogger(__name__)

_SENTENCE_SPLIT_RE = re.compile(r'(?<=[.!?])\s+')
_WHITESPACE_RE = re.compile(r'\s+')


class RecentSentenceWindow:
    """
    Insertion-ordered set of normalized sentences, capped at `capacity`.
    The oldest entry is evicted first.
    """

    def __init__(self, capacity: int = DEDUPE_WINDOW_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: OrderedDict[str, None] = OrderedDict()

    def add(self, normalized: str):
        if normalized in self._items:
            return
        self._items[normalized] = None
        if len(self._items) > self.capacity:
            self._items.popitem(last=False)

    def __contains__(self, normalized: str) -> bool:
        return normalized in self._items

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


def split_sentences(text: str) -> list[str]:
    return _SENTENCE_SPLIT_RE.split(text)


def normalize_sentence(sentence: str) -> str:
    return _WHITESPACE_RE.sub(' ', sentence.strip().lower())


def is_near_duplicate(normalized: str, window: RecentSentenceWindow,
                      min_reference_chars: int = DEDUPE_MIN_REFERENCE_CHARS,
                      prefix_ratio: float = DEDUPE_PREFIX_RATIO) -> bool:
    for prev in window:
        if len(prev) <= min_reference_chars:
            continue
        prefix = prev[:int(len(prev) * prefix_ratio)]
        if prefix in normalized:
            return True
    return False


def deduplicate_transcript(text: str, window: RecentSentenceWindow | None = None,
                           min_sentence_chars: int = DEDUPE_MIN_SENTENCE_CHARS) -> str:
    """
    Remove near-duplicate sentences, keeping original casing and order.
    Sentences shorter than `min_sentence_chars` after normalization are dropped.
    A fresh window is created per call unless one is passed in.
    """
    if window is None:
        window = RecentSentenceWindow()

    kept = []
    dropped = 0
    for sentence in split_sentences(text):
        normalized = normalize_sentence(sentence)
        if len(normalized) < min_sentence_chars:
            continue
        if is_near_duplicate(normalized, window):
            dropped += 1
            continue
        window.add(normalized)
        kept.append(sentence.strip())

    if dropped:
        logger.debug("Dropped %d near-duplicate sentences", dropped)
    return ' '.join(kept)
