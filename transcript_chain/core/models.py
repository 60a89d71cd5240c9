"""
Data models (plain dataclasses) for transcript-chain.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TranscriptResult:
    text: str
    source: str                      # TranscriptSource value
    producer: Optional[str] = None   # name of the producer that succeeded


@dataclass
class ProducerAttempt:
    producer: str
    video_id: str
    text: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.text)


@dataclass
class RetryState:
    attempt: int = 0
    max_attempts: int = 1
    last_error: Optional[BaseException] = None

    @property
    def has_attempts_left(self) -> bool:
        return self.attempt + 1 < self.max_attempts


@dataclass(frozen=True)
class ChannelVideo:
    id: str
    title: str
    duration: str


class TranscriptProducer:
    """
    One strategy for obtaining transcript text.

    Subclasses implement attempt(), returning text when the producer's
    success predicate holds and None otherwise. Producers marked
    `terminal` have no fallback behind them, so the chain lets their
    errors propagate instead of logging them.
    """

    name = "producer"
    source = ""
    terminal = False

    async def attempt(self, video_id: str, reference: str) -> Optional[str]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
