"""
Standardised error handling for transcript-chain.

Errors raised inside the pipeline carry an ErrorCode tag attached at the
point where the external call failed. classify_error() turns any exception
into retryability, an HTTP status and fixed user-facing copy. Untagged
exceptions (third-party libraries, generator collaborators) fall back to
exception-type checks and then to message pattern matching.
"""

import re
import subprocess
from dataclasses import dataclass

import requests

from transcript_chain.core.constants import (
    ErrorCode, RETRYABLE_ERRORS, HTTP_STATUS_BY_CODE, USER_MESSAGES,
)


class PipelineError(Exception):
    """Raised when the pipeline encounters a known error condition."""

    code = ErrorCode.UNKNOWN

    def __init__(self, message: str, code: str | None = None, retryable: bool | None = None):
        if code is not None:
            self.code = code
        self.message = message
        # auto-detect retryable from code if not explicitly set
        self.retryable = retryable if retryable is not None else (self.code in RETRYABLE_ERRORS)
        super().__init__(f"[{self.code}] {message}")


class NoIdentifier(PipelineError):
    code = ErrorCode.NO_IDENTIFIER


class NoTranscriptAvailable(PipelineError):
    code = ErrorCode.NO_TRANSCRIPT


class SpeechResultTooShort(PipelineError):
    code = ErrorCode.SPEECH_TOO_SHORT


class SpeechToTextFailed(PipelineError):
    code = ErrorCode.SPEECH_TO_TEXT_FAILED


class UpstreamTransient(PipelineError):
    code = ErrorCode.UPSTREAM_TIMEOUT


class UpstreamFailure(PipelineError):
    code = ErrorCode.UPSTREAM_FAILURE


@dataclass(frozen=True)
class ErrorClassification:
    code: str
    retryable: bool
    http_status: int
    user_message: str


def is_retryable(code: str) -> bool:
    return code in RETRYABLE_ERRORS


# ── Untagged error detection ─────────────────────────────────────────

_RATE_LIMIT_RE = re.compile(r'\b429\b|too many requests|rate[ -]?limit', re.IGNORECASE)
_RESET_RE = re.compile(
    r'econnreset|connection reset|connection aborted|socket hang up|'
    r'remote end closed connection|connection was closed|broken pipe',
    re.IGNORECASE,
)
_TIMEOUT_RE = re.compile(r'etimedout|timed out|timeout', re.IGNORECASE)

_TIMEOUT_TYPES = (TimeoutError, subprocess.TimeoutExpired, requests.exceptions.Timeout)
_RESET_TYPES = (ConnectionResetError, ConnectionAbortedError, BrokenPipeError)


def _detect_transient_code(err: BaseException) -> str | None:
    """Return a retryable ErrorCode for an untagged transient failure, or None."""
    if isinstance(err, _TIMEOUT_TYPES):
        return ErrorCode.UPSTREAM_TIMEOUT
    if isinstance(err, _RESET_TYPES):
        return ErrorCode.CONNECTION_RESET

    message = str(err)
    if _RATE_LIMIT_RE.search(message):
        return ErrorCode.RATE_LIMITED
    if _RESET_RE.search(message):
        return ErrorCode.CONNECTION_RESET
    if _TIMEOUT_RE.search(message):
        return ErrorCode.UPSTREAM_TIMEOUT
    # requests wraps resets in ConnectionError with varying wording
    if isinstance(err, requests.exceptions.ConnectionError):
        return ErrorCode.CONNECTION_RESET
    return None


def error_code_for(err: BaseException) -> str:
    """Resolve the ErrorCode of any exception."""
    if isinstance(err, PipelineError):
        return err.code
    return _detect_transient_code(err) or ErrorCode.UNKNOWN


def transient_error_from(err: BaseException, context: str) -> PipelineError | None:
    """
    Tag an untagged exception as UpstreamTransient if it looks transient.
    Returns None when the failure is not transient.
    """
    code = _detect_transient_code(err)
    if code is None:
        return None
    return UpstreamTransient(f"{context}: {err}", code=code)


def classify_error(err: BaseException) -> ErrorClassification:
    """
    Map an exception onto the error taxonomy.
    Classification happens once, at the boundary nearest the caller.
    """
    code = error_code_for(err)
    if isinstance(err, PipelineError):
        retryable = err.retryable
    else:
        retryable = is_retryable(code)

    return ErrorClassification(
        code=code,
        retryable=retryable,
        http_status=HTTP_STATUS_BY_CODE.get(code, 500),
        user_message=USER_MESSAGES.get(code, USER_MESSAGES[ErrorCode.UNKNOWN]),
    )


def is_retryable_error(err: BaseException) -> bool:
    return classify_error(err).retryable
