"""
Caption payload parsing → flat text.
Handles block-formatted subtitle files (SRT, and VTT headers) and
JSON segment lists returned by caption APIs.
Removes timing lines, cue numbers and markup; joins with single spaces.
"""

import re
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_CUE_ID_RE = re.compile(r'^\d+$')
_TIMING_MARKER = '-->'
_HTML_TAG_RE = re.compile(r'<[^>]+>')
_VTT_META_RE = re.compile(r'^(?:WEBVTT|Kind:|Language:|NOTE\b)')
_WHITESPACE_RE = re.compile(r'\s+')


def parse_caption_blocks(content: str) -> str:
    """
    Convert a block-formatted caption payload (SRT/VTT) to plain text.
    """
    kept = []
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if _CUE_ID_RE.match(stripped):
            continue
        if _TIMING_MARKER in stripped:
            continue
        if _VTT_META_RE.match(stripped):
            continue
        text = _HTML_TAG_RE.sub('', stripped).strip()
        if text:
            kept.append(text)
    return ' '.join(kept)


def parse_caption_file(path: Path) -> str:
    """Read a subtitle file from disk and flatten it."""
    content = path.read_text(encoding='utf-8', errors='replace')
    return parse_caption_blocks(content)


def _segment_text(segment) -> str:
    # dict segments from JSON APIs, objects with .text from youtube_transcript_api
    if isinstance(segment, dict):
        value = segment.get('text', '')
    else:
        value = getattr(segment, 'text', '')
    return value if isinstance(value, str) else ''


def join_segments(segments) -> str:
    """
    Concatenate the text field of each timed segment with single spaces.
    """
    parts = []
    for segment in segments or []:
        text = _WHITESPACE_RE.sub(' ', _segment_text(segment)).strip()
        if text:
            parts.append(text)
    return ' '.join(parts).strip()


def normalize_caption_payload(payload) -> str:
    """
    Flatten any supported caption payload.
    - str: block-formatted subtitle file contents
    - dict with 'content': API response wrapping a segment list
    - list / iterable of segments
    """
    if payload is None:
        return ''
    if isinstance(payload, str):
        return parse_caption_blocks(payload)
    if isinstance(payload, dict):
        content = payload.get('content')
        if isinstance(content, str):
            return parse_caption_blocks(content)
        return join_segments(content)
    return join_segments(payload)
