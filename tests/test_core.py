#!/usr/bin/env python3
"""
Unit tests for transcript-chain core modules.
Tests cover: URL parsing, error classification, caption parsing,
deduplication, bounded sampling, configuration, workspaces, channel listing.
"""

import sys
import os
import subprocess
import tempfile
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch, AsyncMock

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import unittest

import requests

from transcript_chain.core.constants import (
    ErrorCode, CookiesMode, MAX_RETRIES, DISABLE_STT_ENV, SAMPLE_LABELS,
)
from transcript_chain.core.url_parse import (
    extract_video_id, validate_youtube_url, is_youtube_url, parse_input_lines, watch_url,
)
from transcript_chain.core.error_codes import (
    PipelineError, NoIdentifier, NoTranscriptAvailable, SpeechResultTooShort,
    UpstreamFailure, classify_error, is_retryable, is_retryable_error,
)
from transcript_chain.core.captions_parse import (
    parse_caption_blocks, parse_caption_file, join_segments, normalize_caption_payload,
)
from transcript_chain.core.dedupe import RecentSentenceWindow, deduplicate_transcript
from transcript_chain.core.truncate import (
    truncate_transcript, sample_transcript, label_overhead, transcript_preview,
)
from transcript_chain.core.config import AppConfig
from transcript_chain.core.cleanup import scoped_workspace
from transcript_chain.core.channel_list import (
    parse_flat_playlist, videos_tab_url, list_channel_videos,
)
from transcript_chain.core.security_utils import run_subprocess_capture, mask_secret


class TestURLParsing(unittest.TestCase):
    """Test YouTube URL parsing and validation."""

    def test_standard_url(self):
        self.assertEqual(
            extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ"),
            "dQw4w9WgXcQ",
        )

    def test_short_url(self):
        self.assertEqual(extract_video_id("https://youtu.be/dQw4w9WgXcQ"), "dQw4w9WgXcQ")

    def test_without_scheme_or_www(self):
        self.assertEqual(extract_video_id("youtube.com/watch?v=dQw4w9WgXcQ"), "dQw4w9WgXcQ")
        self.assertEqual(extract_video_id("http://youtu.be/dQw4w9WgXcQ"), "dQw4w9WgXcQ")

    def test_url_with_params(self):
        self.assertEqual(
            extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=120"),
            "dQw4w9WgXcQ",
        )

    def test_id_with_dash_and_underscore(self):
        self.assertEqual(extract_video_id("https://youtu.be/a-b_c-d_e-f"), "a-b_c-d_e-f")

    def test_other_shapes_rejected(self):
        self.assertIsNone(extract_video_id("https://www.youtube.com/embed/dQw4w9WgXcQ"))
        self.assertIsNone(extract_video_id("https://www.youtube.com/shorts/dQw4w9WgXcQ"))
        self.assertIsNone(extract_video_id("https://www.youtube.com/watch?list=x&v=dQw4w9WgXcQ"))

    def test_invalid_url(self):
        self.assertIsNone(extract_video_id("https://www.google.com"))
        self.assertIsNone(extract_video_id("not a url"))
        self.assertIsNone(extract_video_id("https://youtu.be/short"))
        self.assertIsNone(extract_video_id(""))

    def test_is_youtube_url(self):
        self.assertTrue(is_youtube_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ"))
        self.assertFalse(is_youtube_url("https://www.google.com"))

    def test_validate_raises_on_invalid(self):
        with self.assertRaises(NoIdentifier) as ctx:
            validate_youtube_url("https://www.google.com")
        self.assertEqual(ctx.exception.code, ErrorCode.NO_IDENTIFIER)
        self.assertFalse(ctx.exception.retryable)

    def test_watch_url(self):
        self.assertEqual(watch_url("dQw4w9WgXcQ"), "https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    def test_parse_input_lines(self):
        text = """
        https://www.youtube.com/watch?v=dQw4w9WgXcQ
        https://youtu.be/abc123def45

        not a url
        https://www.youtube.com/watch?v=xyz789abc12
        """
        self.assertEqual(len(parse_input_lines(text)), 3)


class TestErrorClassification(unittest.TestCase):
    """Test error taxonomy and classification."""

    def test_tagged_errors(self):
        cases = [
            (NoIdentifier("x"), 400, ErrorCode.NO_IDENTIFIER),
            (NoTranscriptAvailable("x"), 422, ErrorCode.NO_TRANSCRIPT),
            (SpeechResultTooShort("x"), 422, ErrorCode.SPEECH_TOO_SHORT),
            (UpstreamFailure("x"), 502, ErrorCode.UPSTREAM_FAILURE),
            (PipelineError("x", code=ErrorCode.RATE_LIMITED), 429, ErrorCode.RATE_LIMITED),
        ]
        for err, status, code in cases:
            result = classify_error(err)
            self.assertEqual(result.http_status, status)
            self.assertEqual(result.code, code)

    def test_tagged_retryability(self):
        self.assertFalse(classify_error(NoTranscriptAvailable("x")).retryable)
        self.assertTrue(classify_error(PipelineError("x", code=ErrorCode.UPSTREAM_TIMEOUT)).retryable)
        self.assertTrue(is_retryable(ErrorCode.CONNECTION_RESET))
        self.assertFalse(is_retryable(ErrorCode.UNKNOWN))

    def test_rate_limit_message(self):
        result = classify_error(RuntimeError("Request failed with status code 429"))
        self.assertTrue(result.retryable)
        self.assertEqual(result.http_status, 429)
        self.assertTrue(is_retryable_error(RuntimeError("Rate limit reached for requests")))

    def test_connection_failures(self):
        self.assertTrue(is_retryable_error(RuntimeError("read ECONNRESET")))
        self.assertTrue(is_retryable_error(RuntimeError("socket hang up")))
        self.assertTrue(is_retryable_error(ConnectionResetError()))
        self.assertTrue(is_retryable_error(requests.exceptions.ConnectionError("Connection aborted.")))

    def test_timeouts(self):
        for err in (TimeoutError(), RuntimeError("connect ETIMEDOUT 1.2.3.4:443"),
                    subprocess.TimeoutExpired(["whisper"], 5), requests.exceptions.ReadTimeout()):
            result = classify_error(err)
            self.assertTrue(result.retryable, err)
            self.assertEqual(result.http_status, 504)

    def test_unknown_hides_internal_text(self):
        result = classify_error(ValueError("secret internal detail"))
        self.assertFalse(result.retryable)
        self.assertEqual(result.http_status, 500)
        self.assertNotIn("secret", result.user_message)


class TestCaptionsParsing(unittest.TestCase):
    """Test caption payload flattening."""

    SRT = """1
00:00:00,000 --> 00:00:02,500
Hello, welcome to this video.

2
00:00:02,500 --> 00:00:05,000
<font color="#fff">Today</font> we talk about <i>Python</i>.

"""

    def test_parse_srt(self):
        self.assertEqual(
            parse_caption_blocks(self.SRT),
            "Hello, welcome to this video. Today we talk about Python.",
        )

    def test_parse_vtt(self):
        vtt = """WEBVTT
Kind: captions
Language: en

00:00:00.000 --> 00:00:05.000 align:start position:0%
Let's get <c>started</c>.
"""
        self.assertEqual(parse_caption_blocks(vtt), "Let's get started.")

    def test_parse_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "abc.en.srt"
            path.write_text(self.SRT, encoding="utf-8")
            result = parse_caption_file(path)
        self.assertNotIn("-->", result)
        self.assertNotIn("<i>", result)

    def test_json_segments(self):
        payload = {"lang": "en", "content": [
            {"text": " first part ", "offset": 0},
            {"text": "second\npart", "offset": 1200},
            {"text": "", "offset": 2400},
        ]}
        self.assertEqual(normalize_caption_payload(payload), "first part second part")

    def test_snippet_objects(self):
        snippets = [SimpleNamespace(text="one"), SimpleNamespace(text="two")]
        self.assertEqual(join_segments(snippets), "one two")

    def test_empty_payloads(self):
        self.assertEqual(normalize_caption_payload(None), "")
        self.assertEqual(normalize_caption_payload({"content": []}), "")
        self.assertEqual(parse_caption_blocks("\n\n1\n"), "")


class TestDeduplication(unittest.TestCase):
    """Test near-duplicate sentence removal."""

    def test_prefix_match_dropped(self):
        text = ("The quick brown fox jumps. Something else entirely here. "
                "The quick brown fox jumps again.")
        self.assertEqual(
            deduplicate_transcript(text),
            "The quick brown fox jumps. Something else entirely here.",
        )

    def test_hello_world_sequence(self):
        text = "Hello world. Hello world again. Hello world again and more."
        result = deduplicate_transcript(text)
        # "hello world." is longer than 10 chars, so its prefix also covers the second
        self.assertEqual(result, "Hello world.")
        self.assertNotIn("and more", result)

    def test_short_units_dropped(self):
        self.assertEqual(deduplicate_transcript("Hi. Ok. This is a real sentence."),
                         "This is a real sentence.")

    def test_short_references_do_not_suppress(self):
        # "go home." is too short to act as a reference
        self.assertEqual(deduplicate_transcript("Go home. Go home now please."),
                         "Go home. Go home now please.")

    def test_case_and_whitespace_normalized(self):
        text = "This   is the FIRST sentence! this is the first sentence, repeated."
        self.assertEqual(deduplicate_transcript(text), "This   is the FIRST sentence!")

    def test_window_eviction(self):
        text = ("Alpha sentence number one. Bravo sentence number two. "
                "Charlie sentence number three. Alpha sentence number one.")
        self.assertEqual(deduplicate_transcript(text).count("Alpha"), 1)
        small = deduplicate_transcript(text, window=RecentSentenceWindow(capacity=2))
        self.assertEqual(small.count("Alpha"), 2)

    def test_window_capacity(self):
        window = RecentSentenceWindow(capacity=3)
        for i in range(5):
            window.add(f"sentence {i}")
        self.assertEqual(len(window), 3)
        self.assertNotIn("sentence 0", window)
        self.assertIn("sentence 4", window)
        with self.assertRaises(ValueError):
            RecentSentenceWindow(capacity=0)

    def test_idempotent(self):
        texts = [
            "Hello world. Hello world again. Hello world again and more.",
            "so today we are going to talk. so today we are going to talk about it. "
            "right. And then   we move on! Did you see that? did you see that one?",
            "No punctuation at all in this caption line",
            "",
        ]
        for text in texts:
            once = deduplicate_transcript(text)
            self.assertEqual(deduplicate_transcript(once), once)


class TestTruncation(unittest.TestCase):
    """Test bounded sampling."""

    def test_short_text_unchanged(self):
        text = "A short transcript. With two sentences."
        self.assertEqual(truncate_transcript(text, 1000), text)

    def test_sample_parts(self):
        text = "a" * 10 + "b" * 10 + "c" * 10
        start, middle, end = SAMPLE_LABELS
        self.assertEqual(
            sample_transcript(text, 9),
            f"{start}\naaa\n\n{middle}\nbbb\n\n{end}\nccc",
        )

    def test_label_overhead_matches_sample(self):
        text = "0123456789" * 100
        self.assertEqual(len(sample_transcript(text, 300)), 300 + label_overhead())
        start, middle, end = SAMPLE_LABELS
        self.assertEqual(label_overhead(), len(start) + len(middle) + len(end) + 7)

    def test_long_text_bounded(self):
        text = " ".join(f"Basket {i} held many apples." for i in range(2000))
        result = truncate_transcript(text, 3000)
        self.assertLessEqual(len(result), 3000 + label_overhead())
        for label in SAMPLE_LABELS:
            self.assertIn(label, result)
        self.assertTrue(result.split("\n")[1].startswith("Basket 0 held"))
        self.assertTrue(result.endswith("Basket 1999 held many apples."))

    def test_bound_holds_for_any_length(self):
        for n in (0, 10, 299, 300, 301, 5000):
            text = "x" * n
            self.assertLessEqual(len(truncate_transcript(text, 300)), 300 + label_overhead())

    def test_preview(self):
        self.assertEqual(transcript_preview("abc", limit=5), "abc")
        self.assertEqual(transcript_preview("abcdefgh", limit=5), "abcde...")


class TestConfig(unittest.TestCase):
    """Test configuration defaults and validation."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "config.json"

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_defaults(self):
        config = AppConfig(self.path)
        self.assertEqual(config.max_retries, MAX_RETRIES)
        self.assertEqual(config.transcript_languages, ["ko", "en", "ja"])
        self.assertEqual(config.cookies_mode, CookiesMode.OFF)

    def test_validation(self):
        config = AppConfig(self.path)
        config.set('max_retries', 'abc')
        self.assertEqual(config.max_retries, MAX_RETRIES)
        config.set('subtitle_languages', 'en, ja')
        self.assertEqual(config.subtitle_languages, ["en", "ja"])
        config.set('whisper_model', 'gigantic')
        self.assertEqual(config.whisper_model, 'small')
        config.set('cookies_mode', 'ALWAYS')
        self.assertEqual(config.cookies_mode, CookiesMode.OFF)

    def test_persisted(self):
        AppConfig(self.path).set('max_transcript_length', 25000)
        self.assertEqual(AppConfig(self.path).max_transcript_length, 25000)

    def test_stt_env_override(self):
        config = AppConfig(self.path)
        with patch.dict(os.environ, {DISABLE_STT_ENV: "1"}):
            self.assertFalse(config.speech_to_text_enabled)
        with patch.dict(os.environ, {DISABLE_STT_ENV: ""}):
            self.assertTrue(config.speech_to_text_enabled)

    def test_api_key_from_env(self):
        config = AppConfig(self.path)
        with patch.dict(os.environ, {"SUPADATA_API_KEY": "  "}):
            self.assertIsNone(config.supadata_api_key)
        with patch.dict(os.environ, {"SUPADATA_API_KEY": "sd_123456"}):
            self.assertEqual(config.supadata_api_key, "sd_123456")
            self.assertNotIn("sd_123456", str(config.as_dict()))


class TestWorkspace(unittest.TestCase):
    """Test scoped workspaces."""

    def test_removed_on_success(self):
        with scoped_workspace() as ws:
            (ws / "file.txt").write_text("x")
        self.assertFalse(ws.exists())

    def test_removed_on_error(self):
        with tempfile.TemporaryDirectory() as parent:
            with self.assertRaises(RuntimeError):
                with scoped_workspace(parent=Path(parent)) as ws:
                    (ws / "audio.m4a").write_bytes(b"\x00")
                    raise RuntimeError("boom")
            self.assertEqual(list(Path(parent).iterdir()), [])

    def test_unique_names(self):
        with scoped_workspace() as a, scoped_workspace() as b:
            self.assertNotEqual(a, b)


class TestSecurityUtils(unittest.IsolatedAsyncioTestCase):
    """Test subprocess helper and secret masking."""

    async def test_rejects_string_args(self):
        with self.assertRaises(TypeError):
            await run_subprocess_capture("yt-dlp --version")

    async def test_captures_output(self):
        result = await run_subprocess_capture([sys.executable, "-c", "print('hi')"], timeout=30)
        self.assertEqual(result.returncode, 0)
        self.assertEqual(result.stdout.strip(), "hi")

    async def test_timeout_kills(self):
        with self.assertRaises(subprocess.TimeoutExpired):
            await run_subprocess_capture(
                [sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.5)

    def test_mask_secret(self):
        self.assertEqual(mask_secret(None), "<unset>")
        self.assertEqual(mask_secret("abcdef123"), "****f123")


class TestChannelListing(unittest.IsolatedAsyncioTestCase):
    """Test channel listing helpers."""

    def test_videos_tab_url(self):
        self.assertEqual(videos_tab_url("https://www.youtube.com/@SomeChannel/"),
                         "https://www.youtube.com/@SomeChannel/videos")
        self.assertEqual(videos_tab_url("https://www.youtube.com/playlist?list=PL1"),
                         "https://www.youtube.com/playlist?list=PL1")

    def test_parse_flat_playlist(self):
        stdout = "abc123def45|||First|||3:21\n\n|||No id|||1:00\nxyz789abc12||||||\n"
        videos = parse_flat_playlist(stdout)
        self.assertEqual([v.id for v in videos], ["abc123def45", "xyz789abc12"])
        self.assertEqual(videos[1].title, "(untitled)")

    async def test_has_more(self):
        stdout = "a1|||One|||1:00\nb2|||Two|||2:00\nc3|||Three|||3:00\n"
        completed = subprocess.CompletedProcess([], 0, stdout=stdout, stderr="")
        with patch("transcript_chain.core.channel_list.run_subprocess_capture",
                   AsyncMock(return_value=completed)) as runner:
            videos, has_more = await list_channel_videos("https://www.youtube.com/@x", 1, 2)
        self.assertTrue(has_more)
        self.assertEqual(len(videos), 2)
        args = runner.call_args[0][0]
        self.assertIn("https://www.youtube.com/@x/videos", args)
        self.assertEqual(args[args.index("--playlist-end") + 1], "3")

    async def test_invalid_range(self):
        with self.assertRaises(ValueError):
            await list_channel_videos("https://www.youtube.com/@x", 5, 2)


if __name__ == "__main__":
    unittest.main()
