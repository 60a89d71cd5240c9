#!/usr/bin/env python3
"""
transcript-chain v1.0.0 — command line entry point.

    transcript-chain transcript <url> [<url> ...] [--file urls.txt]
    transcript-chain channel <channel-url> [--start 1] [--end 50]
    transcript-chain doctor
"""

import sys
import json
import asyncio
import logging
import argparse
from dataclasses import asdict
from datetime import datetime

from transcript_chain.core.constants import (
    APP_NAME, APP_VERSION, APP_LOG_DIR, CHANNEL_PAGE_SIZE, EBOOK_TRANSCRIPT_MAX,
)
from transcript_chain.core.config import AppConfig
from transcript_chain.core.url_parse import parse_txt_file
from transcript_chain.core.pipeline import TranscriptPipeline
from transcript_chain.core.channel_list import list_channel_videos, is_channel_url
from transcript_chain.core.diagnostics import get_diagnostics
from transcript_chain.core.error_codes import classify_error

logger = logging.getLogger(APP_NAME)


def setup_logging(verbose: bool = False):
    """Log to <APP_LOG_DIR>/app.log and stderr."""
    APP_LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = APP_LOG_DIR / "app.log"
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_file, encoding="utf-8"),
            logging.StreamHandler(sys.stderr),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="YouTube transcript acquisition")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--no-stt", action="store_true",
                        help="disable the speech-to-text fallback")
    sub = parser.add_subparsers(dest="command", required=True)

    p_tr = sub.add_parser("transcript", help="fetch transcripts for one or more videos")
    p_tr.add_argument("urls", nargs="*", help="YouTube watch or youtu.be URLs")
    p_tr.add_argument("--file", help="text file with one URL per line")
    p_tr.add_argument("--max-length", type=int, default=None,
                      help="character budget for the prepared transcript")
    p_tr.add_argument("--long-form", action="store_true",
                      help=f"use the long-form budget ({EBOOK_TRANSCRIPT_MAX} chars)")

    p_ch = sub.add_parser("channel", help="list videos of a channel or playlist")
    p_ch.add_argument("url")
    p_ch.add_argument("--start", type=int, default=1)
    p_ch.add_argument("--end", type=int, default=CHANNEL_PAGE_SIZE)

    sub.add_parser("doctor", help="show tool and producer availability")
    return parser


async def run_transcripts(config: AppConfig, urls: list[str], max_length: int | None) -> int:
    pipeline = TranscriptPipeline(config)
    failures = 0
    # one request at a time; each request tries its producers sequentially
    for url in urls:
        outcome = await pipeline.run(url, max_length=max_length)
        if not outcome.success:
            failures += 1
        print(json.dumps({"url": url, "status": outcome.http_status, **outcome.to_dict()},
                         ensure_ascii=False, indent=2))
    return 1 if failures else 0


async def run_channel(url: str, start: int, end: int) -> int:
    if not is_channel_url(url):
        print(json.dumps({"success": False, "error": "Not a YouTube channel or playlist URL"}))
        return 1
    try:
        videos, has_more = await list_channel_videos(url, start, end)
    except Exception as e:
        classification = classify_error(e)
        logger.error("Channel listing failed: %s", e)
        print(json.dumps({"success": False, "error": classification.user_message}))
        return 1
    print(json.dumps({"success": True,
                      "data": {"videos": [asdict(v) for v in videos], "has_more": has_more}},
                     ensure_ascii=False, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    logger.info("%s v%s starting at %s", APP_NAME, APP_VERSION, datetime.now().isoformat())

    config = AppConfig()
    if args.no_stt:
        config.set('speech_to_text_enabled', False, persist=False)

    if args.command == "transcript":
        urls = list(args.urls)
        if args.file:
            urls.extend(parse_txt_file(args.file))
        if not urls:
            print("No URLs given", file=sys.stderr)
            return 2
        max_length = args.max_length
        if max_length is None and args.long_form:
            max_length = EBOOK_TRANSCRIPT_MAX
        return asyncio.run(run_transcripts(config, urls, max_length))

    if args.command == "channel":
        return asyncio.run(run_channel(args.url, args.start, args.end))

    if args.command == "doctor":
        print(json.dumps(asyncio.run(get_diagnostics(config)), indent=2))
        return 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
