"""Run one clip job from the command line and print where the result landed."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
import uuid
from dataclasses import replace

from dotenv import load_dotenv

from models import ClipJob
from services.config import ClipSettings, FetchMode
from services.errors import ClipError, ValidationError
from services.pipeline import ClipPipeline

load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cut a 1080x1920 titled clip from a video URL.")
    parser.add_argument("url")
    parser.add_argument("start", help="Start offset in seconds")
    parser.add_argument("end", help="End offset in seconds")
    parser.add_argument("title")
    parser.add_argument(
        "--fetch-mode",
        choices=[m.value for m in FetchMode],
        default=None,
        help="sections: yt-dlp fetches only the range; full: download all, then trim with ffmpeg",
    )
    cleanup = parser.add_mutually_exclusive_group()
    cleanup.add_argument("--cleanup-on-failure", dest="cleanup_on_failure", action="store_true", default=None)
    cleanup.add_argument("--keep-on-failure", dest="cleanup_on_failure", action="store_false")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None, *, pipeline: ClipPipeline | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if pipeline is None:
        settings = ClipSettings.from_env()
        if args.fetch_mode is not None:
            settings = replace(settings, fetch_mode=FetchMode(args.fetch_mode))
        if args.cleanup_on_failure is not None:
            settings = replace(settings, cleanup_on_failure=args.cleanup_on_failure)
        pipeline = ClipPipeline(settings)

    job = ClipJob(id=uuid.uuid4().hex, url=args.url, start=args.start, end=args.end, title=args.title)
    try:
        artifact = asyncio.run(pipeline.run(job))
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ClipError as exc:
        print(f"error: {exc}", file=sys.stderr)
        if job.workspace is not None and job.workspace.exists():
            print(f"workspace kept at {job.workspace}", file=sys.stderr)
        return 1

    print(artifact.file_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
