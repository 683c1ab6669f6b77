"""
Command Line Interface
======================

Generate a long video from the command line.

Usage:
    longvideo --title "Alpine Journey" --description "A hike across the Alps" --duration 30
    longvideo --title "Launch" --script-file script.txt --style promotional --quality 4k
    longvideo --title "Launch" --duration 60 --estimate
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

from .core.config import Config
from .core.exceptions import LongVideoError
from .production.models import LongVideoRequest, QualityTier, VideoStyle
from .utils.storage import save_metadata
from .workflow.events import EventType, ProgressEvent
from .workflow.orchestrator import LongVideoOrchestrator

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("HF_TOKEN", "HUGGINGFACE_TOKEN")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="longvideo",
        description="Generate a long-form video from short AI-generated clips",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --title "Alpine Journey" --description "A hike across the Alps" -d 30
  %(prog)s --title "Launch" --script-file script.txt --style promotional -q 4k
  %(prog)s --title "Launch" -d 60 --estimate
        """,
    )

    # Content
    parser.add_argument("-t", "--title", required=True, help="Video title")
    parser.add_argument("--description", default="", help="What the video is about")
    script = parser.add_mutually_exclusive_group()
    script.add_argument("--script", help="Narration script (split into scenes by sentence)")
    script.add_argument("--script-file", help="Read the script from a file")

    # Video settings
    parser.add_argument(
        "-d", "--duration",
        type=float,
        default=30,
        help="Total duration in seconds (default: 30)",
    )
    parser.add_argument(
        "--style",
        default=VideoStyle.CINEMATIC.value,
        choices=[style.value for style in VideoStyle],
        help="Visual style (default: cinematic)",
    )
    parser.add_argument(
        "--aspect-ratio",
        default="16:9",
        choices=sorted(LongVideoRequest.VALID_ASPECT_RATIOS),
        help="Aspect ratio (default: 16:9)",
    )
    parser.add_argument(
        "-q", "--quality",
        default=QualityTier.FULL_HD.value,
        choices=[tier.value for tier in QualityTier],
        help="Target quality (default: 1080p)",
    )

    # Config & credentials
    parser.add_argument("--config", help="Path to config file")
    parser.add_argument(
        "--token",
        help=f"API token (default: ${TOKEN_ENV_VARS[0]} or ${TOKEN_ENV_VARS[1]})",
    )

    # Output
    parser.add_argument("--metadata", help="Write the result to this JSON/YAML file")
    parser.add_argument("--estimate", action="store_true", help="Only print a time estimate")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    return parser.parse_args(argv)


def build_request(args) -> LongVideoRequest:
    """Build the request from parsed arguments."""
    script = args.script
    if args.script_file:
        script = Path(args.script_file).read_text()

    return LongVideoRequest(
        title=args.title,
        description=args.description,
        total_duration=args.duration,
        style=args.style,
        aspect_ratio=args.aspect_ratio,
        target_quality=args.quality,
        script=script,
    )


def print_event(event: ProgressEvent) -> None:
    """Console listener for step updates."""
    if event.event_type == EventType.STEP_UPDATED:
        payload = event.payload
        print(f"  [{payload['status']:>11}] {payload['step']:<20} {payload['progress']:>3}%  {payload['details'] or ''}")
    elif event.event_type == EventType.BATCH_STARTED:
        print(f"  batch {event.payload['batch']}/{event.payload['batch_count']}")


async def run(args) -> int:
    """Run the CLI; returns the process exit code."""
    request = build_request(args)
    config = Config.load(args.config)
    token = args.token or next((os.environ[name] for name in TOKEN_ENV_VARS if os.environ.get(name)), None)

    print("=" * 50)
    print("Long Video Generator")
    print("=" * 50)

    async with LongVideoOrchestrator(config=config, api_token=token, listeners=[print_event]) as orchestrator:
        if args.estimate:
            estimate = orchestrator.estimate_generation_time(request)
            print(f"\nClips: {estimate.clip_count} in {estimate.batch_count} batches")
            for stage, minutes in estimate.breakdown.items():
                print(f"  {stage:<18} {minutes:>5.1f} min")
            print(f"  {'total':<18} {estimate.total_minutes:>5.1f} min")
            return 0

        print(f"\nTitle: {request.title}")
        print(f"Duration: {request.total_duration}s  Style: {request.style_key}  Quality: {request.target_quality.value}\n")

        result = await orchestrator.generate_long_video(request)

    print("\n" + "-" * 50)
    print(f"Success: {result.success}")
    print(f"Clips: {result.successful_clips}/{result.total_clips} (avg quality {result.average_quality:.1f})")
    if result.video_url:
        print(f"Output: {result.video_url}")
    if result.error:
        print(f"Error: {result.error}")
    if args.metadata:
        print(f"Metadata: {save_metadata(result.to_dict(), args.metadata)}")
    print("=" * 50)

    return 0 if result.success else 1


def main(argv=None) -> None:
    """Console script entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nCancelled")
        code = 130
    except (LongVideoError, OSError) as e:
        print(f"\nError: {e}")
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
