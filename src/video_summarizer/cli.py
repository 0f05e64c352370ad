"""Command-line interface for summarizing YouTube videos."""

import argparse
import asyncio
import signal
import sys

from src.utils.logging import configure_logging, get_logger

from .config import get_config
from .exceptions import ConfigurationError
from .pipeline import VideoSummaryPipeline
from .schemas import SummaryResponse

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="YouTube Video Summarizer - Summarize videos from their transcripts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summarize the latest video of a channel
  python -m src.video_summarizer.cli summarize veritasium

  # Channel handle or URL also work
  python -m src.video_summarizer.cli summarize https://www.youtube.com/@veritasium

  # Summarize one specific video
  python -m src.video_summarizer.cli video "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

  # Verbose logging
  python -m src.video_summarizer.cli --log-level debug summarize veritasium
        """,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warn", "warning", "error"],
        help="Override LOG_LEVEL from environment",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize = subparsers.add_parser(
        "summarize", help="Summarize the latest video from a YouTube channel"
    )
    summarize.add_argument("channel", type=str, help="Channel name, handle or URL")

    video = subparsers.add_parser("video", help="Summarize a specific YouTube video")
    video.add_argument("url", type=str, help="YouTube video URL")

    return parser


def print_result(response: SummaryResponse) -> None:
    """Print a pipeline response as a framed block."""
    print("\n" + "=" * 60)
    if response.success and response.data is not None:
        data = response.data
        print("Video Summary")
        print("=" * 60)
        print(f"Title: {data.title}")
        if data.channel_name:
            print(f"Channel: {data.channel_name}")
        print(f"URL: {data.url}")
        print(f"Provider: {data.provider}")
        print("-" * 60)
        print(data.summary)
    else:
        print("Summarization Failed")
        print("=" * 60)
        print(f"❌ {response.error}")
    print("=" * 60 + "\n")


async def run(args: argparse.Namespace) -> int:
    """Run one pipeline invocation and return the process exit code."""
    config = get_config()

    try:
        pipeline = VideoSummaryPipeline(config)
    except ConfigurationError as e:
        logger.error("cli_configuration_failed")
        print(f"\n❌ {e}\n")
        return 1

    loop = asyncio.get_running_loop()
    current = asyncio.current_task()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, current.cancel)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # No signal support on this loop or thread
            pass

    logger.info("cli_started", command=args.command, provider=pipeline.provider_name)

    try:
        if args.command == "summarize":
            response = await pipeline.summarize_channel(args.channel)
        else:
            response = await pipeline.summarize_video(args.url)
    except asyncio.CancelledError:
        logger.warning("cli_interrupted", command=args.command)
        print("\n⚠️  Interrupted, browser closed")
        return 1
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
        await pipeline.aclose()

    print_result(response)
    logger.info("cli_completed", command=args.command, success=response.success)
    return 0 if response.success else 1


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the video summarizer.

    Parses arguments, applies the log level override and runs the pipeline.
    """
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure_logging(args.log_level)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
