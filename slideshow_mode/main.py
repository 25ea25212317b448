from __future__ import annotations

import argparse
from pathlib import Path

from config_loader import load_config
from logging_utils import configure_logging, get_logger
from story_client import StoryGenerationError

from .errors import SlideshowError
from .pipeline import StorySlidesPipeline

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Story slideshow video generator")
    parser.add_argument("input", help="Path to a UTF-8 text file (extracted text, or the story with --no-generate)")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to YAML configuration (default: config.yaml)",
    )
    parser.add_argument(
        "--output-dir",
        help="Override output directory defined in config.yaml",
    )
    parser.add_argument(
        "--no-generate",
        action="store_true",
        help="Treat the input as the finished story and skip story generation",
    )
    parser.add_argument(
        "--print-plan",
        action="store_true",
        help="Print generated plan.json to stdout after completion",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.output_dir:
        output_override = Path(args.output_dir).expanduser().resolve()
        output_override.mkdir(parents=True, exist_ok=True)
        config.output_dir = output_override

    configure_logging(level=config.logging_level, log_file=config.log_file)

    text = Path(args.input).expanduser().read_text(encoding="utf-8")
    pipeline = StorySlidesPipeline(config)
    try:
        result = pipeline.run(text, generate=not args.no_generate)
    except (SlideshowError, StoryGenerationError) as exc:
        logger.error("Slideshow export failed: %s", exc)
        return 1
    finally:
        pipeline.sandbox.close()

    logger.info("Slideshow video created: %s (%d slides)", result.video_path, len(result.slides))

    if args.print_plan:
        print(result.plan_path.read_text(encoding="utf-8"))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
