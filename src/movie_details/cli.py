"""Command line entry point: ``movie-details [TITLE WORDS...]``.

Title words are joined with single spaces; no words means the default title.
Credentials and settings come from the environment (see
:class:`movie_details.config.PipelineConfig`).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
import traceback
from typing import List, Optional, Sequence

from .config import DEFAULT_TITLE, ConfigError, PipelineConfig
from .orchestrator import MoviePipeline, StageError

_LOG = logging.getLogger("movie_details.cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="movie-details",
        description="Look up a movie, derive its theme and write a details file.",
    )
    p.add_argument("title", nargs="*", help=f'Raw movie title (default: "{DEFAULT_TITLE}")')
    return p


def resolve_title(words: Sequence[str]) -> str:
    title = " ".join(word.strip() for word in words if word.strip())
    return title or DEFAULT_TITLE


def _print_stage_failure(exc: StageError, title: str) -> None:
    print("--- Critical error during pipeline execution ---", file=sys.stderr)
    print(f"Title: {title}", file=sys.stderr)
    print(f"Stage: {exc.stage}", file=sys.stderr)
    print(f"Error: {exc.__cause__ or exc}", file=sys.stderr)
    if _LOG.isEnabledFor(logging.DEBUG):
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=os.environ.get("MOVIE_DETAILS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = PipelineConfig.from_env()
        pipeline = MoviePipeline(config)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    title = resolve_title(args.title)
    print(f'--- Processing movie title: "{title}" ---')
    try:
        with pipeline:
            record = pipeline.run(title)
    except StageError as exc:
        _print_stage_failure(exc, title)
        return 1

    print("--- Pipeline finished ---")
    print(f"Final Status: {record.final_message}")
    if record.written_path:
        print(f"Output File: {record.written_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
