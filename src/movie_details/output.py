"""Filesystem helpers and the text layout of the movie record."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Optional

from .schemas import NOT_AVAILABLE, MovieMetadata

HEADER_RULE = "-" * 38


def ensure_directory(path: Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_text(path: Path, content: str) -> Path:
    """Write ``content`` to ``path`` (UTF-8), replacing any existing file.

    The text goes to a temp file in the same directory first and is moved
    into place with ``os.replace`` so readers never see a partial file.
    """

    path = Path(path)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".txt", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, str(path))
        tmp_path = None
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
    return path


def _value(text: Optional[str]) -> str:
    cleaned = (text or "").strip()
    return cleaned or NOT_AVAILABLE


def render_movie_document(metadata: MovieMetadata, theme: Optional[str], *, title: Optional[str] = None) -> str:
    """Build the fixed-layout text record for one movie."""

    return (
        f"Movie Title: {_value(title or metadata.title)} ({_value(metadata.year)})\n"
        f"{HEADER_RULE}\n"
        f"IMDb Rating:\n  {_value(metadata.imdb_rating)}\n\n"
        f"Main Cast:\n  {_value(metadata.main_cast)}\n\n"
        f"Genre(s):\n  {_value(metadata.genre)}\n\n"
        f"Movie Theme:\n  {_value(theme)}\n\n"
        f"Plot Summary:\n  {_value(metadata.plot_summary)}\n"
    )


__all__ = ["HEADER_RULE", "ensure_directory", "render_movie_document", "write_text"]
