"""Text helpers for filenames and model output."""

from __future__ import annotations

import logging
import re
from typing import Any

_LOG = logging.getLogger("movie_details.utils.text")

UNTITLED_FILENAME = "untitled_movie"
MAX_FILENAME_LENGTH = 100

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9_.-]")
_DOT_RUN_RE = re.compile(r"\.{2,}")
# Opening fence may carry a language tag (```json, ```python ...) on its own line.
_FENCED_BLOCK_RE = re.compile(
    r"```(?:json\b|[\w+-]*[ \t]*(?=\r?\n))?\s*([\s\S]*?)\s*```",
    re.IGNORECASE,
)


def sanitize_filename(name: Any) -> str:
    """Return a filesystem-safe filename stem for ``name``.

    Never raises: anything that is not a usable string collapses to
    ``untitled_movie``. The result always matches ``^[a-z0-9_.-]{1,100}$``
    and sanitizing twice gives the same value.
    """

    if not isinstance(name, str) or not name:
        return UNTITLED_FILENAME
    cleaned = name.lower()
    cleaned = _WHITESPACE_RE.sub("_", cleaned)
    cleaned = _DISALLOWED_RE.sub("", cleaned)
    cleaned = _DOT_RUN_RE.sub(".", cleaned)
    cleaned = cleaned[:MAX_FILENAME_LENGTH]
    return cleaned or UNTITLED_FILENAME


def extract_json_block(text: Any) -> Any:
    """Pull a JSON payload out of model output.

    Returns the trimmed interior of the first fenced block when one exists,
    otherwise the whole input trimmed. Non-string input is handed back as-is.
    """

    if not isinstance(text, str):
        _LOG.warning("extract_json_block received %s instead of str; returning it unchanged", type(text).__name__)
        return text
    match = _FENCED_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


__all__ = [
    "MAX_FILENAME_LENGTH",
    "UNTITLED_FILENAME",
    "extract_json_block",
    "sanitize_filename",
]
