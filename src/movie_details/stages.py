"""Pipeline stages.

Each stage takes the current :class:`PipelineRecord` and returns a new one,
except metadata acquisition, which returns a tagged
:data:`MetadataOutcome` the orchestrator branches on. Provider failures are
absorbed here wherever a fallback exists; title refinement is the one stage
that lets :class:`ProviderError` escape.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from .output import ensure_directory, render_movie_document, write_text
from .prompt_templates import FILE_CONTENT, THEME_DERIVATION, TITLE_REFINEMENT, UNCERTAIN_MARKER
from .providers.common import LanguageModelProvider, MetadataProvider, ProviderError
from .schemas import (
    NOT_AVAILABLE,
    MetadataFound,
    MetadataNotFound,
    MetadataOutcome,
    MovieMetadata,
    PipelineRecord,
)
from .utils.text import extract_json_block, sanitize_filename

_LOG = logging.getLogger("movie_details.stages")

LEGACY_UNCERTAIN_PREFIX = "UNCERTAIN:"
MAX_CAST_MEMBERS = 5
MIN_PLOT_LENGTH = 20
THEME_NO_PLOT = "Theme could not be determined due to lack of plot details."
THEME_FAILED = "Theme could not be determined due to processing error."
NOT_FOUND_DEFAULT_ERROR = "Metadata provider indicated the movie was not found."

_QUOTES = "\"'“”"
# Upper-case note either opening the answer or following the title after whitespace.
_LEGACY_NOTE = re.compile(r"(?:^|\s)" + re.escape(LEGACY_UNCERTAIN_PREFIX))


# --- Stage 1: title refinement ------------------------------------------------


def parse_refined_title(text: str) -> Tuple[str, bool]:
    """Split a refinement answer into ``(title, uncertain)``.

    Recognizes the ``" (UNCERTAIN)"`` suffix and the older upper-case
    ``"UNCERTAIN: ..."`` note, either as the whole answer or after the
    title. Titles that merely contain the word (``"Uncertain: A Documentary"``)
    are left alone. The title may come back empty.
    """

    cleaned = text.strip()
    uncertain = False
    if cleaned.upper().endswith(UNCERTAIN_MARKER):
        cleaned = cleaned[: -len(UNCERTAIN_MARKER)].strip()
        uncertain = True
    note = _LEGACY_NOTE.search(cleaned)
    if note is not None:
        cleaned = cleaned[: note.start()].strip()
        uncertain = True
    if len(cleaned) >= 2 and cleaned[0] in _QUOTES and cleaned[-1] in _QUOTES:
        cleaned = cleaned[1:-1].strip()
    return cleaned, uncertain


def refine_title(record: PipelineRecord, llm: LanguageModelProvider) -> PipelineRecord:
    raw_title = record.raw_title
    answer = llm.complete(TITLE_REFINEMENT.system_prompt, TITLE_REFINEMENT.render(raw_title=raw_title))
    if not answer or not answer.strip():
        _LOG.warning("Title refinement returned no text; keeping raw title %r", raw_title)
        return record.model_copy(update={"refined_title": raw_title, "title_uncertain": False})

    refined, uncertain = parse_refined_title(answer)
    refined = refined or raw_title
    if uncertain:
        _LOG.warning("Title refinement uncertain for %r (best guess %r)", raw_title, refined)
    else:
        _LOG.info("Refined title %r -> %r", raw_title, refined)
    return record.model_copy(update={"refined_title": refined, "title_uncertain": uncertain})


# --- Stage 2: metadata acquisition --------------------------------------------


def _pick(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return None


def _response_ok(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() == "true"


def _scalar(value: Any) -> Any:
    # Nested objects and arrays in a text field read as missing.
    if isinstance(value, (Mapping, list, tuple, set)):
        return None
    return value


def join_cast(actors: Any, limit: int = MAX_CAST_MEMBERS) -> str:
    """Comma-join at most ``limit`` actor names.

    Accepts a comma-separated string or a list; any other scalar is taken as
    a single name and nested objects are ignored.
    """

    if actors is None:
        return NOT_AVAILABLE
    if isinstance(actors, (list, tuple)):
        names: List[str] = [str(name).strip() for name in actors if _scalar(name) is not None]
    elif _scalar(actors) is None:
        return NOT_AVAILABLE
    else:
        names = [name.strip() for name in str(actors).split(",")]
    names = [name for name in names if name and name != NOT_AVAILABLE]
    return ", ".join(names[:limit]) or NOT_AVAILABLE


def metadata_from_payload(payload: Mapping[str, Any], fallback_title: str) -> MovieMetadata:
    """Normalize an OMDb-shaped payload into :class:`MovieMetadata`.

    Text fields holding objects or arrays are treated as missing (``"N/A"``).
    """

    title = _scalar(_pick(payload, "Title", "title")) or fallback_title
    if not _response_ok(_pick(payload, "Response", "response")):
        error = _scalar(_pick(payload, "Error", "error")) or NOT_FOUND_DEFAULT_ERROR
        return MovieMetadata.not_found(title, str(error))
    return MovieMetadata(
        title=title,
        year=_scalar(_pick(payload, "Year", "year")),
        imdb_rating=_scalar(_pick(payload, "imdbRating", "imdb_rating", "ImdbRating")),
        main_cast=join_cast(_pick(payload, "Actors", "actors")),
        genre=_scalar(_pick(payload, "Genre", "genre")),
        plot_summary=_scalar(_pick(payload, "Plot", "plot")),
        found=True,
    )


def acquire_metadata(record: PipelineRecord, provider: MetadataProvider) -> MetadataOutcome:
    title = record.lookup_title
    if record.title_uncertain:
        error = f'Cannot reliably fetch data for uncertain title: "{title}"'
        _LOG.warning(error)
        return MetadataNotFound(metadata=MovieMetadata.not_found(title, error), reason=error)

    try:
        payload = provider.lookup(title)
    except ProviderError as exc:
        error = f"Metadata lookup failed: {exc}"
        _LOG.error("Metadata lookup for %r failed: %s", title, exc)
        return MetadataNotFound(metadata=MovieMetadata.not_found(title, error), reason=error)

    if not isinstance(payload, Mapping):
        error = f"Metadata provider returned {type(payload).__name__} instead of an object"
        return MetadataNotFound(metadata=MovieMetadata.not_found(title, error), reason=error)

    try:
        metadata = metadata_from_payload(payload, title)
    except (TypeError, ValueError, ValidationError) as exc:
        error = f'Metadata payload for "{title}" is malformed: {exc}'
        _LOG.error(error)
        return MetadataNotFound(metadata=MovieMetadata.not_found(title, error), reason=error)
    if not metadata.found:
        _LOG.warning("No metadata for %r: %s", title, metadata.error)
        return MetadataNotFound(metadata=metadata, reason=metadata.error or NOT_FOUND_DEFAULT_ERROR)
    _LOG.info("Fetched metadata for %s (%s), rating %s", metadata.title, metadata.year, metadata.imdb_rating)
    return MetadataFound(metadata=metadata)


# --- Stage 3: theme derivation ------------------------------------------------


def _plot_usable(metadata: Optional[MovieMetadata]) -> bool:
    if metadata is None or not metadata.found:
        return False
    plot = metadata.plot_summary.strip()
    return plot != NOT_AVAILABLE and len(plot) >= MIN_PLOT_LENGTH


def derive_theme(record: PipelineRecord, llm: LanguageModelProvider) -> PipelineRecord:
    metadata = record.metadata
    if not _plot_usable(metadata):
        return record.model_copy(update={"theme": THEME_NO_PLOT})

    prompt = THEME_DERIVATION.render(title=metadata.title, genre=metadata.genre, plot=metadata.plot_summary)
    try:
        theme = llm.complete(THEME_DERIVATION.system_prompt, prompt).strip()
    except ProviderError as exc:
        _LOG.error("Theme derivation for %r failed: %s", metadata.title, exc)
        return record.model_copy(update={"theme": THEME_FAILED})
    if not theme:
        _LOG.warning("Theme derivation for %r returned no text", metadata.title)
        theme = THEME_FAILED
    return record.model_copy(update={"theme": theme})


# --- Stage 4: output ------------------------------------------------------------


def _model_authored_file(
    record: PipelineRecord,
    metadata: MovieMetadata,
    title: str,
    llm: LanguageModelProvider,
) -> Optional[Tuple[str, str]]:
    prompt = FILE_CONTENT.render(
        title=title,
        year=metadata.year,
        imdb_rating=metadata.imdb_rating,
        main_cast=metadata.main_cast,
        genre=metadata.genre,
        theme=record.theme or NOT_AVAILABLE,
        plot_summary=metadata.plot_summary,
    )
    try:
        raw = llm.complete(FILE_CONTENT.system_prompt, prompt)
        payload: Dict[str, Any] = json.loads(extract_json_block(raw))
    except (ProviderError, TypeError, json.JSONDecodeError) as exc:
        _LOG.warning("Model-authored file content unavailable for %r: %s", title, exc)
        return None
    if not isinstance(payload, dict):
        _LOG.warning("Model-authored file payload for %r is not an object", title)
        return None
    filename = payload.get("filename")
    content = payload.get("file_content")
    if not isinstance(filename, str) or not filename.strip() or not isinstance(content, str) or not content.strip():
        _LOG.warning("Model-authored file payload for %r is missing 'filename' or 'file_content'", title)
        return None
    stem = filename.strip()
    if stem.lower().endswith(".txt"):
        stem = stem[: -len(".txt")]
    return f"{sanitize_filename(stem)}.txt", content


def write_movie_file(
    record: PipelineRecord,
    output_dir: Path,
    *,
    llm: Optional[LanguageModelProvider] = None,
    use_llm_content: bool = False,
) -> PipelineRecord:
    """Write branch: render the record, write it, report the outcome.

    Filesystem errors are reported through ``final_message`` and never raised.
    """

    metadata = record.metadata or MovieMetadata.not_found(record.lookup_title, NOT_FOUND_DEFAULT_ERROR)
    title = record.display_title

    authored = None
    if use_llm_content and llm is not None:
        authored = _model_authored_file(record, metadata, title, llm)
    if authored is not None:
        filename, content = authored
    else:
        filename = f"{sanitize_filename(title)}.txt"
        content = render_movie_document(metadata, record.theme, title=title)

    path = Path(output_dir) / filename
    try:
        ensure_directory(Path(output_dir))
        write_text(path, content)
    except OSError as exc:
        message = f'Error writing file "{path}" for "{title}": {exc}'
        _LOG.error(message)
        return record.model_copy(update={"final_message": message, "written_path": None})

    message = f'Successfully wrote movie details for "{title}" to: {path}'
    _LOG.info(message)
    return record.model_copy(update={"final_message": message, "written_path": str(path)})


def handle_not_found(record: PipelineRecord) -> PipelineRecord:
    """Not-found branch: explain why nothing was written. Never touches the filesystem."""

    title = record.display_title
    if record.title_uncertain:
        reason = (
            f'The initial movie title ("{record.raw_title}") was too uncertain for reliable processing.'
            f' Refined attempt: "{record.refined_title or record.raw_title}".'
        )
    elif record.metadata is not None and record.metadata.error:
        reason = f'Reason from metadata provider for "{title}": {record.metadata.error}'
    else:
        reason = f'Could not find details for "{title}".'

    _LOG.warning("Could not find or fully process details for %r. Reason: %s", title, reason)
    return record.model_copy(
        update={
            "final_message": f'Processing halted for "{title}": {reason}',
            "written_path": None,
        }
    )


__all__ = [
    "MAX_CAST_MEMBERS",
    "MIN_PLOT_LENGTH",
    "THEME_FAILED",
    "THEME_NO_PLOT",
    "acquire_metadata",
    "derive_theme",
    "handle_not_found",
    "join_cast",
    "metadata_from_payload",
    "parse_refined_title",
    "refine_title",
    "write_movie_file",
]
