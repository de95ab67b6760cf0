from __future__ import annotations

import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

NOT_AVAILABLE = "N/A"
DEFAULT_NOT_FOUND_ERROR = "Movie not found!"

_TEXT_FIELDS = ("title", "year", "imdb_rating", "main_cast", "genre", "plot_summary")


class MovieMetadata(BaseModel):
    """Normalized movie facts, identical in shape for every metadata provider.

    Text fields never hold empty strings or ``None``: anything missing reads
    ``"N/A"``. A record with ``found=False`` always carries an ``error`` and an
    ``"N/A"`` plot; a found record never carries an ``error``.
    """

    title: str = NOT_AVAILABLE
    year: str = NOT_AVAILABLE
    imdb_rating: str = NOT_AVAILABLE
    main_cast: str = NOT_AVAILABLE
    genre: str = NOT_AVAILABLE
    plot_summary: str = NOT_AVAILABLE
    found: bool
    error: Optional[str] = None

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _default_not_available(cls, value: Any) -> str:
        if value is None:
            return NOT_AVAILABLE
        text = str(value).strip()
        return text or NOT_AVAILABLE

    @model_validator(mode="after")
    def _enforce_found_invariants(self) -> "MovieMetadata":
        if self.found:
            self.error = None
            return self
        error = (self.error or "").strip()
        self.error = error or DEFAULT_NOT_FOUND_ERROR
        self.plot_summary = NOT_AVAILABLE
        return self

    @classmethod
    def not_found(cls, title: Optional[str], error: str) -> "MovieMetadata":
        return cls(title=title, found=False, error=error)


class MetadataFound(BaseModel):
    kind: Literal["found"] = "found"
    metadata: MovieMetadata


class MetadataNotFound(BaseModel):
    kind: Literal["not_found"] = "not_found"
    metadata: MovieMetadata
    reason: str


MetadataOutcome = Annotated[
    Union[MetadataFound, MetadataNotFound],
    Field(discriminator="kind"),
]


class PipelineRecord(BaseModel):
    """Intermediate record threaded through the pipeline stages.

    Frozen: every stage hands the next one a copy built with
    ``model_copy(update=...)``. ``raw_title`` is set once at entry.
    """

    model_config = ConfigDict(frozen=True)

    raw_title: str = Field(..., min_length=1)
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    refined_title: Optional[str] = None
    title_uncertain: bool = False
    metadata: Optional[MovieMetadata] = None
    theme: Optional[str] = None
    final_message: Optional[str] = None
    written_path: Optional[str] = None

    @property
    def lookup_title(self) -> str:
        return self.refined_title or self.raw_title

    @property
    def display_title(self) -> str:
        if self.metadata is not None and self.metadata.title != NOT_AVAILABLE:
            return self.metadata.title
        return self.refined_title or self.raw_title or "the provided movie"


__all__ = [
    "DEFAULT_NOT_FOUND_ERROR",
    "NOT_AVAILABLE",
    "MetadataFound",
    "MetadataNotFound",
    "MetadataOutcome",
    "MovieMetadata",
    "PipelineRecord",
]
