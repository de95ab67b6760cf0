from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from movie_details.schemas import (
    DEFAULT_NOT_FOUND_ERROR,
    NOT_AVAILABLE,
    MetadataFound,
    MetadataNotFound,
    MetadataOutcome,
    MovieMetadata,
    PipelineRecord,
)


def test_metadata_defaults_missing_fields_to_not_available():
    meta = MovieMetadata(title="Inception", year="", imdb_rating=None, found=True)
    assert meta.year == NOT_AVAILABLE
    assert meta.imdb_rating == NOT_AVAILABLE
    assert meta.main_cast == NOT_AVAILABLE
    assert meta.error is None


def test_found_metadata_drops_error():
    meta = MovieMetadata(title="Inception", found=True, error="stale")
    assert meta.error is None


def test_not_found_metadata_forces_error_and_plot():
    meta = MovieMetadata(title="Nope", plot_summary="Something happened.", found=False)
    assert meta.error == DEFAULT_NOT_FOUND_ERROR
    assert meta.plot_summary == NOT_AVAILABLE


def test_not_found_helper_keeps_given_error():
    meta = MovieMetadata.not_found("Nope", "Incorrect IMDb ID.")
    assert meta.found is False
    assert meta.title == "Nope"
    assert meta.error == "Incorrect IMDb ID."


def test_metadata_outcome_discriminates_on_kind():
    adapter = TypeAdapter(MetadataOutcome)
    found = adapter.validate_python({"kind": "found", "metadata": {"title": "Inception", "found": True}})
    missing = adapter.validate_python(
        {"kind": "not_found", "metadata": {"title": "Nope", "found": False}, "reason": "Movie not found!"}
    )
    assert isinstance(found, MetadataFound)
    assert isinstance(missing, MetadataNotFound)
    assert missing.metadata.error == DEFAULT_NOT_FOUND_ERROR


def test_pipeline_record_is_frozen():
    record = PipelineRecord(raw_title="inceptio")
    with pytest.raises(ValidationError):
        record.raw_title = "changed"
    updated = record.model_copy(update={"refined_title": "Inception"})
    assert record.refined_title is None
    assert updated.refined_title == "Inception"
    assert updated.run_id == record.run_id


def test_pipeline_record_requires_raw_title():
    with pytest.raises(ValidationError):
        PipelineRecord(raw_title="")


def test_display_title_prefers_metadata_then_refined_then_raw():
    record = PipelineRecord(raw_title="inceptio")
    assert record.display_title == "inceptio"
    record = record.model_copy(update={"refined_title": "Inception"})
    assert record.display_title == "Inception"
    assert record.lookup_title == "Inception"
    record = record.model_copy(update={"metadata": MovieMetadata(title="Inception (2010)", found=True)})
    assert record.display_title == "Inception (2010)"
    record = record.model_copy(update={"metadata": MovieMetadata(found=False)})
    assert record.display_title == "Inception"
