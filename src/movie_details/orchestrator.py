"""Pipeline orchestrator: runs the stages in order and picks the terminal branch.

Usage (programmatic):
    from movie_details.config import PipelineConfig
    from movie_details.orchestrator import MoviePipeline
    pipeline = MoviePipeline(PipelineConfig.from_env())
    record = pipeline.run("Inception 2010")
    print(record.final_message)

Stages 1-3 always run in order (title refinement, metadata acquisition,
theme derivation). The outcome of metadata acquisition then selects exactly
one of the write branch or the not-found branch.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from . import telemetry
from .config import ConfigError, PipelineConfig
from .providers import build_providers
from .providers.common import LanguageModelProvider, MetadataProvider
from .schemas import MetadataFound, MetadataOutcome, PipelineRecord
from .stages import acquire_metadata, derive_theme, handle_not_found, refine_title, write_movie_file

_LOG = logging.getLogger("movie_details.orchestrator")

STAGE_ORDER = ("refine_title", "acquire_metadata", "derive_theme")


class StageError(RuntimeError):
    """A stage failed in a way the pipeline cannot recover from."""

    def __init__(self, stage: str, *, record: PipelineRecord, cause: Exception | None = None) -> None:
        detail = f"Stage '{stage}' failed"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
        self.stage = stage
        self.record = record
        if cause is not None:
            self.__cause__ = cause


class MoviePipeline:
    """Runs one movie title through the pipeline per :meth:`run` call."""

    def __init__(
        self,
        config: PipelineConfig,
        *,
        llm: Optional[LanguageModelProvider] = None,
        metadata_provider: Optional[MetadataProvider] = None,
    ) -> None:
        self.config = config
        if llm is None or metadata_provider is None:
            try:
                built_llm, built_metadata = build_providers(config)
            except ValueError as exc:
                raise ConfigError(str(exc)) from exc
            llm = llm if llm is not None else built_llm
            metadata_provider = metadata_provider if metadata_provider is not None else built_metadata
        self.llm = llm
        self.metadata_provider = metadata_provider
        self.stage_timings: List[Dict[str, Any]] = []

    def _run_stage(self, name: str, fn: Callable[[PipelineRecord], Any], record: PipelineRecord) -> Any:
        _LOG.info("[%s] running stage %s", record.run_id, name)
        start = time.perf_counter()
        try:
            result = fn(record)
        except Exception as exc:
            duration = time.perf_counter() - start
            _LOG.error("[%s] stage %s failed after %.3fs: %s", record.run_id, name, duration, exc)
            telemetry.emit_run_event("pipeline.failed", record, stage=name, error=str(exc), duration_s=duration)
            raise StageError(name, record=record, cause=exc) from exc
        duration = time.perf_counter() - start
        self.stage_timings.append({"stage": name, "duration_s": duration})
        telemetry.emit_run_event("stage.completed", record, stage=name, duration_s=duration)
        return result

    def run(self, raw_title: str, *, run_id: Optional[str] = None) -> PipelineRecord:
        """Process ``raw_title`` and return the final record.

        Raises :class:`StageError` when a stage fails without a fallback
        (title refinement provider errors). Every other outcome, including
        not-found titles and write failures, is reported via
        ``record.final_message``.
        """

        if not raw_title or not raw_title.strip():
            raise ValueError("raw_title is required")

        fields: Dict[str, Any] = {"raw_title": raw_title.strip()}
        if run_id:
            fields["run_id"] = run_id
        record = PipelineRecord(**fields)
        self.stage_timings = []
        telemetry.emit_run_event("pipeline.started", record)

        record = self._run_stage("refine_title", lambda r: refine_title(r, self.llm), record)
        outcome: MetadataOutcome = self._run_stage(
            "acquire_metadata", lambda r: acquire_metadata(r, self.metadata_provider), record
        )
        record = record.model_copy(update={"metadata": outcome.metadata})
        record = self._run_stage("derive_theme", lambda r: derive_theme(r, self.llm), record)

        telemetry.emit_run_event("pipeline.branch", record, branch=outcome.kind)
        if isinstance(outcome, MetadataFound):
            record = self._run_stage(
                "write_output",
                lambda r: write_movie_file(
                    r,
                    self.config.output_dir,
                    llm=self.llm,
                    use_llm_content=self.config.llm_file_content,
                ),
                record,
            )
        else:
            record = self._run_stage("not_found", handle_not_found, record)

        telemetry.emit_run_event(
            "pipeline.completed",
            record,
            branch=outcome.kind,
            written_path=record.written_path,
            stages=[timing["stage"] for timing in self.stage_timings],
        )
        _LOG.info("[%s] %s", record.run_id, record.final_message)
        return record

    def close(self) -> None:
        closer = getattr(self.metadata_provider, "close", None)
        if callable(closer):
            closer()

    def __enter__(self) -> MoviePipeline:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["MoviePipeline", "STAGE_ORDER", "StageError"]
