"""HTTP entrypoint exposing the pipeline as a small FastAPI service.

Endpoints mirror the function tools this service sits beside: ``/health``,
``/ready`` and ``POST /invoke`` with ``{"title": "..."}``. Runs are
serialized; each invoke processes one title and returns the final record.
"""
from __future__ import annotations

import logging
import os
import uuid
from contextlib import asynccontextmanager
from threading import Lock
from typing import Any, Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field
import uvicorn

from movie_details import telemetry
from movie_details.config import DEFAULT_TITLE, ConfigError, PipelineConfig
from movie_details.orchestrator import MoviePipeline, StageError
from movie_details.schemas import PipelineRecord

LOG = logging.getLogger("movie_details.entrypoint")


class InvokeRequest(BaseModel):
    title: Optional[str] = Field(default=None, description="Raw movie title; blank uses the default title")


class InvokeResponse(BaseModel):
    status: Literal["success", "not_found", "error"]
    request_id: str
    record: PipelineRecord


def _response_status(record: PipelineRecord) -> str:
    if record.written_path:
        return "success"
    if record.metadata is not None and record.metadata.found:
        return "error"
    return "not_found"


def make_app(config: Optional[PipelineConfig] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.ready = False
        app.state.shutting_down = False
        app.state.config_error = None
        try:
            resolved = config or PipelineConfig.from_env()
            app.state.pipeline = MoviePipeline(resolved)
        except ConfigError as exc:
            LOG.error("movie_details not ready: %s", exc)
            app.state.config_error = str(exc)
            app.state.pipeline = None
        else:
            app.state.ready = True
            LOG.info("movie_details ready (metadata source: %s)", resolved.metadata_source)
            telemetry.emit_event("service.ready", {"metadata_source": resolved.metadata_source})
        try:
            yield
        finally:
            app.state.shutting_down = True
            if app.state.pipeline is not None:
                app.state.pipeline.close()

    app = FastAPI(title="movie_details Entrypoint", lifespan=lifespan)
    app.state.lock = Lock()
    app.state.ready = False
    app.state.shutting_down = False
    app.state.pipeline = None
    app.state.config_error = None

    @app.get("/health")
    def health() -> dict[str, str]:
        if getattr(app.state, "shutting_down", False):
            return {"status": "shutting_down"}
        return {"status": "ok"}

    @app.get("/ready")
    def ready() -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ready": bool(getattr(app.state, "ready", False)),
            "shutting_down": bool(getattr(app.state, "shutting_down", False)),
        }
        if app.state.config_error:
            payload["error"] = app.state.config_error
        return payload

    @app.post("/invoke")
    def invoke(req: InvokeRequest) -> dict[str, Any]:
        if not getattr(app.state, "ready", False) or app.state.pipeline is None:
            raise HTTPException(status_code=503, detail=app.state.config_error or "service not ready")
        if getattr(app.state, "shutting_down", False):
            raise HTTPException(status_code=503, detail="shutting down")

        title = (req.title or "").strip() or DEFAULT_TITLE
        request_id = uuid.uuid4().hex
        LOG.info("invoke.received", extra={"request_id": request_id})
        telemetry.emit_event("invoke.received", {"request_id": request_id, "title": title})

        with app.state.lock:
            try:
                record = app.state.pipeline.run(title, run_id=request_id)
            except StageError as exc:
                LOG.error("invoke failed in stage %s: %s", exc.stage, exc)
                raise HTTPException(status_code=502, detail=f"stage '{exc.stage}' failed: {exc.__cause__ or exc}")

        resp = InvokeResponse(status=_response_status(record), request_id=request_id, record=record)
        telemetry.emit_event("invoke.completed", {"request_id": request_id, "status": resp.status})
        return resp.model_dump()

    return app


app = make_app()


def main() -> None:
    logging.basicConfig(level=os.environ.get("MOVIE_DETAILS_LOG_LEVEL", "INFO").upper())
    host = os.environ.get("MOVIE_DETAILS_HOST", "127.0.0.1")
    port = int(os.environ.get("MOVIE_DETAILS_PORT", "5010"))
    LOG.info("Starting movie_details service on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


__all__ = ["InvokeRequest", "InvokeResponse", "app", "make_app"]


if __name__ == "__main__":
    main()
