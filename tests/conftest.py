"""Test configuration helpers."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest


def _ensure_src_on_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    for entry in (src, root):
        entry_str = str(entry)
        if entry_str not in sys.path:
            sys.path.insert(0, entry_str)


_ensure_src_on_path()

from movie_details import telemetry  # noqa: E402
from movie_details.config import PipelineConfig  # noqa: E402
from movie_details.prompt_templates import (  # noqa: E402
    FILE_CONTENT,
    METADATA_SIMULATION,
    THEME_DERIVATION,
    TITLE_REFINEMENT,
)

INCEPTION_PAYLOAD: Dict[str, str] = {
    "Title": "Inception",
    "Year": "2010",
    "imdbRating": "8.8",
    "Actors": "Leonardo DiCaprio, Joseph Gordon-Levitt, Elliot Page, Tom Hardy, Ken Watanabe, Cillian Murphy",
    "Genre": "Action, Adventure, Sci-Fi",
    "Plot": "A thief who steals corporate secrets through dream-sharing technology plants an idea.",
    "Response": "True",
}

_ROLE_NAMES = {
    TITLE_REFINEMENT.system_prompt: "title",
    METADATA_SIMULATION.system_prompt: "simulation",
    THEME_DERIVATION.system_prompt: "theme",
    FILE_CONTENT.system_prompt: "file",
}


class StubLLM:
    """Scripted language model keyed by prompt kind (title/simulation/theme/file).

    A value may be a string, an exception instance (raised) or a callable
    taking the prompt.
    """

    def __init__(self, **answers: Any) -> None:
        self.answers = answers
        self.calls: List[Tuple[str, str]] = []

    def complete(self, role: str, prompt: str) -> str:
        kind = _ROLE_NAMES.get(role, "unknown")
        self.calls.append((kind, prompt))
        answer = self.answers.get(kind, "")
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(prompt)
        return answer

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.calls]


class StubMetadata:
    def __init__(self, payload: Any = None, *, error: Optional[Exception] = None) -> None:
        self.payload = dict(INCEPTION_PAYLOAD) if payload is None else payload
        self.error = error
        self.calls: List[str] = []
        self.closed = False

    def lookup(self, title: str) -> Any:
        self.calls.append(title)
        if self.error is not None:
            raise self.error
        return self.payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GOOGLE_API_KEY",
        "OMDB_API_KEY",
        "MOVIE_DETAILS_CONFIG",
        "MOVIE_DETAILS_USE_FIXTURE",
        "MOVIE_DETAILS_METADATA_SOURCE",
        "MOVIE_DETAILS_OUTPUT_DIR",
        "MOVIE_DETAILS_MODEL",
        "MOVIE_DETAILS_TEMPERATURE",
        "MOVIE_DETAILS_TIMEOUT_S",
        "MOVIE_DETAILS_LLM_FILE_CONTENT",
        "MOVIE_DETAILS_TELEMETRY_LOG",
        "OMDB_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    telemetry.clear_events()


@pytest.fixture
def stub_llm() -> Callable[..., StubLLM]:
    return StubLLM


@pytest.fixture
def stub_metadata() -> Callable[..., StubMetadata]:
    return StubMetadata


@pytest.fixture
def fixture_config(tmp_path: Path) -> PipelineConfig:
    return PipelineConfig(fixture_mode=True, output_dir=tmp_path / "movie_details")
