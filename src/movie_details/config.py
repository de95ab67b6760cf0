"""Configuration for the movie details pipeline.

Values are layered: built-in defaults, then the optional YAML settings file,
then environment variables. Credentials are only read from the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml

from movie_details.providers.gemini import DEFAULT_MODEL
from movie_details.providers.omdb import OMDB_BASE_URL
from movie_details.utils.env import env_flag, fixture_mode_enabled, resolve_metadata_source

_LOG = logging.getLogger("movie_details.config")

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "movie_details.yaml"
DEFAULT_OUTPUT_DIR = "movie_details"
DEFAULT_TITLE = "Inception 2010"

_FILE_KEYS = {
    "metadata_source",
    "output_dir",
    "model",
    "temperature",
    "request_timeout_s",
    "omdb_base_url",
    "llm_file_content",
}
_ENV_KEYS = {
    "metadata_source": "MOVIE_DETAILS_METADATA_SOURCE",
    "output_dir": "MOVIE_DETAILS_OUTPUT_DIR",
    "model": "MOVIE_DETAILS_MODEL",
    "temperature": "MOVIE_DETAILS_TEMPERATURE",
    "request_timeout_s": "MOVIE_DETAILS_TIMEOUT_S",
    "omdb_base_url": "OMDB_BASE_URL",
    "llm_file_content": "MOVIE_DETAILS_LLM_FILE_CONTENT",
}


class ConfigError(ValueError):
    """Raised when the pipeline cannot be configured (missing credentials, bad values)."""


@dataclass(frozen=True)
class PipelineConfig:
    """Resolved pipeline settings, injected into :class:`MoviePipeline`."""

    google_api_key: Optional[str] = None
    omdb_api_key: Optional[str] = None
    metadata_source: Literal["omdb", "simulated"] = "omdb"
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR)
    model: str = DEFAULT_MODEL
    temperature: float = 0.1
    request_timeout_s: float = 30.0
    omdb_base_url: str = OMDB_BASE_URL
    llm_file_content: bool = False
    fixture_mode: bool = False

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        config_path: Path | str | None = None,
    ) -> PipelineConfig:
        data = os.environ if env is None else env
        explicit_path = config_path or data.get("MOVIE_DETAILS_CONFIG")
        settings = load_settings_file(Path(explicit_path) if explicit_path else DEFAULT_CONFIG_PATH, required=bool(explicit_path))
        for key, env_name in _ENV_KEYS.items():
            value = data.get(env_name)
            if value not in (None, ""):
                settings[key] = value

        fixture_mode = fixture_mode_enabled(data)
        google_api_key = (data.get("GOOGLE_API_KEY") or "").strip() or None
        omdb_api_key = (data.get("OMDB_API_KEY") or "").strip() or None

        try:
            metadata_source = resolve_metadata_source(settings.get("metadata_source"))
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc
        temperature = _coerce_float(settings.get("temperature"), name="temperature", default=0.1)
        if not 0.0 <= temperature <= 2.0:
            raise ConfigError("temperature must be between 0.0 and 2.0")
        timeout = _coerce_float(settings.get("request_timeout_s"), name="request_timeout_s", default=30.0)
        if timeout <= 0:
            raise ConfigError("request_timeout_s must be greater than zero")

        if not fixture_mode:
            if google_api_key is None:
                raise ConfigError("GOOGLE_API_KEY is not set")
            if omdb_api_key is None:
                if metadata_source == "omdb":
                    raise ConfigError("OMDB_API_KEY is not set (required for the 'omdb' metadata source)")
                _LOG.warning("OMDB_API_KEY is not set; metadata will be simulated by the language model")

        return cls(
            google_api_key=google_api_key,
            omdb_api_key=omdb_api_key,
            metadata_source=metadata_source,
            output_dir=Path(str(settings.get("output_dir") or DEFAULT_OUTPUT_DIR)).expanduser(),
            model=str(settings.get("model") or DEFAULT_MODEL),
            temperature=temperature,
            request_timeout_s=timeout,
            omdb_base_url=str(settings.get("omdb_base_url") or OMDB_BASE_URL),
            llm_file_content=_coerce_flag(settings.get("llm_file_content")),
            fixture_mode=fixture_mode,
        )

    def with_overrides(self, **changes: Any) -> PipelineConfig:
        return replace(self, **changes)


def load_settings_file(path: Path, *, required: bool = False) -> Dict[str, Any]:
    """Read the YAML settings file, keeping only known keys."""

    if not path.exists():
        if required:
            raise ConfigError(f"Config file not found at {path}")
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read config file at {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file at {path} must contain a mapping")
    unknown = sorted(set(data) - _FILE_KEYS)
    if unknown:
        _LOG.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {key: value for key, value in data.items() if key in _FILE_KEYS}


def _coerce_float(value: Any, *, name: str, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name} value: {value!r}") from exc


def _coerce_flag(value: Any) -> bool:
    # YAML gives real booleans; environment overrides arrive as text.
    if isinstance(value, bool):
        return value
    return env_flag(None if value is None else str(value))


__all__ = ["ConfigError", "DEFAULT_CONFIG_PATH", "DEFAULT_TITLE", "PipelineConfig", "load_settings_file"]
