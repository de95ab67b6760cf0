"""Environment parsing for the pipeline configuration."""

from __future__ import annotations

import os
from typing import Literal, Mapping, Optional, cast

FIXTURE_ENV = "MOVIE_DETAILS_USE_FIXTURE"
MetadataSource = Literal["omdb", "simulated"]

_TRUE_TOKENS = {"1", "true", "yes", "on"}
_FALSE_TOKENS = {"0", "false", "no", "off"}
_METADATA_SOURCES = ("omdb", "simulated")


def env_flag(value: Optional[str], *, default: bool = False) -> bool:
    """Parse an on/off setting; blank or unrecognized text yields ``default``."""

    token = (value or "").strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return default


def fixture_mode_enabled(env: Optional[Mapping[str, str]] = None) -> bool:
    """True when ``MOVIE_DETAILS_USE_FIXTURE`` asks for the offline providers."""
    data = os.environ if env is None else env
    return env_flag(data.get(FIXTURE_ENV))


def resolve_metadata_source(value: Optional[str], *, default: MetadataSource = "omdb") -> MetadataSource:
    source = (value or "").strip().lower() or default
    if source not in _METADATA_SOURCES:
        allowed = ", ".join(_METADATA_SOURCES)
        raise ValueError(f"Unsupported metadata source '{source}'. Expected one of: {allowed}.")
    return cast(MetadataSource, source)


__all__ = [
    "FIXTURE_ENV",
    "MetadataSource",
    "env_flag",
    "fixture_mode_enabled",
    "resolve_metadata_source",
]
