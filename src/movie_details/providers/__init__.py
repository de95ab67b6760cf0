"""Provider integrations (language model, metadata lookup).

Each provider is a plain object satisfying one of the protocols in
:mod:`movie_details.providers.common`; :func:`build_providers` wires the
configured pair.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from .common import LanguageModelProvider, MetadataProvider, ProviderError
from .fixtures import FixtureLanguageModel, FixtureMetadataProvider
from .gemini import GeminiProvider
from .omdb import OmdbClient
from .simulated import SimulatedMetadataProvider

if TYPE_CHECKING:  # pragma: no cover
    from movie_details.config import PipelineConfig


def build_providers(config: "PipelineConfig") -> Tuple[LanguageModelProvider, MetadataProvider]:
    """Return ``(llm, metadata_provider)`` for ``config``."""

    if config.fixture_mode:
        return FixtureLanguageModel(), FixtureMetadataProvider()

    llm = GeminiProvider(
        api_key=config.google_api_key,
        model=config.model,
        temperature=config.temperature,
        timeout_s=config.request_timeout_s,
    )
    if config.metadata_source == "simulated":
        return llm, SimulatedMetadataProvider(llm)
    if not config.omdb_api_key:
        raise ValueError("omdb_api_key is required for the 'omdb' metadata source")
    metadata = OmdbClient(
        api_key=config.omdb_api_key,
        base_url=config.omdb_base_url,
        timeout_s=config.request_timeout_s,
    )
    return llm, metadata


__all__ = [
    "FixtureLanguageModel",
    "FixtureMetadataProvider",
    "GeminiProvider",
    "LanguageModelProvider",
    "MetadataProvider",
    "OmdbClient",
    "ProviderError",
    "SimulatedMetadataProvider",
    "build_providers",
]
