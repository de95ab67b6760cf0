"""Metadata provider that asks the language model to play OMDb."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from movie_details.prompt_templates import METADATA_SIMULATION
from movie_details.utils.text import extract_json_block

from .common import LanguageModelProvider, ProviderError

_LOG = logging.getLogger("movie_details.providers.simulated")


class SimulatedMetadataProvider:
    """Same ``lookup`` contract as :class:`~movie_details.providers.omdb.OmdbClient`.

    The model output may wrap the JSON in prose or code fences; it is run
    through :func:`extract_json_block` before parsing. Anything that still
    does not parse into an object raises :class:`ProviderError`.
    """

    name = "simulated"

    def __init__(self, llm: LanguageModelProvider) -> None:
        self._llm = llm

    def lookup(self, title: str) -> Dict[str, Any]:
        raw = self._llm.complete(METADATA_SIMULATION.system_prompt, METADATA_SIMULATION.render(title=title))
        _LOG.debug("simulated OMDb raw response for %r: %s", title, raw)
        cleaned = extract_json_block(raw)
        try:
            payload = json.loads(cleaned)
        except (TypeError, json.JSONDecodeError) as exc:
            raise ProviderError(
                f"Simulated OMDb response for {title!r} is not valid JSON",
                provider=self.name,
                cause=exc,
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError(f"Simulated OMDb payload for {title!r} is not an object", provider=self.name)
        return payload


__all__ = ["SimulatedMetadataProvider"]
