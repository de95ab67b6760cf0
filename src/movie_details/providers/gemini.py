"""Gemini-backed language model provider."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .common import ProviderError

_LOG = logging.getLogger("movie_details.providers.gemini")

DEFAULT_MODEL = "gemini-1.5-flash-latest"


class GeminiProvider:
    """Complete prompts with the Google Gen AI SDK.

    The role text is sent as the system instruction and the prompt as the
    user content. Each request is bounded by ``timeout_s``.
    """

    name = "gemini"

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.1,
        timeout_s: float = 30.0,
        client: Any = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.timeout_s = timeout_s
        if client is None:
            if not api_key:
                raise ValueError("api_key is required when no client is supplied")
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=int(timeout_s * 1000)),
            )
        self._client = client

    def complete(self, role: str, prompt: str) -> str:
        config = types.GenerateContentConfig(
            system_instruction=role,
            temperature=self.temperature,
        )
        try:
            response = self._client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise ProviderError("Gemini completion failed", provider=self.name, cause=exc) from exc
        text = getattr(response, "text", None)
        if not text:
            _LOG.debug("Gemini returned no text for model %s", self.model)
            return ""
        return text


__all__ = ["DEFAULT_MODEL", "GeminiProvider"]
