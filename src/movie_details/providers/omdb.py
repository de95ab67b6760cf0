"""OMDb HTTP client."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .common import ProviderError

_LOG = logging.getLogger("movie_details.providers.omdb")

OMDB_BASE_URL = "http://www.omdbapi.com/"


class OmdbClient:
    """Look up a single title on OMDb (``?t=<title>&plot=full``).

    OMDb signals a miss in the body (``"Response": "False"``) and that payload
    is returned untouched. Non-2xx statuses, network errors and bodies that
    are not a JSON object raise :class:`ProviderError`.
    """

    name = "omdb"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = OMDB_BASE_URL,
        timeout_s: float = 30.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")
        self.base_url = base_url
        self._api_key = api_key
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout_s)

    def lookup(self, title: str) -> Dict[str, Any]:
        params = {"apikey": self._api_key, "t": title, "plot": "full"}
        _LOG.info("OMDb lookup for %r", title)
        try:
            response = self._client.get(self.base_url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ProviderError(f"OMDb request for {title!r} failed", provider=self.name, cause=exc) from exc
        except ValueError as exc:
            raise ProviderError(f"OMDb returned invalid JSON for {title!r}", provider=self.name, cause=exc) from exc
        if not isinstance(payload, dict):
            raise ProviderError(f"OMDb payload for {title!r} is not an object", provider=self.name)
        return payload

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


__all__ = ["OMDB_BASE_URL", "OmdbClient"]
