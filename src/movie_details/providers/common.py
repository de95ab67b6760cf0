"""Common helpers for providers."""
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol


class ProviderError(RuntimeError):
    """Raised when an external provider call fails.

    Covers transport, auth and quota failures as well as responses that
    cannot be parsed into the expected shape.
    """

    def __init__(self, message: str, *, provider: str, cause: Optional[Exception] = None) -> None:
        detail = f"{message}: {cause}" if cause else message
        super().__init__(detail)
        self.provider = provider
        if cause is not None:
            self.__cause__ = cause


class LanguageModelProvider(Protocol):
    """Turns a system role plus a prompt into free-form text."""

    def complete(self, role: str, prompt: str) -> str:
        ...


class MetadataProvider(Protocol):
    """Looks up a movie by title.

    Returns an OMDb-shaped mapping (``Title``, ``Year``, ``imdbRating``,
    ``Actors``, ``Genre``, ``Plot``, ``Response``, ``Error``). A miss is
    reported in-band with ``Response == "False"``; only transport or parse
    failures raise :class:`ProviderError`.
    """

    def lookup(self, title: str) -> Dict[str, Any]:
        ...


__all__ = ["LanguageModelProvider", "MetadataProvider", "ProviderError"]
