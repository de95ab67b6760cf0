"""Deterministic fixture providers for offline runs and tests.

Enabled with ``MOVIE_DETAILS_USE_FIXTURE=1``. Answers come from a small
built-in catalog so the whole pipeline can run without network access or
credentials.
"""

from __future__ import annotations

import difflib
import json
import re
from typing import Any, Dict, Mapping, Optional

from movie_details.prompt_templates import (
    FILE_CONTENT,
    METADATA_SIMULATION,
    THEME_DERIVATION,
    TITLE_REFINEMENT,
    UNCERTAIN_MARKER,
)

from .common import ProviderError

FIXTURE_CATALOG: Dict[str, Dict[str, str]] = {
    "Inception": {
        "Title": "Inception",
        "Year": "2010",
        "imdbRating": "8.8",
        "Actors": "Leonardo DiCaprio, Joseph Gordon-Levitt, Elliot Page, Tom Hardy, Ken Watanabe, Cillian Murphy",
        "Genre": "Action, Adventure, Sci-Fi",
        "Plot": (
            "A thief who steals corporate secrets through the use of dream-sharing technology is given"
            " the inverse task of planting an idea into the mind of a C.E.O."
        ),
        "Theme": "Dreams within dreams blur the line between memory, guilt and reality.",
        "Response": "True",
    },
    "The Matrix": {
        "Title": "The Matrix",
        "Year": "1999",
        "imdbRating": "8.7",
        "Actors": "Keanu Reeves, Laurence Fishburne, Carrie-Anne Moss",
        "Genre": "Action, Sci-Fi",
        "Plot": (
            "When a beautiful stranger leads computer hacker Neo to a forbidding underworld, he discovers"
            " the shocking truth: the life he knows is the elaborate deception of an evil cyber-intelligence."
        ),
        "Theme": "Awakening to a hidden truth and rebelling against a machine-made reality.",
        "Response": "True",
    },
    "Pulp Fiction": {
        "Title": "Pulp Fiction",
        "Year": "1994",
        "imdbRating": "8.9",
        "Actors": "John Travolta, Uma Thurman, Samuel L. Jackson",
        "Genre": "Crime, Drama",
        "Plot": (
            "The lives of two mob hitmen, a boxer, a gangster and his wife, and a pair of diner bandits"
            " intertwine in four tales of violence and redemption."
        ),
        "Theme": "Chance, violence and redemption colliding in a nonlinear criminal underworld.",
        "Response": "True",
    },
}

_NOT_FOUND_PAYLOAD = {"Response": "False", "Error": "Movie not found!"}
_YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")
_FIELD_RE = re.compile(r"^(?P<key>[A-Za-z ()]+):\s*(?P<value>.*)$", re.MULTILINE)


def match_catalog_title(text: str, catalog: Mapping[str, Mapping[str, str]] = FIXTURE_CATALOG) -> Optional[str]:
    """Return the catalog title closest to ``text`` (year hints ignored)."""

    query = _YEAR_RE.sub("", text or "").strip().lower()
    if not query:
        return None
    lowered = {title.lower(): title for title in catalog}
    if query in lowered:
        return lowered[query]
    reversed_query = " ".join(reversed(query.split()))
    if reversed_query in lowered:
        return lowered[reversed_query]
    matches = difflib.get_close_matches(query, list(lowered), n=1, cutoff=0.75)
    return lowered[matches[0]] if matches else None


def _prompt_fields(prompt: str) -> Dict[str, str]:
    return {m.group("key").strip().lower(): m.group("value").strip() for m in _FIELD_RE.finditer(prompt)}


class FixtureLanguageModel:
    """Answers the known pipeline prompts from :data:`FIXTURE_CATALOG`."""

    name = "fixture-llm"

    def __init__(self, catalog: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._catalog = catalog or FIXTURE_CATALOG

    def complete(self, role: str, prompt: str) -> str:
        fields = _prompt_fields(prompt)
        if role == TITLE_REFINEMENT.system_prompt:
            raw_title = fields.get("raw movie title", "")
            match = match_catalog_title(raw_title, self._catalog)
            return match if match else f"{raw_title} {UNCERTAIN_MARKER}"
        if role == METADATA_SIMULATION.system_prompt:
            title = prompt.split(":", 1)[-1].strip()
            match = match_catalog_title(title, self._catalog)
            payload = dict(self._catalog[match]) if match else dict(_NOT_FOUND_PAYLOAD, Title=title)
            payload.pop("Theme", None)
            return "```json\n" + json.dumps(payload, indent=2) + "\n```"
        if role == THEME_DERIVATION.system_prompt:
            match = match_catalog_title(fields.get("movie title", ""), self._catalog)
            if match and self._catalog[match].get("Theme"):
                return self._catalog[match]["Theme"]
            return f"A {fields.get('genre(s)', 'genre-spanning').lower()} story about people under pressure."
        if role == FILE_CONTENT.system_prompt:
            raise ProviderError("Fixture model does not author file content", provider=self.name)
        raise ProviderError("Fixture model received an unknown role", provider=self.name)


class FixtureMetadataProvider:
    """OMDb stand-in backed by :data:`FIXTURE_CATALOG`."""

    name = "fixture-omdb"

    def __init__(self, catalog: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._catalog = catalog or FIXTURE_CATALOG

    def lookup(self, title: str) -> Dict[str, Any]:
        match = match_catalog_title(title, self._catalog)
        if match is None:
            return dict(_NOT_FOUND_PAYLOAD)
        payload = dict(self._catalog[match])
        payload.pop("Theme", None)
        return payload


__all__ = [
    "FIXTURE_CATALOG",
    "FixtureLanguageModel",
    "FixtureMetadataProvider",
    "match_catalog_title",
]
