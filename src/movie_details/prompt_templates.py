"""Prompt templates for the language-model backed pipeline stages."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class PromptTemplateSpec:
    """A system role plus a user prompt with ``str.format`` placeholders.

    Only ``user_prompt`` is formatted, so the system prompt may contain
    literal JSON braces.
    """

    template_id: str
    description: str
    system_prompt: str
    user_prompt: str
    input_variables: Tuple[str, ...]

    def render(self, **values: Any) -> str:
        missing = [name for name in self.input_variables if name not in values]
        if missing:
            raise ValueError(f"Prompt '{self.template_id}' is missing variables: {', '.join(missing)}")
        return self.user_prompt.format(**{name: values[name] for name in self.input_variables})

    def to_payload(self, **values: Any) -> Dict[str, Any]:
        """Return the rendered chat messages for logging or debugging."""

        return {
            "id": self.template_id,
            "description": self.description,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": self.render(**values)},
            ],
        }


UNCERTAIN_MARKER = "(UNCERTAIN)"


TITLE_REFINEMENT = PromptTemplateSpec(
    template_id="title_refinement_v1",
    description="Resolve a raw user title into the most likely official movie title",
    system_prompt=(
        "You are an expert movie title refiner. Given a user's raw movie title, your goal is to return"
        " the most likely official movie title."
        " Correct common misspellings, understand context (like 'bollywood', 'hollywood', release year"
        " clues if any), and disambiguate."
        " The words of a title may also be reversed, e.g. 'fiction pulp' means 'Pulp Fiction'.\n"
        "For example:\n"
        "- 'uri bollywood' should become 'Uri: The Surgical Strike'\n"
        "- 'inceptio' should become 'Inception'\n"
        "- 'terminator salvation' should become 'Terminator Salvation'\n"
        "If the input is already a clear and official-looking title, return it as is."
        " If you are highly uncertain or the input is too vague (e.g., just 'action movie'), return ONLY"
        f" the original input text, followed by ' {UNCERTAIN_MARKER}'."
        f" Your output should be JUST the refined title string (or original title + ' {UNCERTAIN_MARKER}')."
        " No other text."
    ),
    user_prompt="Raw movie title: {raw_title}\nRefined Title:",
    input_variables=("raw_title",),
)


METADATA_SIMULATION = PromptTemplateSpec(
    template_id="omdb_simulation_v1",
    description="Answer as the OMDb API would for a single title lookup",
    system_prompt=(
        "You are a movie information assistant acting as the OMDb API (http://www.omdbapi.com/)"
        " for a single title lookup. Return a SINGLE JSON object.\n"
        "If the movie is found based on your knowledge, populate:\n"
        '- "Title": string (official movie title)\n'
        '- "Year": string (e.g., "2010")\n'
        '- "imdbRating": string (e.g., "8.8")\n'
        '- "Actors": string (comma-separated list of main actors, ideally 3-5 names)\n'
        '- "Genre": string (comma-separated list of genres)\n'
        '- "Plot": string (full plot summary)\n'
        '- "Response": "True"\n'
        "If the movie is NOT found:\n"
        '- "Response": "False"\n'
        '- "Error": string (e.g., "Movie not found!")\n'
        '- "Title": the input title, and "N/A" for Year, imdbRating, Actors, Genre and Plot.\n'
        "Output only the JSON object. No explanations and no markdown fences."
    ),
    user_prompt="Look up the movie title: {title}",
    input_variables=("title",),
)


THEME_DERIVATION = PromptTemplateSpec(
    template_id="theme_derivation_v1",
    description="Derive a short thematic phrase from title, genre and plot",
    system_prompt=(
        "You are an expert movie analyst. Your task is to derive a concise 'Movie Theme' from the provided"
        " movie title, genre, and plot summary."
        " The theme should be a short, descriptive phrase (10-15 words max) capturing the central idea,"
        " tone, or dominant message, going beyond just listing genres."
        " For example, if genre is Action/Sci-Fi and plot involves a dystopian future, a good theme could be"
        " 'Rebellion against oppressive technology in a dystopian future.'"
        " Return only the theme."
    ),
    user_prompt="Movie Title: {title}\nGenre(s): {genre}\nPlot Summary: {plot}\n\nDerived Movie Theme:",
    input_variables=("title", "genre", "plot"),
)


FILE_CONTENT = PromptTemplateSpec(
    template_id="file_content_v1",
    description="Produce a filename and formatted text body for the movie record",
    system_prompt=(
        "You are an expert file creation assistant. Take movie details and return a SINGLE JSON object with"
        ' exactly two keys:\n'
        '1. "filename": a sanitized filename (lowercase, spaces to underscores, only letters, digits,'
        " underscore, hyphen and period, ending with .txt). Example: 'the_matrix_reloaded.txt'.\n"
        '2. "file_content": the formatted text content, following this exact structure:\n'
        "Movie Title: <title> (<year>)\n"
        "--------------------------------------\n"
        "IMDb Rating:\n  <imdbRating>\n\n"
        "Main Cast:\n  <mainCast>\n\n"
        "Genre(s):\n  <genre>\n\n"
        "Movie Theme:\n  <movieTheme>\n\n"
        "Plot Summary:\n  <plotSummary>\n\n"
        "Use 'N/A' for any value that is missing, empty or indicates an error."
        " Use newline characters for line breaks. Output only the JSON object, with no markdown fences."
    ),
    user_prompt=(
        "Generate the JSON for filename and file content using these details:\n"
        "Title: {title}\n"
        "Year: {year}\n"
        "IMDb Rating: {imdb_rating}\n"
        "Main Cast: {main_cast}\n"
        "Genre: {genre}\n"
        "Movie Theme: {theme}\n"
        "Plot Summary: {plot_summary}"
    ),
    input_variables=("title", "year", "imdb_rating", "main_cast", "genre", "theme", "plot_summary"),
)


TEMPLATES: Dict[str, PromptTemplateSpec] = {
    spec.template_id: spec
    for spec in (TITLE_REFINEMENT, METADATA_SIMULATION, THEME_DERIVATION, FILE_CONTENT)
}


def get_template(template_id: str) -> PromptTemplateSpec:
    try:
        return TEMPLATES[template_id]
    except KeyError as exc:
        raise KeyError(f"Unknown prompt template '{template_id}'") from exc


__all__ = [
    "FILE_CONTENT",
    "METADATA_SIMULATION",
    "PromptTemplateSpec",
    "TEMPLATES",
    "THEME_DERIVATION",
    "TITLE_REFINEMENT",
    "UNCERTAIN_MARKER",
    "get_template",
]
