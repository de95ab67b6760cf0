"""movie_details package.

Refines a raw movie title, looks up its metadata, derives a theme and writes a
plain-text details file. The public surface is kept small: the schemas, the
configuration and the pipeline orchestrator.
"""

from . import prompt_templates, schemas

__all__ = ["schemas", "prompt_templates"]
__version__ = "0.1.0"
