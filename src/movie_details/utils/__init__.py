"""Small shared helpers (environment parsing, text cleanup)."""

from .env import env_flag, fixture_mode_enabled, resolve_metadata_source
from .text import extract_json_block, sanitize_filename

__all__ = [
    "env_flag",
    "extract_json_block",
    "fixture_mode_enabled",
    "resolve_metadata_source",
    "sanitize_filename",
]
