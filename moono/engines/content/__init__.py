"""
Content Engine - read-only lesson content and metadata normalization.
"""

from moono.engines.content.normalizer import (
    normalize_step,
    normalize_payload,
    normalize_options,
    parse_metadata,
    resolve_correct_option_id,
)
from moono.engines.content.repository import ContentRepository, SqlContentRepository

__all__ = [
    "ContentRepository",
    "SqlContentRepository",
    "normalize_step",
    "normalize_payload",
    "normalize_options",
    "parse_metadata",
    "resolve_correct_option_id",
]
