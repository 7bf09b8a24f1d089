"""Input validation and sanitization utilities."""

from .sanitize import REDACTION, SanitizationResult, sanitize_for_ai, slugify_branch

__all__ = [
    "REDACTION",
    "SanitizationResult",
    "sanitize_for_ai",
    "slugify_branch",
]
