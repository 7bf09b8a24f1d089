# redoc/ai/errors.py
"""
redoc exception hierarchy.

All redoc-specific exceptions inherit from RedocError so callers can catch
provider and configuration failures with a single clause. A ProviderError is
never retried against the same backend; the fallback chain moves on.
"""


class RedocError(Exception):
    """Base exception for all redoc errors."""


class ProviderError(RedocError):
    """Error communicating with an LLM provider (HTTP, transport or response shape)."""


class ConfigError(RedocError):
    """Invalid or unreadable configuration."""
