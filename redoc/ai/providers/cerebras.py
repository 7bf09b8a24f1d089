# redoc/ai/providers/cerebras.py
"""Cerebras adapter. JSON is extracted from the free-text reply."""

from redoc.ai.types import ProviderId

from .openai_compat import OpenAICompatibleAdapter


class CerebrasAdapter(OpenAICompatibleAdapter):
    id = ProviderId.CEREBRAS
    native_json = False
