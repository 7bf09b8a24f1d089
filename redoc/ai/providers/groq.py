# redoc/ai/providers/groq.py
"""Groq adapter. Groq supports native JSON mode, so chat_json requests it."""

from redoc.ai.types import ProviderId

from .openai_compat import OpenAICompatibleAdapter


class GroqAdapter(OpenAICompatibleAdapter):
    id = ProviderId.GROQ
    native_json = True
    json_temperature = 0.3
