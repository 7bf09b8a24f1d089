"""
Provider adapters and the static dispatch table.

Adding a backend means adding a ProviderId member, an adapter class and an
entry in ADAPTER_TYPES. Registry order is the probe order, which breaks ties
in the default fallback chain.
"""

import httpx

from redoc.ai.types import ProviderId

from .base import ProviderAdapter
from .cerebras import CerebrasAdapter
from .gemini import GeminiAdapter
from .groq import GroqAdapter
from .ollama import OllamaAdapter

ADAPTER_TYPES: dict[ProviderId, type[ProviderAdapter]] = {
    ProviderId.GROQ: GroqAdapter,
    ProviderId.GEMINI: GeminiAdapter,
    ProviderId.CEREBRAS: CerebrasAdapter,
    ProviderId.OLLAMA: OllamaAdapter,
}


def build_providers(
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ProviderAdapter]:
    """Construct one adapter per backend, in registry order."""
    return [adapter_type(transport=transport) for adapter_type in ADAPTER_TYPES.values()]


__all__ = [
    "ADAPTER_TYPES",
    "ProviderAdapter",
    "GroqAdapter",
    "GeminiAdapter",
    "CerebrasAdapter",
    "OllamaAdapter",
    "build_providers",
]
