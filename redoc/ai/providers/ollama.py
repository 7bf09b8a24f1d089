# redoc/ai/providers/ollama.py
"""
Ollama adapter for a self-hosted model.

Free and unmetered, so the default fallback chain tries it right after the
caller's preferred provider.
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx
from ollama import AsyncClient

from redoc.ai.types import ChatMessage, ProviderId

from .base import PROBE_TIMEOUT, ProviderAdapter

if TYPE_CHECKING:
    from redoc.config.schema import RedocConfig

logger = logging.getLogger(__name__)


class OllamaAdapter(ProviderAdapter):
    id = ProviderId.OLLAMA

    def is_configured(self, config: "RedocConfig") -> bool:
        return bool(config.ollama.base_url) and bool(config.ollama.model)

    def missing_config_reason(self, config: "RedocConfig") -> str:
        return "Missing ollama.base_url/ollama.model"

    def _client(self, config: "RedocConfig", timeout: float | None) -> AsyncClient:
        kwargs: dict[str, Any] = {"host": config.ollama.base_url, "timeout": httpx.Timeout(timeout)}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return AsyncClient(**kwargs)

    async def _probe(self, config: "RedocConfig") -> None:
        async with self._client(config, PROBE_TIMEOUT) as client:
            models_response = await client.list()

        available = [m.model for m in models_response.models if m.model]
        model = config.ollama.model
        model_base = model.split(":")[0]
        if not any(model == m or model_base in m for m in available):
            # Still reachable: Ollama can pull the model on demand
            logger.warning(f"Model {model} not found in local Ollama models")

    async def _complete(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        request: dict[str, Any] = {
            "model": config.ollama.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if json_mode:
            request["format"] = "json"

        async with self._client(config, config.request_timeout) as client:
            response = await client.chat(**request)
        return response.message.content or ""
