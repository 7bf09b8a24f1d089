# redoc/ai/providers/openai_compat.py
"""Shared adapter for hosted backends exposing an OpenAI-compatible chat API."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from openai import AsyncOpenAI

from redoc.ai.types import ChatMessage

from .base import PROBE_TIMEOUT, ProviderAdapter, raise_for_status

if TYPE_CHECKING:
    from redoc.config.schema import CerebrasConfig, GroqConfig, RedocConfig

logger = logging.getLogger(__name__)


class OpenAICompatibleAdapter(ProviderAdapter):
    """
    Adapter for OpenAI-compatible endpoints (bearer auth, /chat/completions).

    Subclasses pick their config section and declare whether the backend
    honours response_format={"type": "json_object"}.
    """

    native_json: bool = False

    def _section(self, config: "RedocConfig") -> "GroqConfig | CerebrasConfig":
        return getattr(config, self.name)

    def is_configured(self, config: "RedocConfig") -> bool:
        return bool(self._section(config).api_key)

    def missing_config_reason(self, config: "RedocConfig") -> str:
        return f"Missing {self.name}.api_key"

    async def _probe(self, config: "RedocConfig") -> None:
        section = self._section(config)
        async with self._http_client(PROBE_TIMEOUT) as http:
            response = await http.get(
                f"{section.base_url.rstrip('/')}/models",
                headers={"Authorization": f"Bearer {section.api_key}"},
            )
        raise_for_status(response, self.name)

    def _client(self, config: "RedocConfig") -> AsyncOpenAI:
        section = self._section(config)
        kwargs: dict[str, Any] = {"base_url": section.base_url, "api_key": section.api_key}
        if config.request_timeout is not None:
            kwargs["timeout"] = config.request_timeout
        return AsyncOpenAI(**kwargs)

    async def _complete(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        section = self._section(config)
        request: dict[str, Any] = {
            "model": section.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode and self.native_json:
            request["response_format"] = {"type": "json_object"}

        async with self._client(config) as client:
            completion = await client.chat.completions.create(**request)

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""
