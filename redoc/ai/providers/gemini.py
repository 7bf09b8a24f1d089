# redoc/ai/providers/gemini.py
"""Gemini adapter using the generateContent REST endpoint over httpx."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from redoc.ai.types import ChatMessage, ProviderId

from .base import PROBE_TIMEOUT, ProviderAdapter, raise_for_status

if TYPE_CHECKING:
    from redoc.config.schema import RedocConfig

logger = logging.getLogger(__name__)


def to_gemini_contents(messages: Sequence[ChatMessage]) -> list[dict[str, Any]]:
    """
    Map a system+user message list onto Gemini's contents array.

    Gemini has no system role on this endpoint, so system content is
    prefixed to the joined user content in a single user turn.
    """
    system = "\n\n".join(m.content for m in messages if m.role == "system")
    user = "\n\n".join(m.content for m in messages if m.role == "user")
    text = f"{system}\n\n{user}" if system else user
    return [{"role": "user", "parts": [{"text": text}]}]


def _coerce_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        return ""
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    first = candidates[0]
    if not isinstance(first, dict):
        return ""
    content = first.get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    chunks: list[str] = []
    for part in parts:
        if isinstance(part, dict) and isinstance(part.get("text"), str):
            chunks.append(part["text"])
    return "".join(chunks)


class GeminiAdapter(ProviderAdapter):
    id = ProviderId.GEMINI

    def is_configured(self, config: "RedocConfig") -> bool:
        return bool(config.gemini.api_key)

    def missing_config_reason(self, config: "RedocConfig") -> str:
        return "Missing gemini.api_key"

    def _model_url(self, config: "RedocConfig") -> str:
        return f"{config.gemini.base_url.rstrip('/')}/models/{config.gemini.model}"

    async def _probe(self, config: "RedocConfig") -> None:
        async with self._http_client(PROBE_TIMEOUT) as http:
            response = await http.get(
                self._model_url(config), params={"key": config.gemini.api_key}
            )
        raise_for_status(response, self.name)

    async def _complete(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        generation_config: dict[str, Any] = {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        }
        if json_mode:
            generation_config["responseMimeType"] = "application/json"
        body = {
            "contents": to_gemini_contents(messages),
            "generationConfig": generation_config,
        }

        async with self._http_client(config.request_timeout) as http:
            response = await http.post(
                f"{self._model_url(config)}:generateContent",
                params={"key": config.gemini.api_key},
                json=body,
            )
        raise_for_status(response, self.name)
        return _coerce_text(response.json())
