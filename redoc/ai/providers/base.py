# redoc/ai/providers/base.py
"""
Provider adapter contract.

Every backend implements the same shape: a pure configuration check, a
non-raising availability probe, and free-text / JSON chat calls. Subclasses
only supply the backend-specific pieces (_probe and _complete); error
wrapping, defaults and JSON extraction live here so the rest of the system
never branches on backend identity.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx

from redoc.ai.errors import ProviderError
from redoc.ai.json_extract import extract_json_object
from redoc.ai.types import ChatMessage, ProviderAvailability, ProviderId

if TYPE_CHECKING:
    from redoc.config.schema import RedocConfig

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_JSON_TEMPERATURE = 0.2
DEFAULT_MAX_TOKENS = 2000
PROBE_TIMEOUT = 5.0


class ProviderAdapter(ABC):
    """
    Base class for LLM backend adapters.

    Adapters hold no per-request state; the only instance attributes are the
    constant backend identity and an optional httpx transport (used by tests
    and by callers that need a custom network stack). One instance can serve
    concurrent callers.
    """

    id: ProviderId
    json_temperature: float = DEFAULT_JSON_TEMPERATURE

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport

    @property
    def name(self) -> str:
        return self.id.value

    @abstractmethod
    def is_configured(self, config: "RedocConfig") -> bool:
        """Return True when required credentials/URLs are present. No I/O."""

    @abstractmethod
    def missing_config_reason(self, config: "RedocConfig") -> str:
        """Human-readable reason reported when is_configured() is False."""

    @abstractmethod
    async def _probe(self, config: "RedocConfig") -> None:
        """Minimal connectivity check. Raise on any failure."""

    @abstractmethod
    async def _complete(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        """Issue one completion request and return the raw response text."""

    async def is_available(self, config: "RedocConfig") -> ProviderAvailability:
        """
        Report whether this backend is usable right now.

        Never raises: an unconfigured backend is reported without touching
        the network, and probe failures are captured as the reason.
        """
        if not self.is_configured(config):
            return ProviderAvailability(
                id=self.id,
                configured=False,
                reachable=False,
                reason=self.missing_config_reason(config),
            )

        try:
            await self._probe(config)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.info(f"{self.name} probe failed: {reason}")
            return ProviderAvailability(id=self.id, configured=True, reachable=False, reason=reason)

        return ProviderAvailability(id=self.id, configured=True, reachable=True)

    async def chat_text(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Single-turn completion returning free text.

        Raises:
            ProviderError: On HTTP/transport failure or an empty response
        """
        return await self._call(
            config,
            messages,
            DEFAULT_TEMPERATURE if temperature is None else temperature,
            DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
            json_mode=False,
        )

    async def chat_json(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """
        Completion expected to contain a JSON object.

        Backends with a native JSON mode request it; the text is always run
        through extract_json_object so prose around the object is tolerated.

        Raises:
            ProviderError: On request failure or a non-JSON response
        """
        text = await self._call(
            config,
            messages,
            self.json_temperature if temperature is None else temperature,
            DEFAULT_MAX_TOKENS if max_tokens is None else max_tokens,
            json_mode=True,
        )
        extraction = extract_json_object(text)
        if not extraction.ok:
            raise ProviderError(f"{self.name} returned non-JSON response: {extraction.error}")
        return extraction.value

    async def _call(
        self,
        config: "RedocConfig",
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        logger.info(
            f"{self.name}.chat: messages={len(messages)}, temperature={temperature}, "
            f"max_tokens={max_tokens}, json={json_mode}"
        )
        try:
            text = await self._complete(config, messages, temperature, max_tokens, json_mode)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(f"{self.name} request failed: {type(e).__name__}: {e}") from e

        if not text or not text.strip():
            raise ProviderError(f"No response from {self.name}")
        logger.info(f"{self.name}.chat: {len(text)} chars")
        return text

    def _http_client(self, timeout: float | None) -> httpx.AsyncClient:
        # timeout=None disables httpx's 5s default; generation calls rely on
        # config.request_timeout, probes on PROBE_TIMEOUT
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)


def raise_for_status(response: httpx.Response, backend: str) -> None:
    """Convert a non-2xx response into ProviderError carrying the body text."""
    if response.is_success:
        return
    body = response.text[:500]
    raise ProviderError(f"{backend} error {response.status_code}: {body}")
