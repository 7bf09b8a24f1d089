# redoc/ai/fallback.py
"""
Provider fallback chain.

Three pieces, leaves first:

- AvailabilityProber probes every adapter concurrently and returns a fresh
  availability snapshot (never cached between calls).
- FallbackOrderer turns a snapshot, the caller's preferred provider and the
  optional user-defined order into a deduplicated adapter list.
- ProviderChain walks that list one adapter at a time until an operation
  succeeds. A failure means "try the next provider"; the same adapter is
  never retried.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING, TypeVar

from redoc.ai.providers import ProviderAdapter
from redoc.ai.types import ExecutionResult, ProviderAvailability, ProviderId

if TYPE_CHECKING:
    from redoc.config.schema import RedocConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AvailabilityProber:
    """Concurrent availability probe over a fixed set of adapters."""

    def __init__(self, adapters: Sequence[ProviderAdapter]) -> None:
        self.adapters = list(adapters)

    async def probe_all(self, config: "RedocConfig") -> list[ProviderAvailability]:
        """
        Probe every adapter at once and join all results.

        One adapter raising does not affect the others; its exception is
        recorded as an unreachable snapshot. Result order equals adapter order.
        """
        results = await asyncio.gather(
            *(adapter.is_available(config) for adapter in self.adapters),
            return_exceptions=True,
        )

        snapshot: list[ProviderAvailability] = []
        for adapter, result in zip(self.adapters, results):
            if isinstance(result, BaseException):
                logger.warning(f"{adapter.name} availability check raised: {result}")
                snapshot.append(
                    ProviderAvailability(
                        id=adapter.id,
                        configured=adapter.is_configured(config),
                        reachable=False,
                        reason=str(result) or type(result).__name__,
                    )
                )
            else:
                snapshot.append(result)
        return snapshot


class FallbackOrderer:
    """Computes the priority list of adapters for one orchestration call."""

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        prober: AvailabilityProber | None = None,
    ) -> None:
        self.adapters = list(adapters)
        self.prober = prober or AvailabilityProber(self.adapters)
        self._by_id = {adapter.id: adapter for adapter in self.adapters}

    async def order(
        self,
        config: "RedocConfig",
        preferred: ProviderId | None = None,
    ) -> list[ProviderAdapter]:
        availability = await self.prober.probe_all(config)
        return self.order_from_snapshot(config, availability, preferred)

    def order_from_snapshot(
        self,
        config: "RedocConfig",
        availability: Sequence[ProviderAvailability],
        preferred: ProviderId | None = None,
    ) -> list[ProviderAdapter]:
        """
        Deterministic ordering core.

        With a user-defined order: preferred first, then the user's entries.
        Without one: preferred, then ollama, then every other reachable
        backend in probe order. Offline, unknown, unreachable and duplicate
        entries are skipped.
        """
        reachable = {a.id for a in availability if a.reachable}
        ordered: list[ProviderAdapter] = []
        seen: set[ProviderId] = set()

        def push(candidate: ProviderId | str | None) -> None:
            if candidate is None:
                return
            try:
                provider_id = ProviderId(candidate)
            except ValueError:
                logger.debug(f"Ignoring unknown provider {candidate!r}")
                return
            if provider_id == ProviderId.OFFLINE or provider_id in seen:
                return
            if provider_id not in reachable:
                return
            adapter = self._by_id.get(provider_id)
            if adapter is None:
                return
            seen.add(provider_id)
            ordered.append(adapter)

        user_order = config.generation.provider_order
        if user_order:
            push(preferred)
            for entry in user_order:
                push(entry)
        else:
            push(preferred)
            push(ProviderId.OLLAMA)
            for record in availability:
                push(record.id)

        return ordered


class ProviderChain:
    """Sequential try-in-order execution over the fallback order."""

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        orderer: FallbackOrderer | None = None,
    ) -> None:
        self.adapters = list(adapters)
        self.orderer = orderer or FallbackOrderer(self.adapters)

    async def try_providers(
        self,
        config: "RedocConfig",
        operation: Callable[[ProviderAdapter], Awaitable[T]],
        preferred: ProviderId | None = None,
    ) -> ExecutionResult[T]:
        """
        Run operation against each adapter in priority order.

        Returns at the first success; later adapters are never invoked.
        When the order is empty or every adapter fails, the result carries
        no provider and the last error seen.
        """
        order = await self.orderer.order(config, preferred)
        result: ExecutionResult[T] = ExecutionResult()

        if not order:
            logger.warning("No reachable AI provider; falling back to offline output")
            return result

        for adapter in order:
            result.attempted.append(adapter.id)
            try:
                value = await operation(adapter)
            except Exception as e:
                logger.warning(f"Provider {adapter.name} failed: {e}")
                result.error = e
                continue

            logger.info(f"Provider {adapter.name} succeeded")
            result.value = value
            result.provider = adapter.id
            result.error = None
            return result

        logger.warning(
            f"All providers failed ({', '.join(p.value for p in result.attempted)}); "
            f"last error: {result.error}"
        )
        return result
