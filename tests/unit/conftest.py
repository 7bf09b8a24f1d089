# tests/unit/conftest.py
"""Shared fixtures: a scriptable in-memory provider adapter and a default config."""

from types import SimpleNamespace

import pytest

from redoc.ai.providers.base import ProviderAdapter
from redoc.ai.types import ProviderId
from redoc.config.schema import RedocConfig


class FakeAdapter(ProviderAdapter):
    """
    Adapter double with no network.

    replies is consumed one item per completion call; an exception instance
    is raised instead of returned. The last reply repeats once exhausted.
    """

    def __init__(self, provider_id, *, configured=True, reachable=True, replies=("ok",)):
        super().__init__()
        self.id = ProviderId(provider_id)
        self.configured = configured
        self.reachable = reachable
        self.replies = list(replies)
        self.calls = []
        self.probes = 0

    def is_configured(self, config):
        return self.configured

    def missing_config_reason(self, config):
        return f"Missing {self.name}.api_key"

    async def _probe(self, config):
        self.probes += 1
        if not self.reachable:
            raise ConnectionError("connection refused")

    async def _complete(self, config, messages, temperature, max_tokens, json_mode):
        self.calls.append(
            SimpleNamespace(
                messages=list(messages),
                temperature=temperature,
                max_tokens=max_tokens,
                json_mode=json_mode,
            )
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def make_adapter():
    return FakeAdapter


@pytest.fixture
def config():
    return RedocConfig()
