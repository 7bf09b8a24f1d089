# redoc/ai/__init__.py
"""
Multi-provider AI orchestration.

Adapters for groq, gemini, cerebras and ollama sit behind a fallback chain;
the Orchestrator runs the brain-dump use-cases on top of it and degrades to
deterministic offline output when no provider answers.
"""

from .errors import ConfigError, ProviderError, RedocError
from .fallback import AvailabilityProber, FallbackOrderer, ProviderChain
from .json_extract import JsonExtraction, extract_json_object
from .orchestrator import Orchestrator
from .providers import ADAPTER_TYPES, ProviderAdapter, build_providers
from .schemas import DocumentPlan, ImpactedFile
from .types import (
    ChangeContext,
    ChatMessage,
    Commit,
    ContentResult,
    DiagramResult,
    ExecutionResult,
    GeneratedParts,
    PlanResult,
    ProviderAvailability,
    ProviderId,
    QAPair,
    QuestionsResult,
    TableResult,
)

__all__ = [
    "ADAPTER_TYPES",
    "AvailabilityProber",
    "ChangeContext",
    "ChatMessage",
    "Commit",
    "ConfigError",
    "ContentResult",
    "DiagramResult",
    "DocumentPlan",
    "ExecutionResult",
    "FallbackOrderer",
    "GeneratedParts",
    "ImpactedFile",
    "JsonExtraction",
    "Orchestrator",
    "PlanResult",
    "ProviderAdapter",
    "ProviderAvailability",
    "ProviderChain",
    "ProviderError",
    "ProviderId",
    "QAPair",
    "QuestionsResult",
    "RedocError",
    "TableResult",
    "build_providers",
    "extract_json_object",
]
