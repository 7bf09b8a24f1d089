# redoc/config/schema.py
"""
Pydantic configuration models for redoc.

All models use extra="ignore" to allow unknown YAML keys without crashing.
Per-task provider slots are resolved once, at validation time, so the
orchestration layer never has to chain fallbacks itself.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from redoc.ai.types import ProviderId

ProviderName = Literal["groq", "gemini", "cerebras", "ollama"]
Task = Literal["questions", "analysis", "content", "diagrams"]


class GroqConfig(BaseModel):
    """Groq cloud configuration (OpenAI-compatible API)."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(default=None, description="Groq API key (gsk_...)")
    model: str = Field(default="llama-3.3-70b-versatile", description="Groq chat model")
    base_url: str = Field(
        default="https://api.groq.com/openai/v1", description="Groq OpenAI-compatible base URL"
    )


class CerebrasConfig(BaseModel):
    """Cerebras cloud configuration (OpenAI-compatible API)."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(default=None, description="Cerebras API key")
    model: str = Field(default="llama3.3-70b", description="Cerebras chat model")
    base_url: str = Field(default="https://api.cerebras.ai/v1", description="Cerebras base URL")


class GeminiConfig(BaseModel):
    """Google Gemini configuration (generateContent REST API)."""

    model_config = ConfigDict(extra="ignore")

    api_key: str | None = Field(default=None, description="Google AI Studio API key")
    model: str = Field(default="gemini-2.0-flash", description="Gemini model")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Gemini API base URL",
    )


class OllamaConfig(BaseModel):
    """Self-hosted Ollama configuration. Both fields are required to use it."""

    model_config = ConfigDict(extra="ignore")

    base_url: str | None = Field(
        default=None, description="Ollama API base URL (e.g. http://localhost:11434)"
    )
    model: str | None = Field(default=None, description="Ollama model (e.g. llama3.1:8b)")


class TaskProviders(BaseModel):
    """Preferred provider per task. Unset slots inherit RedocConfig.ai_provider."""

    model_config = ConfigDict(extra="ignore")

    analysis: ProviderName | None = Field(default=None, description="Planning")
    content: ProviderName | None = Field(default=None, description="Main content and tables")
    diagrams: ProviderName | None = Field(default=None, description="Mermaid diagrams")


class GenerationConfig(BaseModel):
    """Document generation behaviour."""

    model_config = ConfigDict(extra="ignore")

    parallel: bool = Field(
        default=False, description="Run content/diagram/table generation concurrently"
    )
    # Plain strings: unknown or "offline" entries are skipped by the orderer
    provider_order: list[str] = Field(
        default_factory=list,
        description="Optional fallback order, highest priority first (empty = default chain)",
    )
    providers: TaskProviders = Field(default_factory=TaskProviders)


class OutputConfig(BaseModel):
    """Output and file path configuration."""

    model_config = ConfigDict(extra="ignore")

    docs_path: str = Field(
        default=".redoc", description="Directory for generated docs (relative to repo root)"
    )
    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="normal", description="Logging verbosity level"
    )


class RedocConfig(BaseModel):
    """Root configuration for redoc."""

    model_config = ConfigDict(extra="ignore")

    project_name: str = Field(default="", description="Project name used in document titles")
    language: Literal["en", "pt-BR", "es"] = Field(
        default="en", description="Language for questions and generated documents"
    )
    ai_provider: ProviderName = Field(default="groq", description="Global preferred provider")
    redact_secrets: bool = Field(
        default=True, description="Redact likely secrets before sending text to providers"
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds (None = client library default)",
    )

    groq: GroqConfig = Field(default_factory=GroqConfig)
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    cerebras: CerebrasConfig = Field(default_factory=CerebrasConfig)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def _resolve_task_providers(self) -> "RedocConfig":
        slots = self.generation.providers
        for task in ("analysis", "content", "diagrams"):
            if getattr(slots, task) is None:
                setattr(slots, task, self.ai_provider)
        return self

    def preferred_for(self, task: Task) -> ProviderId:
        """Return the preferred provider for a task."""
        if task == "questions":
            return ProviderId(self.ai_provider)
        return ProviderId(getattr(self.generation.providers, task))
