# redoc/ai/types.py
"""Normalized types shared by provider adapters, the fallback chain and use-cases."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Generic, Literal, TypeVar

if TYPE_CHECKING:
    from .schemas import DocumentPlan

T = TypeVar("T")


class ProviderId(str, Enum):
    """Closed set of backends. OFFLINE marks 'no backend produced a result'."""

    GROQ = "groq"
    GEMINI = "gemini"
    CEREBRAS = "cerebras"
    OLLAMA = "ollama"
    OFFLINE = "offline"


@dataclass(frozen=True)
class ProviderAvailability:
    """Snapshot of one backend's usability, produced fresh on every probe."""

    id: ProviderId
    configured: bool
    reachable: bool
    reason: str | None = None


@dataclass(frozen=True)
class ChatMessage:
    """A single chat turn. Callers put system messages before user messages."""

    role: Literal["system", "user"]
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Commit:
    hash: str
    message: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass(frozen=True)
class ChangeContext:
    """Immutable description of the change being documented."""

    branch: str
    commits: tuple[Commit, ...] = ()
    files: tuple[str, ...] = ()
    diff: str = ""


@dataclass(frozen=True)
class QAPair:
    """A generated question and the developer's free-text answer."""

    question: str
    answer: str


@dataclass
class ExecutionResult(Generic[T]):
    """
    Outcome of walking the fallback chain.

    Attributes:
        value: Value produced by the first adapter that succeeded
        provider: Identity of that adapter, None when nothing succeeded
        error: Last error seen (only meaningful when provider is None)
        attempted: Providers tried, in order
    """

    value: T | None = None
    provider: ProviderId | None = None
    error: BaseException | None = None
    attempted: list[ProviderId] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.provider is not None


@dataclass
class QuestionsResult:
    questions: list[str]
    provider: ProviderId


@dataclass
class PlanResult:
    plan: "DocumentPlan"
    provider: ProviderId


@dataclass
class ContentResult:
    markdown: str
    provider: ProviderId


@dataclass
class DiagramResult:
    mermaid: str | None
    provider: ProviderId


@dataclass
class TableResult:
    table: str | None
    provider: ProviderId


@dataclass
class GeneratedParts:
    """Positionally merged results of the three generation sub-tasks."""

    content: ContentResult
    diagram: DiagramResult
    table: TableResult
