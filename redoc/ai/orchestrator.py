# redoc/ai/orchestrator.py
"""
Orchestration use-cases: questions, planning, content, diagram and table.

Each use-case builds chat messages from a prompt template, delegates to the
provider chain and normalizes the answer into a typed result. Output that
fails validation counts as a provider failure, so the chain moves on to the
next backend. When no backend succeeds the use-case returns deterministic
offline output instead of raising.
"""

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from redoc.ai.errors import ProviderError
from redoc.ai.fallback import ProviderChain
from redoc.ai.offline import offline_content, offline_plan, offline_questions
from redoc.ai.prompts import load_prompt
from redoc.ai.providers import ProviderAdapter, build_providers
from redoc.ai.schemas import DocumentPlan
from redoc.ai.types import (
    ChangeContext,
    ChatMessage,
    ContentResult,
    DiagramResult,
    GeneratedParts,
    PlanResult,
    ProviderId,
    QAPair,
    QuestionsResult,
    TableResult,
)
from redoc.validation.sanitize import sanitize_for_ai

if TYPE_CHECKING:
    from redoc.config.schema import RedocConfig

logger = logging.getLogger(__name__)

MAX_DIFF_CHARS = 8000
MAX_DIAGRAM_DIFF_CHARS = 3000
MAX_QUESTIONS = 4
MIN_QUESTIONS = 2
TRUNCATION_MARKER = "\n... (truncated)"

_LANGUAGE_LABELS = {"en": "English", "pt-BR": "Portuguese (Brazil)", "es": "Spanish"}
_NUMBERING = re.compile(r"^\d+\s*[\).:-]\s*")
_UNCLOSED_FENCE = re.compile(r"^```[\w-]*[ \t]*\n?")
_ANY_FENCE = re.compile(r"```[\w-]*[ \t]*\n(.*?)```", re.DOTALL)
_WRAPPING_FENCE = re.compile(r"```[\w-]*[ \t]*\n(.*?)\n?```", re.DOTALL)

_DIAGRAM_EXAMPLES = {
    "flowchart": "flowchart TD\n    A[Start] --> B{Decision}\n    B -->|Yes| C[Action]\n    B -->|No| D[Other]",
    "sequence": (
        "sequenceDiagram\n    participant A as Client\n    participant B as Server\n"
        "    A->>B: Request\n    B-->>A: Response"
    ),
    "architecture": (
        "flowchart LR\n    subgraph Frontend\n    A[UI]\n    end\n"
        "    subgraph Backend\n    B[API]\n    end\n    A --> B"
    ),
    "state": "stateDiagram-v2\n    [*] --> Idle\n    Idle --> Running: start\n    Running --> [*]",
    "er": "erDiagram\n    USER ||--o{ ORDER : places",
}


def language_label(language: str) -> str:
    return _LANGUAGE_LABELS.get(language, "English")


def truncate_diff(diff: str, max_chars: int = MAX_DIFF_CHARS) -> str:
    """Cap a diff at max_chars, appending a visible marker when cut."""
    if len(diff) <= max_chars:
        return diff
    return diff[:max_chars] + TRUNCATION_MARKER


def normalize_questions(payload: Any) -> list[str]:
    """
    Clean the model's question list.

    Items are stringified and leading numbering ("1) ", "2. ", "3 - ", "4: ")
    is removed. Items left empty are dropped and at most MAX_QUESTIONS kept.
    """
    raw = payload.get("questions") if isinstance(payload, dict) else None
    if not isinstance(raw, list):
        return []

    questions: list[str] = []
    for item in raw:
        text = "" if item is None else _NUMBERING.sub("", str(item).strip()).strip()
        if not text:
            continue
        questions.append(text)
    return questions[:MAX_QUESTIONS]


def to_mermaid_block(text: str) -> str:
    """
    Coerce model output into a single ```mermaid fenced block.

    An existing mermaid fence is kept, any other fence is re-labelled and
    bare text is wrapped.
    """
    text = text.strip()
    start = text.find("```mermaid")
    if start != -1:
        end = text.find("```", start + len("```mermaid"))
        if end != -1:
            return text[start : end + 3]

    match = _ANY_FENCE.search(text)
    body = match.group(1) if match else _UNCLOSED_FENCE.sub("", text)
    return f"```mermaid\n{body.strip()}\n```"


def clean_table(text: str) -> str | None:
    """Strip a wrapping code fence; reject output that is not a Markdown table."""
    table = text.strip()
    match = _WRAPPING_FENCE.fullmatch(table)
    if match:
        table = match.group(1).strip()
    if "|" not in table or "\n" not in table:
        return None
    return table


class Orchestrator:
    """
    Runs the brain-dump use-cases against the provider fallback chain.

    Stateless between calls apart from the read-only config and the chain,
    so one instance can serve concurrent use-cases (see generate_parts).
    """

    def __init__(
        self,
        config: "RedocConfig",
        chain: ProviderChain | None = None,
    ) -> None:
        self.config = config
        self.chain = chain or ProviderChain(build_providers())

    # -- prompt helpers ---------------------------------------------------

    def _safe(self, text: str) -> str:
        return sanitize_for_ai(text, enabled=self.config.redact_secrets).text

    @property
    def _language(self) -> str:
        return language_label(self.config.language)

    @staticmethod
    def _commit_lines(ctx: ChangeContext) -> str:
        return "\n".join(f"{c.short_hash} - {c.message}" for c in ctx.commits)

    @staticmethod
    def _answers(qa: Sequence[QAPair], template: str) -> str:
        if not qa:
            return "(no answers)"
        return "\n\n".join(
            template.format(n=i, question=p.question, answer=p.answer)
            for i, p in enumerate(qa, start=1)
        )

    @staticmethod
    def _messages(system: str, user: str) -> list[ChatMessage]:
        return [ChatMessage(role="system", content=system), ChatMessage(role="user", content=user)]

    # -- use-cases --------------------------------------------------------

    async def generate_questions(
        self,
        ctx: ChangeContext,
        preferred: ProviderId | None = None,
    ) -> QuestionsResult:
        """Ask the model for follow-up questions; fall back to the offline bank."""
        messages = self._messages(
            load_prompt("questions_system").format(language=self._language),
            load_prompt("questions_user").format(
                branch=ctx.branch,
                commits=self._safe(self._commit_lines(ctx)),
                files=self._safe(", ".join(ctx.files)),
                diff=self._safe(truncate_diff(ctx.diff)),
            ),
        )

        async def run(adapter: ProviderAdapter) -> list[str]:
            payload = await adapter.chat_json(self.config, messages)
            questions = normalize_questions(payload)
            if len(questions) < MIN_QUESTIONS:
                raise ProviderError(f"{adapter.name} returned {len(questions)} usable question(s)")
            return questions

        result = await self.chain.try_providers(
            self.config, run, preferred or self.config.preferred_for("questions")
        )
        if not result.succeeded:
            logger.warning("Using offline question bank")
            return QuestionsResult(
                questions=offline_questions(ctx.diff, self.config.language),
                provider=ProviderId.OFFLINE,
            )
        return QuestionsResult(questions=result.value, provider=result.provider)

    async def plan_document(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        has_developer_diagrams: bool,
        has_developer_tables: bool,
        preferred: ProviderId | None = None,
    ) -> PlanResult:
        """
        Decide intent, impact and visual aids for the document.

        A diagram or table the developer already supplied is never generated
        again: the matching flag is forced off whatever the model answered.
        """
        messages = self._messages(
            load_prompt("plan_system").format(language=self._language),
            load_prompt("plan_user").format(
                branch=ctx.branch,
                commits=self._safe(self._commit_lines(ctx)),
                file_count=len(ctx.files),
                files=self._safe(", ".join(ctx.files)),
                diff=self._safe(truncate_diff(ctx.diff)),
                answers=self._safe(self._answers(qa, "Q{n}: {question}\nA: {answer}")),
                developer_diagrams="YES (skip diagram generation)" if has_developer_diagrams else "NO",
                developer_tables="YES (skip table generation)" if has_developer_tables else "NO",
            ),
        )

        async def run(adapter: ProviderAdapter) -> DocumentPlan:
            payload = await adapter.chat_json(self.config, messages)
            return DocumentPlan.model_validate(payload)

        result = await self.chain.try_providers(
            self.config, run, preferred or self.config.preferred_for("analysis")
        )
        if result.succeeded:
            plan, provider = result.value, result.provider
        else:
            logger.warning("Using offline document plan")
            plan, provider = offline_plan(), ProviderId.OFFLINE

        overrides: dict[str, bool] = {}
        if has_developer_diagrams:
            overrides["should_generate_diagram"] = False
        if has_developer_tables:
            overrides["should_generate_table"] = False
        if overrides:
            plan = plan.model_copy(update=overrides)

        return PlanResult(plan=plan, provider=provider)

    async def generate_main_content(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        plan: DocumentPlan,
        preferred: ProviderId | None = None,
    ) -> ContentResult:
        impacted = "\n".join(f"- **{f.file}**: {f.reason}" for f in plan.impacted_files)
        files = ", ".join(ctx.files[:20]) + ("..." if len(ctx.files) > 20 else "")
        messages = self._messages(
            load_prompt("content_system").format(
                intent=plan.intent.upper(),
                intent_rationale=plan.intent_rationale,
                impacted_files=impacted or "No major downstream impacts predicted.",
                sections=", ".join(plan.sections),
                complexity=plan.complexity,
                language=self._language,
            ),
            load_prompt("content_user").format(
                branch=ctx.branch,
                commits=self._safe("; ".join(c.message for c in ctx.commits)),
                file_count=len(ctx.files),
                files=self._safe(files),
                diff=self._safe(truncate_diff(ctx.diff)),
                answers=self._safe(self._answers(qa, "**Q{n}:** {question}\n**A:** {answer}")),
            ),
        )

        async def run(adapter: ProviderAdapter) -> str:
            text = await adapter.chat_text(self.config, messages, temperature=0.4, max_tokens=3000)
            return text.strip()

        result = await self.chain.try_providers(
            self.config, run, preferred or self.config.preferred_for("content")
        )
        if not result.succeeded:
            logger.warning("Using offline content")
            return ContentResult(markdown=offline_content(qa), provider=ProviderId.OFFLINE)
        return ContentResult(markdown=result.value, provider=result.provider)

    async def generate_diagram(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        plan: DocumentPlan,
        preferred: ProviderId | None = None,
    ) -> DiagramResult:
        if not plan.should_generate_diagram or not plan.diagram_type:
            return DiagramResult(mermaid=None, provider=ProviderId.OFFLINE)

        messages = self._messages(
            load_prompt("diagram_system").format(
                diagram_type=plan.diagram_type.upper(),
                rationale=plan.diagram_rationale or "Visualize the change",
                focus=plan.diagram_focus or "Key components and flow",
                example=_DIAGRAM_EXAMPLES[plan.diagram_type],
                language=self._language,
            ),
            load_prompt("diagram_user").format(
                files=self._safe("\n".join(ctx.files[:15])),
                diff=self._safe(truncate_diff(ctx.diff, MAX_DIAGRAM_DIFF_CHARS)),
                answers=self._safe(self._answers(qa, "Q: {question}\nA: {answer}")),
                diagram_type=plan.diagram_type,
            ),
        )

        async def run(adapter: ProviderAdapter) -> str:
            text = await adapter.chat_text(self.config, messages, temperature=0.3, max_tokens=1500)
            return to_mermaid_block(text)

        result = await self.chain.try_providers(
            self.config, run, preferred or self.config.preferred_for("diagrams")
        )
        if not result.succeeded:
            logger.warning("Diagram generation unavailable; omitting diagram")
            return DiagramResult(mermaid=None, provider=ProviderId.OFFLINE)
        return DiagramResult(mermaid=result.value, provider=result.provider)

    async def generate_table(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        plan: DocumentPlan,
        preferred: ProviderId | None = None,
    ) -> TableResult:
        if not plan.should_generate_table or not plan.table_type:
            return TableResult(table=None, provider=ProviderId.OFFLINE)

        messages = self._messages(
            load_prompt("table_system").format(
                table_type=plan.table_type,
                rationale=plan.table_rationale or "Clarify the change",
                focus=plan.table_focus or "Key information",
                language=self._language,
            ),
            load_prompt("table_user").format(
                files=self._safe("\n".join(ctx.files[:10])),
                answers=self._safe(self._answers(qa, "Q: {question}\nA: {answer}")),
                table_type=plan.table_type,
            ),
        )

        async def run(adapter: ProviderAdapter) -> str:
            text = await adapter.chat_text(self.config, messages, temperature=0.2, max_tokens=900)
            table = clean_table(text)
            if table is None:
                raise ProviderError(f"{adapter.name} did not return a Markdown table")
            return table

        result = await self.chain.try_providers(
            self.config, run, preferred or self.config.preferred_for("content")
        )
        if not result.succeeded:
            logger.warning("Table generation unavailable; omitting table")
            return TableResult(table=None, provider=ProviderId.OFFLINE)
        return TableResult(table=result.value, provider=result.provider)

    async def generate_parts(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        plan: DocumentPlan,
    ) -> GeneratedParts:
        """
        Produce content, diagram and table.

        Sequential by default. With generation.parallel the three run
        concurrently; a sub-task that raises is replaced by its offline
        result without cancelling the others.
        """
        if not self.config.generation.parallel:
            return GeneratedParts(
                content=await self.generate_main_content(ctx, qa, plan),
                diagram=await self.generate_diagram(ctx, qa, plan),
                table=await self.generate_table(ctx, qa, plan),
            )

        content, diagram, table = await asyncio.gather(
            self.generate_main_content(ctx, qa, plan),
            self.generate_diagram(ctx, qa, plan),
            self.generate_table(ctx, qa, plan),
            return_exceptions=True,
        )

        if isinstance(content, BaseException):
            logger.warning(f"Content generation raised: {content}")
            content = ContentResult(markdown=offline_content(qa), provider=ProviderId.OFFLINE)
        if isinstance(diagram, BaseException):
            logger.warning(f"Diagram generation raised: {diagram}")
            diagram = DiagramResult(mermaid=None, provider=ProviderId.OFFLINE)
        if isinstance(table, BaseException):
            logger.warning(f"Table generation raised: {table}")
            table = TableResult(table=None, provider=ProviderId.OFFLINE)

        return GeneratedParts(content=content, diagram=diagram, table=table)
