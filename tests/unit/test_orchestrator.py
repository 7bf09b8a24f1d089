# tests/unit/test_orchestrator.py
"""Unit tests for the orchestration use-cases and their offline fallbacks."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from redoc.ai.errors import ProviderError
from redoc.ai.fallback import ProviderChain
from redoc.ai.offline import QUESTION_BANK
from redoc.ai.orchestrator import (
    Orchestrator,
    clean_table,
    normalize_questions,
    to_mermaid_block,
    truncate_diff,
)
from redoc.ai.schemas import DocumentPlan
from redoc.ai.types import ChangeContext, Commit, ProviderId, QAPair
from redoc.config.schema import RedocConfig

SMALL_DIFF = "--- a/src/auth.py\n+++ b/src/auth.py\n+def login():\n+    return True\n-pass"
LARGE_DIFF = "\n".join(f"+line {i}" for i in range(80))


@pytest.fixture
def ctx():
    return ChangeContext(
        branch="feature/login",
        commits=(Commit(hash="a1b2c3d4e5f6a7b8", message="feat: add login"),),
        files=("src/auth.py", "src/routes.py"),
        diff=SMALL_DIFF,
    )


@pytest.fixture
def qa():
    return [
        QAPair(question="Why a session cookie?", answer="JWT refresh was flaky."),
        QAPair(question="What is fragile?", answer="The CSRF check in routes.py."),
    ]


def _orchestrator(config, *adapters):
    return Orchestrator(config, chain=ProviderChain(list(adapters)))


def _user_prompt(adapter, call=0):
    return adapter.calls[call].messages[1].content


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_truncate_diff_marker(self):
        assert truncate_diff("abc", 10) == "abc"
        assert truncate_diff("x" * 20, 10) == "x" * 10 + "\n... (truncated)"

    def test_normalize_questions(self):
        payload = {"questions": ["1) Why?", "2. How?", "  ", None, "3 - What?", "4: Who?", "5) When?"]}
        assert normalize_questions(payload) == ["Why?", "How?", "What?", "Who?"]

    def test_normalize_questions_drops_bare_numbers(self):
        payload = {"questions": ["1.", "2)", " 3 - ", "Real?"]}
        assert normalize_questions(payload) == ["Real?"]

    def test_normalize_questions_bad_shape(self):
        assert normalize_questions({"questions": "Why?"}) == []
        assert normalize_questions({}) == []

    def test_mermaid_fence_kept(self):
        text = "Here:\n```mermaid\nflowchart TD\n  A --> B\n```\nDone."
        assert to_mermaid_block(text) == "```mermaid\nflowchart TD\n  A --> B\n```"

    def test_other_fence_relabelled(self):
        assert to_mermaid_block("```\ngraph TD\nA-->B\n```") == "```mermaid\ngraph TD\nA-->B\n```"

    def test_bare_text_wrapped(self):
        assert to_mermaid_block("sequenceDiagram\nA->>B: hi") == "```mermaid\nsequenceDiagram\nA->>B: hi\n```"

    def test_clean_table(self):
        table = "| a | b |\n|---|---|\n| 1 | 2 |"
        assert clean_table(f"```markdown\n{table}\n```") == table
        assert clean_table(table) == table
        assert clean_table("no table here") is None
        assert clean_table("| single line |") is None


# ---------------------------------------------------------------------------
# generate_questions
# ---------------------------------------------------------------------------

class TestGenerateQuestions:
    @pytest.mark.asyncio
    async def test_groq_scenario(self, make_adapter, config, ctx):
        groq = make_adapter(
            "groq",
            replies=[json.dumps({"questions": ["1) Why cookies?", "2. What broke?", "", "3 - Next step?"]})],
        )
        result = await _orchestrator(config, groq).generate_questions(ctx)

        assert result.provider == ProviderId.GROQ
        assert result.questions == ["Why cookies?", "What broke?", "Next step?"]
        assert groq.calls[0].json_mode is True
        assert "English" in groq.calls[0].messages[0].content
        assert "feature/login" in _user_prompt(groq)
        assert "a1b2c3d - feat: add login" in _user_prompt(groq)

    @pytest.mark.asyncio
    async def test_total_failure_small_diff(self, make_adapter, config, ctx):
        groq = make_adapter("groq", replies=[ProviderError("down")])
        result = await _orchestrator(config, groq).generate_questions(ctx)

        assert result.provider == ProviderId.OFFLINE
        assert result.questions == QUESTION_BANK["en"][:2]

    @pytest.mark.asyncio
    async def test_total_failure_large_diff(self, make_adapter, ctx):
        config = RedocConfig(language="pt-BR")
        large = ChangeContext(branch=ctx.branch, commits=ctx.commits, files=ctx.files, diff=LARGE_DIFF)
        result = await _orchestrator(config, make_adapter("groq", configured=False)).generate_questions(large)

        assert result.provider == ProviderId.OFFLINE
        assert result.questions == QUESTION_BANK["pt-BR"][:3]

    @pytest.mark.asyncio
    async def test_too_few_questions_tries_next(self, make_adapter, config, ctx):
        groq = make_adapter("groq", replies=['{"questions": ["Only one?"]}'])
        gemini = make_adapter("gemini", replies=['{"questions": ["A?", "B?"]}'])
        result = await _orchestrator(config, groq, gemini).generate_questions(ctx)

        assert result.provider == ProviderId.GEMINI
        assert result.questions == ["A?", "B?"]

    @pytest.mark.asyncio
    async def test_numbering_only_questions_fall_back(self, make_adapter, config, ctx):
        groq = make_adapter("groq", replies=['{"questions": ["1.", "2."]}'])
        result = await _orchestrator(config, groq).generate_questions(ctx)

        assert result.provider == ProviderId.OFFLINE
        assert all(q.strip() for q in result.questions)

    @pytest.mark.asyncio
    async def test_explicit_preferred_provider(self, make_adapter, config, ctx):
        groq = make_adapter("groq", replies=['{"questions": ["A?", "B?"]}'])
        cerebras = make_adapter("cerebras", replies=['{"questions": ["C?", "D?"]}'])
        result = await _orchestrator(config, groq, cerebras).generate_questions(
            ctx, preferred=ProviderId.CEREBRAS
        )

        assert result.provider == ProviderId.CEREBRAS
        assert groq.calls == []

    @pytest.mark.asyncio
    async def test_secrets_redacted(self, make_adapter, config):
        leaky = ChangeContext(
            branch="main",
            commits=(Commit(hash="f" * 40, message="add key"),),
            files=("settings.py",),
            diff='+GROQ_API_KEY="gsk_abcdefghijklmnopqrstuvwxyz"',
        )
        groq = make_adapter("groq", replies=['{"questions": ["A?", "B?"]}'])
        await _orchestrator(config, groq).generate_questions(leaky)

        prompt = _user_prompt(groq)
        assert "gsk_abcdefghijklmnopqrstuvwxyz" not in prompt
        assert "[REDACTED]" in prompt

    @pytest.mark.asyncio
    async def test_redaction_disabled(self, make_adapter):
        config = RedocConfig(redact_secrets=False)
        leaky = ChangeContext(branch="main", diff="+token gsk_abcdefghijklmnopqrstuvwxyz")
        groq = make_adapter("groq", replies=['{"questions": ["A?", "B?"]}'])
        await _orchestrator(config, groq).generate_questions(leaky)

        assert "gsk_abcdefghijklmnopqrstuvwxyz" in _user_prompt(groq)


# ---------------------------------------------------------------------------
# plan_document
# ---------------------------------------------------------------------------

PLAN_REPLY = json.dumps(
    {
        "intent": "feat",
        "intentRationale": "Adds login",
        "impactedFiles": [{"file": "src/session.py", "reason": "Reads the cookie"}],
        "shouldGenerateDiagram": True,
        "diagramType": "sequence",
        "shouldGenerateTable": True,
        "tableType": "tradeoffs",
        "keyInsights": ["cookies over JWT"],
        "complexity": "detailed",
    }
)


class TestPlanDocument:
    @pytest.mark.asyncio
    async def test_plan_parsed(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=[PLAN_REPLY])
        result = await _orchestrator(config, groq).plan_document(ctx, qa, False, False)

        plan = result.plan
        assert result.provider == ProviderId.GROQ
        assert plan.intent == "feat"
        assert plan.impacted_files[0].file == "src/session.py"
        assert plan.should_generate_diagram is True
        assert plan.diagram_type == "sequence"
        assert plan.sections == ["Summary", "Notes"]
        assert "Diagrams: NO" in _user_prompt(groq)

    @pytest.mark.asyncio
    async def test_developer_supplied_visuals_override(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=[PLAN_REPLY])
        result = await _orchestrator(config, groq).plan_document(ctx, qa, True, True)

        assert result.plan.should_generate_diagram is False
        assert result.plan.should_generate_table is False
        assert "YES (skip diagram generation)" in _user_prompt(groq)

    @pytest.mark.asyncio
    async def test_no_provider_configured_scenario(self, make_adapter, config, ctx, qa):
        adapters = [make_adapter(p, configured=False) for p in ("groq", "gemini", "cerebras", "ollama")]
        result = await _orchestrator(config, *adapters).plan_document(ctx, qa, True, False)

        plan = result.plan
        assert result.provider == ProviderId.OFFLINE
        assert plan.should_generate_diagram is False
        assert plan.should_generate_table is False
        assert plan.complexity == "minimal"
        assert plan.skip_generation is False
        assert plan.sections == ["Summary", "Notes"]
        assert all(a.probes == 0 and a.calls == [] for a in adapters)

    @pytest.mark.asyncio
    async def test_invalid_payload_falls_through(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=['{"impactedFiles": "everything"}'])
        gemini = make_adapter("gemini", replies=['{"intent": "fix"}'])
        result = await _orchestrator(config, groq, gemini).plan_document(ctx, qa, False, False)

        assert result.provider == ProviderId.GEMINI
        assert result.plan.intent == "fix"
        assert result.plan.complexity == "standard"

    @pytest.mark.asyncio
    async def test_analysis_slot_preferred(self, make_adapter, ctx, qa):
        config = RedocConfig(generation={"providers": {"analysis": "gemini"}})
        groq = make_adapter("groq", replies=[PLAN_REPLY])
        gemini = make_adapter("gemini", replies=[PLAN_REPLY])
        result = await _orchestrator(config, groq, gemini).plan_document(ctx, qa, False, False)

        assert result.provider == ProviderId.GEMINI
        assert groq.calls == []


# ---------------------------------------------------------------------------
# Content, diagram, table
# ---------------------------------------------------------------------------

class TestGeneration:
    @pytest.mark.asyncio
    async def test_main_content(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=["\n## Brain Dump Summary\n\nCookies.\n\n"])
        plan = DocumentPlan(intent="feat", impacted_files=[{"file": "src/session.py", "reason": "x"}])
        result = await _orchestrator(config, groq).generate_main_content(ctx, qa, plan)

        assert result.provider == ProviderId.GROQ
        assert result.markdown == "## Brain Dump Summary\n\nCookies."
        assert groq.calls[0].temperature == 0.4
        assert groq.calls[0].max_tokens == 3000
        assert "**src/session.py**: x" in groq.calls[0].messages[0].content
        assert "**A:** JWT refresh was flaky." in _user_prompt(groq)

    @pytest.mark.asyncio
    async def test_main_content_offline(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=[ProviderError("down")])
        result = await _orchestrator(config, groq).generate_main_content(ctx, qa, DocumentPlan())

        assert result.provider == ProviderId.OFFLINE
        assert result.markdown.startswith("## Summary\n\n_Offline mode._\n\n## Notes")
        assert "- **Q1:** Why a session cookie?\n  - JWT refresh was flaky." in result.markdown

    @pytest.mark.asyncio
    async def test_diagram_not_requested(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq")
        plan = DocumentPlan(should_generate_diagram=True, diagram_type=None)
        result = await _orchestrator(config, groq).generate_diagram(ctx, qa, plan)

        assert result.mermaid is None
        assert result.provider == ProviderId.OFFLINE
        assert groq.calls == [] and groq.probes == 0

    @pytest.mark.asyncio
    async def test_diagram_generated(self, make_adapter, config, qa):
        long_ctx = ChangeContext(branch="main", files=("a.py",), diff="+" + "x" * 5000)
        groq = make_adapter("groq", replies=["```\nflowchart TD\nA-->B\n```"])
        plan = DocumentPlan(should_generate_diagram=True, diagram_type="flowchart")
        result = await _orchestrator(config, groq).generate_diagram(long_ctx, qa, plan)

        assert result.provider == ProviderId.GROQ
        assert result.mermaid == "```mermaid\nflowchart TD\nA-->B\n```"
        assert groq.calls[0].temperature == 0.3
        assert groq.calls[0].max_tokens == 1500
        prompt = _user_prompt(groq)
        assert "... (truncated)" in prompt
        assert "x" * 3001 not in prompt

    @pytest.mark.asyncio
    async def test_diagram_uses_diagrams_slot(self, make_adapter, ctx, qa):
        config = RedocConfig(generation={"providers": {"diagrams": "ollama"}})
        groq = make_adapter("groq", replies=["graph TD"])
        ollama = make_adapter("ollama", replies=["graph LR"])
        plan = DocumentPlan(should_generate_diagram=True, diagram_type="architecture")
        result = await _orchestrator(config, groq, ollama).generate_diagram(ctx, qa, plan)

        assert result.provider == ProviderId.OLLAMA

    @pytest.mark.asyncio
    async def test_table_generated(self, make_adapter, config, ctx, qa):
        table = "| Option | Pro |\n|---|---|\n| Cookie | Simple |"
        groq = make_adapter("groq", replies=[f"```\n{table}\n```"])
        plan = DocumentPlan(should_generate_table=True, table_type="tradeoffs")
        result = await _orchestrator(config, groq).generate_table(ctx, qa, plan)

        assert result.table == table
        assert result.provider == ProviderId.GROQ
        assert groq.calls[0].temperature == 0.2
        assert groq.calls[0].max_tokens == 900

    @pytest.mark.asyncio
    async def test_table_rejected(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=["Sorry, no table today."])
        plan = DocumentPlan(should_generate_table=True, table_type="steps")
        result = await _orchestrator(config, groq).generate_table(ctx, qa, plan)

        assert result.table is None
        assert result.provider == ProviderId.OFFLINE

    @pytest.mark.asyncio
    async def test_table_not_requested(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq")
        result = await _orchestrator(config, groq).generate_table(ctx, qa, DocumentPlan())
        assert result.table is None
        assert groq.calls == []


# ---------------------------------------------------------------------------
# generate_parts
# ---------------------------------------------------------------------------

class TestGenerateParts:
    @pytest.mark.asyncio
    async def test_sequential(self, make_adapter, config, ctx, qa):
        groq = make_adapter("groq", replies=["Main body", "flowchart TD\nA-->B"])
        plan = DocumentPlan(should_generate_diagram=True, diagram_type="flowchart")
        parts = await _orchestrator(config, groq).generate_parts(ctx, qa, plan)

        assert parts.content.markdown == "Main body"
        assert parts.diagram.mermaid == "```mermaid\nflowchart TD\nA-->B\n```"
        assert parts.table.table is None

    @pytest.mark.asyncio
    async def test_parallel_failure_is_isolated(self, make_adapter, ctx, qa):
        config = RedocConfig(generation={"parallel": True})
        table = "| a | b |\n|---|---|\n| 1 | 2 |"
        groq = make_adapter("groq", replies=[table])
        orchestrator = _orchestrator(config, groq)
        plan = DocumentPlan(
            should_generate_diagram=True,
            diagram_type="flowchart",
            should_generate_table=True,
            table_type="comparison",
        )

        with patch.object(orchestrator, "generate_main_content", AsyncMock(side_effect=RuntimeError("boom"))), \
             patch.object(orchestrator, "generate_diagram", AsyncMock(side_effect=RuntimeError("boom"))):
            parts = await orchestrator.generate_parts(ctx, qa, plan)

        assert parts.content.provider == ProviderId.OFFLINE
        assert "_Offline mode._" in parts.content.markdown
        assert parts.diagram.mermaid is None
        assert parts.diagram.provider == ProviderId.OFFLINE
        assert parts.table.table == table
        assert parts.table.provider == ProviderId.GROQ
