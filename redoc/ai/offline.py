# redoc/ai/offline.py
"""
Deterministic output used when no provider produces a result.

Pure functions: no I/O, no exceptions. Every use-case in the orchestrator
degrades to one of these so the CLI always has questions, a plan and a
document to show.
"""

from collections.abc import Sequence

from redoc.ai.schemas import DocumentPlan
from redoc.ai.types import QAPair

SMALL_CHANGE_LINES = 80

QUESTION_BANK: dict[str, list[str]] = {
    "en": [
        "What was the trigger for this change? What problem were you actually solving?",
        "What approaches did you try or consider before landing on this solution?",
        "What's the trickiest part of this code that someone might break without realizing?",
        "If you had more time, what would you improve or do differently here?",
    ],
    "pt-BR": [
        "O que motivou essa mudança? Qual problema você estava realmente resolvendo?",
        "Quais abordagens você tentou ou considerou antes de chegar nessa solução?",
        "Qual a parte mais traiçoeira desse código que alguém pode quebrar sem perceber?",
        "Se tivesse mais tempo, o que você melhoraria ou faria diferente aqui?",
    ],
    "es": [
        "¿Qué motivó este cambio? ¿Qué problema estabas resolviendo realmente?",
        "¿Qué enfoques probaste o consideraste antes de llegar a esta solución?",
        "¿Cuál es la parte más delicada de este código que alguien podría romper sin darse cuenta?",
        "Si tuvieras más tiempo, ¿qué mejorarías o harías diferente aquí?",
    ],
}


def count_changed_lines(diff: str) -> int:
    """Count added/removed lines in a unified diff, ignoring file headers."""
    count = 0
    for line in diff.splitlines():
        if line.startswith(("+++", "---")):
            continue
        if line.startswith(("+", "-")):
            count += 1
    return count


def offline_questions(diff: str, language: str = "en") -> list[str]:
    """First 2 bank questions for a small diff, first 3 otherwise."""
    bank = QUESTION_BANK.get(language, QUESTION_BANK["en"])
    count = 2 if count_changed_lines(diff) < SMALL_CHANGE_LINES else 3
    return list(bank[:count])


def offline_plan() -> DocumentPlan:
    return DocumentPlan(
        intent="unknown",
        intent_rationale="Analysis unavailable offline",
        should_generate_diagram=False,
        should_generate_table=False,
        complexity="minimal",
        skip_generation=False,
        sections=["Summary", "Notes"],
    )


def offline_content(qa: Sequence[QAPair]) -> str:
    """Render the developer's Q&A as notes under a minimal summary."""
    if qa:
        notes = "\n".join(
            f"- **Q{i}:** {pair.question}\n  - {pair.answer.strip() or '_No answer._'}"
            for i, pair in enumerate(qa, start=1)
        )
    else:
        notes = "_No Q&A captured._"
    return f"## Summary\n\n_Offline mode._\n\n## Notes\n\n{notes}\n"
