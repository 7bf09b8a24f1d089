# redoc/ai/prompts/__init__.py
"""
Prompt templates for the orchestration use-cases.

Each use-case has a `<task>_system` and a `<task>_user` template, filled with
str.format. Literal braces inside templates are doubled.
"""

from functools import lru_cache
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent


def available_prompts() -> list[str]:
    """Template names shipped with the package, sorted."""
    return sorted(p.stem for p in PROMPTS_DIR.glob("*.txt"))


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    """
    Read a template by name (filename without .txt). Cached per process.

    Raises:
        FileNotFoundError: If no such template exists
    """
    prompt_path = PROMPTS_DIR / f"{name}.txt"
    if not prompt_path.is_file():
        raise FileNotFoundError(
            f"Prompt not found: {name!r} (available: {', '.join(available_prompts())})"
        )
    return prompt_path.read_text(encoding="utf-8")


__all__ = ["available_prompts", "load_prompt"]
