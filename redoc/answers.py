# redoc/answers.py
"""
Parsing of developer answers.

Answers are free Markdown: developers paste mermaid diagrams, code, pipe
tables and links alongside prose. The document keeps those pieces in their
own sections, and the planner is told which visual aids already exist so it
never generates a duplicate.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from redoc.ai.types import QAPair

_FENCED_BLOCK = re.compile(r"```(\w+)?\n(.*?)```", re.DOTALL)
_URL = re.compile(r"https?://[^\s)\]]+")
_SEPARATOR = re.compile(r"\|\s*[:\- ]+\s*\|")


@dataclass(frozen=True)
class CodeBlock:
    language: str | None
    code: str

    def to_markdown(self) -> str:
        return f"```{self.language or ''}\n{self.code}\n```"


@dataclass
class ParsedResponse:
    """Rich pieces extracted from one answer; plain_text is what remains."""

    plain_text: str = ""
    mermaid_blocks: list[str] = field(default_factory=list)
    code_blocks: list[CodeBlock] = field(default_factory=list)
    tables: list[str] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)


def _is_row(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) > 1 and stripped.startswith("|") and stripped.endswith("|")


def _extract_tables(markdown: str) -> tuple[list[str], str]:
    """Pull pipe tables (header row + separator row + body rows) out of text."""
    lines = markdown.splitlines()
    tables: list[str] = []
    rest: list[str] = []

    i = 0
    while i < len(lines):
        line = lines[i]
        following = lines[i + 1] if i + 1 < len(lines) else ""
        if _is_row(line) and following.strip().startswith("|") and _SEPARATOR.search(following):
            table_lines = [line, following]
            i += 2
            while i < len(lines) and _is_row(lines[i]):
                table_lines.append(lines[i])
                i += 1
            tables.append("\n".join(table_lines))
            continue
        rest.append(line)
        i += 1

    return tables, "\n".join(rest)


def parse_rich_response(markdown: str) -> ParsedResponse:
    """
    Split an answer into plain text and rich blocks.

    Args:
        markdown: Raw answer as typed by the developer

    Returns:
        ParsedResponse with mermaid blocks (re-fenced), other code blocks,
        pipe tables, unique URLs in order of appearance and the leftover text
    """
    text = markdown or ""
    urls = list(dict.fromkeys(u.strip() for u in _URL.findall(text)))

    parsed = ParsedResponse(urls=urls)

    def _collect(match: re.Match) -> str:
        language = match.group(1).strip() if match.group(1) else None
        code = match.group(2)
        if code.endswith("\n"):
            code = code[:-1]
        if language and language.lower() == "mermaid":
            parsed.mermaid_blocks.append(f"```mermaid\n{code}\n```")
        else:
            parsed.code_blocks.append(CodeBlock(language=language, code=code))
        return ""

    without_fences = _FENCED_BLOCK.sub(_collect, text)
    parsed.tables, rest = _extract_tables(without_fences)

    plain = _URL.sub("", rest)
    parsed.plain_text = re.sub(r"\n{3,}", "\n\n", plain).strip()
    return parsed


def developer_supplied_diagram(qa: Sequence[QAPair]) -> bool:
    return any(parse_rich_response(pair.answer).mermaid_blocks for pair in qa)


def developer_supplied_table(qa: Sequence[QAPair]) -> bool:
    return any(parse_rich_response(pair.answer).tables for pair in qa)
