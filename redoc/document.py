# redoc/document.py
"""
Document renderer for brain dumps.

Assembles the generated parts, the plan and the developer's own answers into
one Markdown file with YAML frontmatter, and writes it under the docs
directory, one folder per branch.
"""

import logging
import re
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

import yaml

from redoc.ai.schemas import DocumentPlan
from redoc.ai.types import ChangeContext, GeneratedParts, ProviderId, QAPair
from redoc.answers import ParsedResponse, parse_rich_response
from redoc.validation.sanitize import slugify_branch

logger = logging.getLogger(__name__)

MAX_LISTED_FILES = 30

_CONVENTIONAL_PREFIX = re.compile(r"^\w+(\([^)]*\))?!?:\s*")


def _subject(message: str) -> str:
    stripped = message.strip()
    return stripped.splitlines()[0] if stripped else ""


def _strip_conventional_prefix(message: str) -> str:
    subject = _subject(message)
    return _CONVENTIONAL_PREFIX.sub("", subject).strip() or subject


def document_title(ctx: ChangeContext) -> str:
    """'Add login flow (+2 more)' from commit subjects, or a branch fallback."""
    if not ctx.commits:
        return f"Change on {ctx.branch}"
    title = _strip_conventional_prefix(ctx.commits[0].message)
    if len(ctx.commits) > 1:
        title += f" (+{len(ctx.commits) - 1} more)"
    return title


class DocumentRenderer:
    """
    Converts a brain-dump session into structured Markdown.

    Format:
        ---
        branch: feature/login
        commits: [abc1234, ...]
        providers: {content: groq, diagram: offline, ...}
        created_at: ISO timestamp
        ---

        # <title>

        <intent, commits, files>
        ## Diagram         (generated and developer-supplied)
        <main content>
        ## Predicted Impact
        ## Summary Table   (generated and developer-supplied)
        ## Developer Q&A   (plain answers, code snippets, references)
        ## AI Decisions
    """

    def __init__(self, project_name: str = "") -> None:
        self.project_name = project_name

    def render(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        plan: DocumentPlan,
        parts: GeneratedParts,
        providers: dict[str, ProviderId] | None = None,
        created_at: datetime | None = None,
    ) -> str:
        """
        Render a full document from generated parts.

        Args:
            ctx: The change being documented
            qa: Developer answers, in question order
            plan: Plan that drove generation
            parts: Content, diagram and table results
            providers: Extra provider attributions (e.g. questions, analysis)
            created_at: Timestamp for the frontmatter (default: now, UTC)

        Returns:
            Markdown string
        """
        created_at = created_at or datetime.now(timezone.utc)
        parsed = [parse_rich_response(pair.answer) for pair in qa]

        attribution = {k: v.value for k, v in (providers or {}).items()}
        attribution.update(
            content=parts.content.provider.value,
            diagram=parts.diagram.provider.value,
            table=parts.table.provider.value,
        )

        sections = [self._render_frontmatter(ctx, attribution, created_at)]
        sections.extend(self._render_header(ctx, plan))

        developer_diagrams = [b for p in parsed for b in p.mermaid_blocks]
        if parts.diagram.mermaid or developer_diagrams:
            sections.append("## Diagram")
            sections.append("")
            if parts.diagram.mermaid:
                sections.append(parts.diagram.mermaid)
                sections.append("")
            for block in developer_diagrams:
                sections.append(block)
                sections.append("")

        main = parts.content.markdown.strip()
        if main:
            sections.append(main)
            sections.append("")

        if plan.impacted_files:
            sections.append("## Predicted Impact")
            sections.append("")
            for impacted in plan.impacted_files:
                reason = f": {impacted.reason}" if impacted.reason else ""
                sections.append(f"- **{impacted.file}**{reason}")
            sections.append("")

        developer_tables = [t for p in parsed for t in p.tables]
        if parts.table.table or developer_tables:
            sections.append("## Summary Table")
            sections.append("")
            if parts.table.table:
                sections.append(parts.table.table)
                sections.append("")
            for table in developer_tables:
                sections.append(table)
                sections.append("")

        sections.extend(self._render_qa(qa, parsed))
        sections.extend(self._render_decisions(plan))

        return "\n".join(sections)

    def render_offline(
        self,
        ctx: ChangeContext,
        qa: Sequence[QAPair],
        created_at: datetime | None = None,
    ) -> str:
        """Render a document from the developer's answers alone, no AI parts."""
        created_at = created_at or datetime.now(timezone.utc)
        parsed = [parse_rich_response(pair.answer) for pair in qa]

        sections = [self._render_frontmatter(ctx, {"content": ProviderId.OFFLINE.value}, created_at)]
        sections.extend(self._render_header(ctx, plan=None))

        for block in (b for p in parsed for b in p.mermaid_blocks):
            sections.append(block)
            sections.append("")
        for table in (t for p in parsed for t in p.tables):
            sections.append(table)
            sections.append("")

        sections.extend(self._render_qa(qa, parsed))
        return "\n".join(sections)

    def save(
        self,
        markdown: str,
        docs_dir: Path | str,
        branch: str,
        now: datetime | None = None,
    ) -> Path:
        """
        Write markdown to <docs_dir>/<branch-slug>/<timestamp>.md.

        Returns:
            Path of the written file
        """
        branch_dir = Path(docs_dir) / slugify_branch(branch)
        branch_dir.mkdir(parents=True, exist_ok=True)

        timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
        file_path = branch_dir / f"{timestamp}.md"
        suffix = 1
        while file_path.exists():
            file_path = branch_dir / f"{timestamp}_{suffix}.md"
            suffix += 1

        file_path.write_text(markdown, encoding="utf-8")
        logger.info(f"Brain dump written to {file_path}")
        return file_path

    def _render_frontmatter(
        self,
        ctx: ChangeContext,
        providers: dict[str, str],
        created_at: datetime,
    ) -> str:
        """Render YAML frontmatter with metadata."""
        meta: dict[str, object] = {}
        if self.project_name:
            meta["project"] = self.project_name
        meta["branch"] = ctx.branch
        meta["commits"] = [c.short_hash for c in ctx.commits]
        meta["providers"] = providers
        meta["created_at"] = created_at.isoformat()
        body = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True)
        return f"---\n{body}---\n"

    def _render_header(self, ctx: ChangeContext, plan: DocumentPlan | None) -> list[str]:
        lines = [f"# {document_title(ctx)}", ""]
        lines.append(f"> Branch: `{ctx.branch}` | {len(ctx.commits)} commit(s)")
        lines.append("")

        if plan is not None and plan.intent != "unknown":
            rationale = f" - {plan.intent_rationale}" if plan.intent_rationale else ""
            lines.append(f"**Type:** `{plan.intent.upper()}`{rationale}")
            lines.append("")

        if ctx.commits:
            lines.append("**Commits:**")
            for commit in ctx.commits:
                lines.append(f"- `{commit.short_hash}` {_subject(commit.message)}")
            lines.append("")

        if ctx.files:
            lines.append(f"**Files changed ({len(ctx.files)}):**")
            for path in ctx.files[:MAX_LISTED_FILES]:
                lines.append(f"- `{path}`")
            if len(ctx.files) > MAX_LISTED_FILES:
                lines.append(f"- ... and {len(ctx.files) - MAX_LISTED_FILES} more")
            lines.append("")

        lines.append("---")
        lines.append("")
        return lines

    def _render_qa(self, qa: Sequence[QAPair], parsed: Sequence[ParsedResponse]) -> list[str]:
        lines = ["## Developer Q&A", ""]
        if not qa:
            lines.append("_No Q&A captured._")
            lines.append("")
            return lines

        for i, (pair, answer) in enumerate(zip(qa, parsed), start=1):
            text = answer.plain_text or "_No answer._"
            lines.append(f"**Q{i}:** {pair.question}")
            lines.append("")
            lines.append("> " + text.replace("\n", "\n> "))
            lines.append("")

        code_blocks = [b for p in parsed for b in p.code_blocks]
        if code_blocks:
            lines.append("### Code Snippets")
            lines.append("")
            for block in code_blocks:
                lines.append(block.to_markdown())
                lines.append("")

        urls = list(dict.fromkeys(u for p in parsed for u in p.urls))
        if urls:
            lines.append("### References")
            lines.append("")
            for url in urls:
                lines.append(f"- {url}")
            lines.append("")

        return lines

    def _render_decisions(self, plan: DocumentPlan) -> list[str]:
        diagram = (
            f"Yes ({plan.diagram_type}) - {plan.diagram_rationale or ''}".rstrip(" -")
            if plan.should_generate_diagram
            else "No"
        )
        table = (
            f"Yes ({plan.table_type}) - {plan.table_rationale or ''}".rstrip(" -")
            if plan.should_generate_table
            else "No"
        )
        lines = [
            "## AI Decisions",
            "",
            f"- **Technical intent:** {plan.intent}"
            + (f" ({plan.intent_rationale})" if plan.intent_rationale else ""),
            f"- **Complexity:** {plan.complexity}",
            f"- **Impact analysis:** {len(plan.impacted_files)} file(s) identified",
            f"- **Generated diagram:** {diagram}",
            f"- **Generated table:** {table}",
        ]
        if plan.key_insights:
            lines.append(f"- **Key insights:** {'; '.join(plan.key_insights)}")
        lines.append("")
        return lines
