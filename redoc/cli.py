# redoc/cli.py
"""
CLI interface for redoc.

Thin presentation layer over the orchestration package: commands build a
ChangeContext from git, delegate to the Orchestrator and print or save what
comes back. Logs go to stderr; stdout carries only command output.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import typer
import yaml

app = typer.Typer(
    name="redoc",
    help="Capture developer brain dumps for git changes using a multi-provider LLM chain.",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def _run(coro):
    """Run async function from sync CLI context."""
    return asyncio.run(coro)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log provider activity to stderr"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
):
    """redoc: brain dumps for your commits."""
    ctx.obj = {"verbose": verbose, "json_logs": json_logs}


def _load(ctx: typer.Context):
    """Load config and configure logging from CLI flags and output.verbosity."""
    from redoc.ai.errors import ConfigError
    from redoc.config import load_config
    from redoc.logging_config import configure_logging, level_for_verbosity

    options = ctx.obj or {}
    try:
        config = load_config()
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    level = logging.INFO if options.get("verbose") else level_for_verbosity(config.output.verbosity)
    configure_logging(level=level, json_output=options.get("json_logs", False))
    return config


def _change_context(rev_range: str):
    from redoc.git import build_change_context

    try:
        return build_change_context(rev_range)
    except RuntimeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _parse_provider(name: str | None):
    from redoc.ai.types import ProviderId

    if name is None:
        return None
    try:
        provider = ProviderId(name.strip().lower())
    except ValueError:
        provider = None
    if provider is None or provider == ProviderId.OFFLINE:
        typer.echo(f"Error: unknown provider '{name}'", err=True)
        raise typer.Exit(2)
    return provider


def load_answers(path: Path) -> list:
    """
    Read Q&A pairs from a YAML file.

    Accepts either a list of {question, answer} mappings or a mapping with
    an 'answers' key holding that list.

    Raises:
        ValueError: If the file is not valid YAML or has the wrong shape
    """
    from redoc.ai.types import QAPair

    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("answers")
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of question/answer entries")

    pairs = []
    for i, entry in enumerate(data, start=1):
        if not isinstance(entry, dict) or "question" not in entry:
            raise ValueError(f"{path}: entry {i} needs a 'question' key")
        answer = entry.get("answer")
        pairs.append(QAPair(question=str(entry["question"]), answer="" if answer is None else str(answer)))
    return pairs


@app.command()
def doctor(ctx: typer.Context):
    """Probe every provider and show the default fallback order."""
    from rich.console import Console
    from rich.table import Table

    from redoc.ai.fallback import AvailabilityProber, FallbackOrderer
    from redoc.ai.providers import build_providers

    config = _load(ctx)
    adapters = build_providers()
    prober = AvailabilityProber(adapters)
    snapshot = _run(prober.probe_all(config))
    order = FallbackOrderer(adapters, prober).order_from_snapshot(
        config, snapshot, config.preferred_for("questions")
    )

    console = Console()
    table = Table(title="AI providers")
    table.add_column("Provider")
    table.add_column("Configured")
    table.add_column("Reachable")
    table.add_column("Details", overflow="fold")
    for record in snapshot:
        table.add_row(
            record.id.value,
            "[green]yes[/green]" if record.configured else "[dim]no[/dim]",
            "[green]yes[/green]" if record.reachable else "[red]no[/red]",
            record.reason or "",
        )
    console.print(table)

    if order:
        console.print("Fallback order: " + " -> ".join(a.name for a in order))
    else:
        console.print("[yellow]No provider reachable: redoc will use offline output.[/yellow]")


@app.command()
def questions(
    ctx: typer.Context,
    rev_range: str = typer.Option("HEAD~1..HEAD", "--range", "-r", help="Git revision range"),
    provider: str = typer.Option(None, "--provider", "-p", help="Preferred provider"),
):
    """Generate brain-dump questions for a change."""
    from redoc.ai.orchestrator import Orchestrator

    config = _load(ctx)
    preferred = _parse_provider(provider)
    change = _change_context(rev_range)

    result = _run(Orchestrator(config).generate_questions(change, preferred))
    for i, question in enumerate(result.questions, start=1):
        typer.echo(f"{i}. {question}")
    typer.echo(typer.style(f"provider: {result.provider.value}", fg=typer.colors.BRIGHT_BLACK), err=True)


@app.command()
def generate(
    ctx: typer.Context,
    answers: Path = typer.Option(..., "--answers", "-a", help="YAML file with question/answer pairs"),
    rev_range: str = typer.Option("HEAD~1..HEAD", "--range", "-r", help="Git revision range"),
    offline: bool = typer.Option(False, "--offline", help="Skip AI generation entirely"),
    output: Path = typer.Option(None, "--output", "-o", help="Docs directory (default: output.docs_path)"),
):
    """Plan and write the brain-dump document for a change."""
    from redoc.ai.orchestrator import Orchestrator
    from redoc.answers import developer_supplied_diagram, developer_supplied_table
    from redoc.document import DocumentRenderer

    config = _load(ctx)
    try:
        qa = load_answers(answers)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    change = _change_context(rev_range)
    renderer = DocumentRenderer(project_name=config.project_name)

    async def _generate() -> str:
        orchestrator = Orchestrator(config)
        planned = await orchestrator.plan_document(
            change,
            qa,
            has_developer_diagrams=developer_supplied_diagram(qa),
            has_developer_tables=developer_supplied_table(qa),
        )
        if planned.plan.skip_generation:
            logger.info(f"Generation skipped: {planned.plan.skip_reason or 'no reason given'}")
            return renderer.render_offline(change, qa)

        parts = await orchestrator.generate_parts(change, qa, planned.plan)
        return renderer.render(
            change, qa, planned.plan, parts, providers={"analysis": planned.provider}
        )

    markdown = renderer.render_offline(change, qa) if offline else _run(_generate())

    docs_dir = output or Path(config.output.docs_path)
    file_path = renderer.save(markdown, docs_dir, change.branch)
    typer.echo(str(file_path))


@app.command("config-path")
def config_path():
    """Print the config file redoc reads."""
    from redoc.config import get_config_path

    typer.echo(str(get_config_path()))
