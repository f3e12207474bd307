# src/ubumuntu/cli/app.py
"""Command-line interface for Ubumuntu.

This module provides a thin Typer wrapper around the commands layer.
Each command:
1. Parses args (via Typer)
2. Resolves the current user through the identity boundary
3. Calls commands module functions
4. Renders results with Rich
"""

from __future__ import annotations

import os
from typing import Any

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ubumuntu import __version__
from ubumuntu.commands import (
    ProgressUpdate,
    agents,
    chain,
    config_cmd,
    delete,
    ingest,
    query,
    visualize,
)
from ubumuntu.commands.base import (
    AgentInfo,
    CommandResult,
    ConfirmRequest,
    FileIngestResult,
    IngestResult,
)
from ubumuntu.config import load_env_file
from ubumuntu.identity import EnvIdentityProvider, IdentityProvider, StaticIdentityProvider
from ubumuntu.logging_config import configure_logging

app = typer.Typer(
    name="ubumuntu",
    help="Ubumuntu - personal retrieval over documents, notes and activity.",
    no_args_is_help=True,
)
agents_app = typer.Typer(help="Create, list and remix agents", no_args_is_help=True)
app.add_typer(agents_app, name="agents")
console = Console()

DATA_DIR_HELP = "Data directory (default: from settings)"
CONFIG_HELP = "Path to config file"


def version_callback(value: bool) -> None:
    if value:
        console.print(f"ubumuntu {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    user: str = typer.Option(
        None,
        "--user",
        "-u",
        help="User id to act as (default: $UBUMUNTU_USER_ID)",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level for diagnostic output on stderr",
    ),
) -> None:
    """Ubumuntu - personal retrieval over documents, notes and activity."""
    load_env_file()
    configure_logging(log_level)
    ctx.obj = StaticIdentityProvider(user) if user else EnvIdentityProvider()


def _identity(ctx: typer.Context) -> IdentityProvider:
    if isinstance(ctx.obj, IdentityProvider):
        return ctx.obj
    return EnvIdentityProvider()


def _fail(result: CommandResult) -> None:
    """Print a failed result and exit non-zero."""
    code = f" [dim]({result.error_code})[/dim]" if result.error_code else ""
    console.print(f"[red]Error: {result.error}[/red]{code}")
    raise typer.Exit(1)


@app.command(name="ingest")
def ingest_cmd(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Text file or directory to ingest"),
    categories: list[str] = typer.Option(
        None, "--category", help="Category to attach (repeatable)"
    ),
    public: bool = typer.Option(False, "--public", help="Make the content visible to everyone"),
    source_type: str = typer.Option(
        "document", "--type", "-t", help="Source type: document, note or activity"
    ),
    parent_id: str = typer.Option(
        None, "--id", help="Parent id for a single file (default: the file path)"
    ),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    plain: bool = typer.Option(False, "--plain", help="Plain output (no colors/formatting)"),
) -> None:
    """Ingest a text file or a directory of text files."""
    if source_type not in ("document", "note", "activity"):
        console.print(f"[red]Error: unknown source type '{source_type}'[/red]")
        raise typer.Exit(2)

    options: dict[str, Any] = {
        "path": path,
        "identity": _identity(ctx),
        "data_dir": data_dir,
        "config_path": config_file,
        "categories": categories,
        "access": "public" if public else "personal",
        "source_type": source_type,
        "parent_id": parent_id,
    }

    if not plain and console.is_terminal:
        result = _ingest_with_progress(options)
    else:
        result = ingest.ingest(**options)
    _render_ingest_result(result, plain)


def _ingest_with_progress(options: dict[str, Any]) -> IngestResult:
    """Ingest with Rich progress bars."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[stage]:>12}", justify="right"),
        BarColumn(bar_width=20),
        TextColumn("{task.description}", style="dim"),
        console=console,
    ) as progress:
        files_task = progress.add_task("", total=None, stage="Files")
        stage_task = progress.add_task("", total=1, stage="", visible=False)

        def on_file_start(filepath: str, index: int, total: int) -> None:
            progress.update(
                files_task,
                description=f"{os.path.basename(filepath)} ({index + 1}/{total})",
                completed=index,
                total=total,
            )

        def on_progress(update: ProgressUpdate) -> None:
            progress.update(
                stage_task,
                visible=True,
                stage=update.stage.value,
                description=update.message or "",
                total=None if update.is_indeterminate else update.total,
                completed=update.current,
            )

        def on_file_complete(file_result: FileIngestResult) -> None:
            progress.update(stage_task, visible=False)
            progress.advance(files_task)

        return ingest.ingest(
            **options,
            on_progress=on_progress,
            on_file_start=on_file_start,
            on_file_complete=on_file_complete,
        )


def _render_ingest_result(result: IngestResult, plain: bool) -> None:
    """Render ingest result to console."""
    if not result.success:
        _fail(result)

    if result.error and result.files_processed == 0:
        console.print(result.error if plain else f"[yellow]{result.error}[/yellow]")
        return

    summary = f"Ingested {result.files_processed} files ({result.total_chunks} chunks)"
    console.print(summary if plain else f"[green]{summary}[/green]")
    for filepath, error in result.errors:
        line = f"Failed {filepath}: {error}"
        console.print(line if plain else f"[red]{line}[/red]")


@app.command(name="query")
def query_cmd(
    ctx: typer.Context,
    question: str = typer.Argument(..., help="Question to ask"),
    k: int = typer.Option(None, "--k", "-k", help="Number of results to return"),
    raw: bool = typer.Option(
        False, "--raw", "-r", help="Return raw chunks without LLM synthesis"
    ),
    scope: str = typer.Option(
        "all", "--scope", "-s", help="Search scope: all, personal or public"
    ),
    categories: list[str] = typer.Option(
        None, "--category", help="Only search these categories (repeatable)"
    ),
    context_ids: list[str] = typer.Option(
        None, "--context", help="Only search these parent ids (repeatable)"
    ),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    plain: bool = typer.Option(False, "--plain", help="Plain output (no colors/formatting)"),
) -> None:
    """Ask a question over your content."""
    result = query.query(
        question=question,
        identity=_identity(ctx),
        data_dir=data_dir,
        config_path=config_file,
        k=k,
        raw=raw,
        access_scope=scope,  # type: ignore[arg-type]
        categories=categories,
        context_ids=context_ids,
    )

    if not result.success:
        _fail(result)

    if not result.results:
        console.print("No results found." if plain else "[yellow]No results found.[/yellow]")
        raise typer.Exit(0)

    if plain:
        if result.answer:
            console.print(f"Answer: {result.answer}")
            console.print()
        console.print("Sources:")
        for i, r in enumerate(result.results, 1):
            console.print(f"  [{i}] {r.title} (score: {r.score:.3f})")
            console.print(f"      {r.content[:100]}...")
        return

    if result.clarified_query and result.clarified_query != result.query:
        console.print(f"[dim]Searched for: {result.clarified_query}[/dim]")
    if result.answer:
        console.print(Panel(Markdown(result.answer), title="Answer", border_style="green"))
        console.print()

    console.print("[bold]Sources:[/bold]")
    for i, r in enumerate(result.results, 1):
        console.print(
            f"  [{i}] [cyan]{r.title}[/cyan] [dim]({r.source_type}, score: {r.score:.3f})[/dim]"
        )
        preview = r.content[:100].replace("\n", " ")
        if len(r.content) > 100:
            preview += "..."
        console.print(f"      [dim]{preview}[/dim]")


@app.command(name="delete")
def delete_cmd(
    ctx: typer.Context,
    parent_id: str = typer.Argument(..., help="Parent id to delete (the file path by default)"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Delete a document and all of its chunks."""

    def cli_confirm(request: ConfirmRequest) -> bool:
        if request.details:
            console.print(f"[yellow]{request.details}[/yellow]")
        return typer.confirm("Continue?")

    result = delete.delete(
        parent_id=parent_id,
        identity=_identity(ctx),
        data_dir=data_dir,
        config_path=config_file,
        on_confirm=None if force else cli_confirm,
    )

    if not result.success:
        # Handle cancellation gracefully (exit 0, not error)
        if result.error_code == "cancelled":
            console.print("[dim]Cancelled.[/dim]")
            raise typer.Exit(0)
        _fail(result)

    console.print(f"[green]Deleted {result.parent_id} ({result.chunks_deleted} chunks)[/green]")


def _agent_table(title: str, infos: list[AgentInfo]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Owner")
    table.add_column("Public", justify="center")
    table.add_column("Parents", style="dim")
    for info in infos:
        table.add_row(
            info.agent_id,
            info.name,
            info.category,
            info.owner_id,
            "yes" if info.is_public else "no",
            ", ".join(info.parent_agent_ids),
        )
    return table


@agents_app.command(name="create")
def agents_create(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", "-n", help="Agent name"),
    category: str = typer.Option(..., "--category", help="Primary category"),
    description: str = typer.Option("", "--description", help="What the agent does"),
    extra_categories: list[str] = typer.Option(
        None, "--also", help="Additional category (repeatable)"
    ),
    tools: list[str] = typer.Option(None, "--tool", help="Tool name (repeatable)"),
    context_ids: list[str] = typer.Option(
        None, "--context", help="Parent id the agent searches (repeatable)"
    ),
    public: bool = typer.Option(False, "--public", help="Publish the agent"),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Create an agent owned by you."""
    result = agents.create_agent(
        _identity(ctx),
        name=name,
        category=category,
        description=description,
        categories=extra_categories,
        tools=tools,
        context_ids=context_ids,
        is_public=public,
        data_dir=data_dir,
        config_path=config_file,
    )
    if not result.success or result.agent is None:
        _fail(result)
        return
    console.print(f"[green]Created agent {result.agent.agent_id}[/green]")


@agents_app.command(name="list")
def agents_list(
    ctx: typer.Context,
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """List your agents and public agents."""
    result = agents.list_agents(_identity(ctx), data_dir=data_dir, config_path=config_file)
    if not result.success:
        _fail(result)
    if not result.agents:
        console.print("[dim]No agents yet.[/dim]")
        raise typer.Exit(0)
    console.print(_agent_table(f"Agents ({len(result.agents)})", result.agents))


@agents_app.command(name="remix")
def agents_remix(
    ctx: typer.Context,
    agent_ids: list[str] = typer.Argument(..., help="Two or more agent ids, in priority order"),
    public: bool = typer.Option(False, "--public", help="Publish the composite agent"),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Combine agents into a new composite agent."""
    result = agents.remix(
        agent_ids, _identity(ctx), is_public=public, data_dir=data_dir, config_path=config_file
    )
    if not result.success or result.agent is None:
        _fail(result)
        return
    console.print(_agent_table("Composite agent", [result.agent]))


@app.command(name="chain")
def chain_cmd(
    ctx: typer.Context,
    agent_ids: list[str] = typer.Argument(..., help="Agent ids to run, in order"),
    input: str = typer.Option(None, "--input", "-i", help="Question given to every agent"),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Run agents one after another and report each step."""
    result = chain.chain(
        agent_ids, _identity(ctx), input=input, data_dir=data_dir, config_path=config_file
    )
    if not result.success:
        _fail(result)

    table = Table(title=f"Chain {result.run_id} - {result.status}")
    table.add_column("#", justify="right")
    table.add_column("Agent", style="cyan")
    table.add_column("Status")
    table.add_column("Time", justify="right", style="dim")
    table.add_column("Result")
    for step in result.steps:
        style = {"completed": "green", "failed": "red"}.get(step.status, "dim")
        if step.error:
            detail = step.error
        elif isinstance(step.output, dict):
            detail = str(step.output.get("response", ""))[:120]
        else:
            detail = "" if step.output is None else str(step.output)[:120]
        table.add_row(
            str(step.index),
            step.agent_id,
            f"[{style}]{step.status}[/{style}]",
            "" if step.duration_ms is None else f"{step.duration_ms:.0f}ms",
            detail,
        )
    console.print(table)
    console.print(f"Success rate: {result.success_rate:.0%}")
    if result.error:
        console.print(f"[red]{result.error}[/red]")
    if result.status != "completed":
        raise typer.Exit(1)


@app.command(name="visualize")
def visualize_cmd(
    ctx: typer.Context,
    output: str = typer.Option(None, "--output", "-o", help="Write points to this JSON file"),
    limit: int = typer.Option(20, "--limit", help="Rows to print when not writing a file"),
    data_dir: str = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Project your embeddings to 3-D points."""
    result = visualize.visualize(
        _identity(ctx), data_dir=data_dir, config_path=config_file, output_path=output
    )
    if not result.success:
        _fail(result)
    if result.output_path:
        console.print(f"[green]Wrote {len(result.points)} points to {result.output_path}[/green]")
        return
    if not result.points:
        console.print("[dim]Nothing to visualize.[/dim]")
        return

    table = Table(title=f"Embedding map ({len(result.points)} points)")
    for column in ("x", "y", "z"):
        table.add_column(column, justify="right")
    table.add_column("Type")
    table.add_column("Title", style="cyan")
    for point in result.points[:limit]:
        table.add_row(
            f"{point.x:.2f}", f"{point.y:.2f}", f"{point.z:.2f}", point.source_type, point.title
        )
    console.print(table)


@app.command(name="config")
def config_cmd_handler(
    config_file: str = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Show current configuration settings."""
    result = config_cmd.config(config_path=config_file)
    if not result.success:
        _fail(result)

    for warning in result.warnings:
        console.print(f"[yellow]Warning: {warning}[/yellow]")

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    yaml_or_default = "yaml" if result.config_path else "default"
    table.add_row("provider", result.provider, yaml_or_default)
    table.add_row("llm_model", result.llm_model or "[red]not set[/red]", yaml_or_default)
    table.add_row(
        "embedding_model", result.embedding_model or "[red]not set[/red]", yaml_or_default
    )
    table.add_row("data_dir", result.data_dir, yaml_or_default)
    for setting in result.settings:
        table.add_row(setting.name, setting.value, setting.source)
    console.print(table)

    if result.config_path:
        console.print(f"\n[dim]Config file: {result.config_path}[/dim]")
    else:
        console.print("\n[dim]No config file found. Using env vars / defaults.[/dim]")
