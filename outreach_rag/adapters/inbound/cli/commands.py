"""CLI for operating the knowledge base."""

import json
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ....composition import container
from ....config import settings, setup_logging
from ....core.services import RetrievalEngine
from ...common.exception_handler import format_exception_json

app = typer.Typer(
    name="outreach-rag",
    help="Outreach RAG - knowledge base for sales outreach and support inbox drafting",
    add_completion=False,
)

console = Console()

# Determine if we're in debug mode (shows full stack traces)
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"


def handle_cli_error(exc: Exception) -> None:
    """Display an error with its code; full JSON details in debug mode."""
    error_data = format_exception_json(exc, include_trace=DEBUG_MODE)

    if DEBUG_MODE:
        console.print(
            Panel(
                json.dumps(error_data, indent=2, ensure_ascii=False),
                title="[bold red]Error Details[/]",
                border_style="red",
            )
        )
        return

    error_code = error_data["error"].get("code", "UNKNOWN")
    console.print(f"\n[red]Error [{error_code}]:[/] {error_data['error']['message']}")
    console.print(f"[dim]Type: {error_data['error']['type']}[/]")
    console.print("[dim]Set DEBUG=true for full details[/]")


def get_engine() -> RetrievalEngine:
    """Build and initialize the engine, exiting with a message on failure."""
    setup_logging(settings.log_level, json_format=settings.log_json)
    try:
        with console.status("[bold green]Loading knowledge base...[/]"):
            return container.get_engine()
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)


@app.command()
def status() -> None:
    """Show document, chunk and vector counts."""
    console.print("[bold]Outreach RAG Status[/]\n")

    for label, value in (
        ("Embedding API key", settings.embedding_api_key),
        ("Embedding model", settings.embedding_model),
        ("Embedding API base", settings.embedding_api_base),
    ):
        mark = "✅" if value else "❌"
        console.print(f"{mark} {label} {'configured' if value else 'not set'}")

    engine = get_engine()
    stats = engine.get_stats()

    table = Table(title=f"Knowledge base: {settings.documents_dir}")
    table.add_column("Document")
    table.add_column("Size", justify="right")
    table.add_column("Chunks", justify="right")
    for doc in stats.documents:
        table.add_row(doc.name, str(doc.size), str(doc.chunks))
    console.print(table)

    console.print(
        f"\n[green]{stats.total_documents} documents, {stats.total_chunks} chunks, "
        f"{stats.total_vectors} vectors ({stats.vector_coverage} coverage)[/]"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Free-text query"),
    top_k: int = typer.Option(settings.default_top_k, "--top-k", "-k", help="Number of results"),
) -> None:
    """Run a semantic search and print ranked chunks."""
    engine = get_engine()
    try:
        with console.status("[bold green]Searching...[/]"):
            results = engine.search(query, top_k)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if not results:
        console.print(f"[yellow]{RetrievalEngine.NO_RELEVANT_INFORMATION}[/]")
        return

    for rank, result in enumerate(results, start=1):
        console.print(
            Panel(
                result.content,
                title=f"#{rank} {result.document}",
                subtitle=f"score {result.score:.3f}",
                border_style="cyan",
            )
        )


@app.command()
def add(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Text or markdown file"),
    name: str | None = typer.Option(None, help="Filename to register (defaults to the file name)"),
) -> None:
    """Add a document to the knowledge base and embed it."""
    engine = get_engine()
    content = path.read_text(encoding="utf-8")
    with console.status(f"[bold green]Embedding {path.name}...[/]"):
        result = engine.add_document(name or path.name, content)

    if not result.success:
        console.print(f"[red]Error [{result.code}]:[/] {result.error}")
        raise typer.Exit(1)
    console.print(
        f"[green]Added {name or path.name}: {result.vectors}/{result.chunks} chunks vectorized[/]"
    )


@app.command()
def delete(filename: str = typer.Argument(..., help="Registered document filename")) -> None:
    """Delete a document and its vectors."""
    engine = get_engine()
    result = engine.delete_document(filename)
    if not result.success:
        console.print(f"[red]Error [{result.code}]:[/] {result.error}")
        raise typer.Exit(1)
    console.print(f"[green]Deleted {filename} ({result.vectors} vectors removed)[/]")


@app.command()
def backfill() -> None:
    """Embed every chunk that has no vector yet."""
    engine = get_engine()
    job = container.get_maintenance_job()
    missing = len(engine.missing_chunk_ids())
    if not missing:
        console.print("[green]All chunks already have vectors[/]")
        return

    with console.status(f"[bold green]Embedding {missing} chunks...[/]"):
        generated = job.backfill_missing()
    console.print(
        f"[green]Generated {generated} vectors[/] "
        f"(coverage {engine.get_stats().vector_coverage})"
    )


if __name__ == "__main__":
    app()
