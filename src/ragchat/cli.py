"""Command line interface for RagChat."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ragchat.chat.service import ChatBotService, build_service
from ragchat.config import AppConfig
from ragchat.errors import EmptyInputError, ProviderError

console = Console()
app = typer.Typer(help="RagChat - question answering over your own text")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_config(db: Optional[Path], model: Optional[str] = None) -> AppConfig:
    config = AppConfig()
    if db is not None:
        config.db_path = db
    if model is not None:
        config.model_name = model
    return config


def _service(config: AppConfig) -> ChatBotService:
    return build_service(config, base_dir=Path.cwd())


@app.command()
def ingest(
    text: Optional[str] = typer.Argument(None, help="Text to ingest."),
    files: Optional[List[Path]] = typer.Option(
        None, "--file", "-f", help="Text, Markdown or PDF files (or folders) to ingest.", resolve_path=True
    ),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    model: str = typer.Option(None, help="Sentence-transformer model name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Chunk, embed and store text."""
    _setup_logging(verbose)
    files = files or []
    if text is None and not files:
        raise typer.BadParameter("Provide text or at least one --file")

    config = _load_config(db, model)
    service = _service(config)
    try:
        if text is not None:
            stats = service.ingest(text)
            console.print(f"Stored {stats.inserted} chunks.")
        if files:
            file_stats = service.indexer.ingest_files(files)
            console.print(
                f"Files ingested: {file_stats.inserted}, skipped: {file_stats.skipped}, "
                f"failed: {file_stats.failed} ({file_stats.chunks} chunks)"
            )
    except EmptyInputError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    except ProviderError as exc:
        console.print(f"[red]Embedding failed, nothing was stored: {exc}[/red]")
        raise typer.Exit(code=1)
    finally:
        service.close()


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to answer"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Answer a single question from the stored context."""
    _setup_logging(verbose)
    service = _service(_load_config(db))
    try:
        console.print(service.chat(question))
    except (EmptyInputError, ProviderError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    finally:
        service.close()


@app.command()
def chat(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Interactive conversation; an empty line exits."""
    _setup_logging(verbose)
    service = _service(_load_config(db))
    try:
        while True:
            question = console.input("[bold cyan]you>[/bold cyan] ").strip()
            if not question or question.lower() in {"exit", "quit"}:
                break
            try:
                console.print(f"[bold green]bot>[/bold green] {service.chat(question)}")
            except ProviderError as exc:
                console.print(f"[red]Something went wrong, please try again ({exc}).[/red]")
    except (EOFError, KeyboardInterrupt):
        console.print()
    finally:
        service.close()


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    model: str = typer.Option(None, help="Sentence-transformer model name"),
    top_k: int = typer.Option(5, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show the closest stored chunks without calling the chat model."""
    _setup_logging(verbose)
    config = _load_config(db, model)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    service = _service(config)
    try:
        matches = service.retriever.search(query, top_k=top_k)
    finally:
        service.close()

    if not matches:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Id")
    table.add_column("Source")
    table.add_column("Snippet")

    for match in matches:
        snippet = match.document.text.replace("\n", " ")
        source = str(match.document.metadata.get("source", "-"))
        table.add_row(f"{match.score:.4f}", str(match.document.id), source, snippet[:180])

    console.print(table)


@app.command()
def clear(
    db: Path = typer.Option(None, "--db", help="SQLite database path"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove every stored embedding."""
    config = _load_config(db)
    resolved_db = config.resolve_db_path(Path.cwd())
    if not resolved_db.exists():
        console.print("[yellow]Database not found, nothing to clear.[/yellow]")
        return
    if not yes:
        typer.confirm(f"Delete all embeddings in {resolved_db}?", abort=True)

    service = _service(config)
    try:
        removed = service.clear_all()
    finally:
        service.close()
    console.print(f"Removed {removed} embeddings.")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the HTTP API."""
    import uvicorn

    from ragchat.web.app import app as web_app

    console.print(f"Starting RagChat API on http://{host}:{port}")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")


if __name__ == "__main__":  # pragma: no cover
    app()
