"""Command line interface for LocalRAG."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table as RichTable

from localrag.config import AppConfig
from localrag.embedding.encoder import EmbeddingConfig, HashEmbedder
from localrag.errors import LocalRAGError
from localrag.index.indexer import Indexer
from localrag.index.search import Searcher
from localrag.index.storage import connect
from localrag.ingestion.processor import DocumentProcessor


console = Console()
app = typer.Typer(help="LocalRAG - local document ingestion and similarity search")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _resolve_config(db: Optional[Path], **overrides) -> AppConfig:
    config = AppConfig(data_dir=db, **overrides)
    config.data_dir = config.resolve_data_dir(Path.cwd())
    return config


@app.command()
def index(
    folder: Path = typer.Argument(..., help="Folder with documents to ingest.", resolve_path=True),
    db: Path = typer.Option(None, "--db", help="Table directory"),
    table: str = typer.Option(AppConfig().table_name, "--table", help="Table name"),
    chunk_chars: int = typer.Option(
        AppConfig().chunk_chars, min=1, help="Chunk size in characters"
    ),
    overlap: int = typer.Option(AppConfig().overlap, min=0, help="Chunk overlap"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Ingest the documents directly inside FOLDER."""
    _setup_logging(verbose)
    config = _resolve_config(db, table_name=table, chunk_chars=chunk_chars, overlap=overlap)

    embedder = HashEmbedder(EmbeddingConfig(dimension=config.dimension))
    processor = DocumentProcessor(
        chunk_size=config.chunk_chars, chunk_overlap=config.overlap, embedder=embedder
    )
    connection = connect(config.data_dir)
    indexer = Indexer(processor, embedder, connection.open_table(config.table_name))

    console.print(f"Indexing into [bold]{config.data_dir / config.table_name}[/bold]...")
    stats = indexer.index_folder(folder)
    if not stats.success:
        for error in stats.errors:
            console.print(f"[red]{error}[/red]")
        raise typer.Exit(code=1)

    if stats.documents_processed == 0 and stats.failed == 0:
        console.print("[yellow]No supported documents found.[/yellow]")
        return

    console.print(
        f"Documents: {stats.documents_processed}, chunks: {stats.chunks_added}, "
        f"failed: {stats.failed}"
    )
    for error in stats.errors:
        console.print(f"[yellow]{error}[/yellow]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    db: Path = typer.Option(None, "--db", help="Table directory"),
    table: str = typer.Option(AppConfig().table_name, "--table", help="Table name"),
    top_k: int = typer.Option(AppConfig().top_k, min=0, help="Number of results to display"),
    threshold: float = typer.Option(AppConfig().threshold, help="Minimum similarity score"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Rank stored chunks against QUERY."""
    _setup_logging(verbose)
    config = _resolve_config(db, table_name=table)

    if not config.data_dir.exists():
        raise typer.BadParameter(f"Table directory not found: {config.data_dir}")

    connection = connect(config.data_dir)
    if config.table_name not in connection.table_names():
        raise typer.BadParameter(f"Table not found: {config.table_name}")

    embedder = HashEmbedder(EmbeddingConfig(dimension=config.dimension))
    searcher = Searcher(embedder, connection.open_table(config.table_name))

    try:
        results = searcher.search(query, top_k=top_k, threshold=threshold)
    except LocalRAGError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    output = RichTable(show_header=True, header_style="bold magenta")
    output.add_column("Score")
    output.add_column("Document")
    output.add_column("Chunk")
    output.add_column("Snippet")

    for result in results:
        snippet = result.text.replace("\n", " ")
        output.add_row(
            f"{result.score:.4f}",
            str(result.metadata.get("filename", "")),
            str(result.metadata.get("chunk_index", "")),
            snippet[:180],
        )

    console.print(output)


@app.command()
def tables(
    db: Path = typer.Option(None, "--db", help="Table directory"),
) -> None:
    """List tables and their row counts."""
    config = _resolve_config(db)
    if not config.data_dir.exists():
        console.print("[yellow]Table directory not found, nothing to list.[/yellow]")
        return

    connection = connect(config.data_dir)
    names = connection.table_names()
    if not names:
        console.print("[yellow]No tables found.[/yellow]")
        return

    output = RichTable(show_header=True, header_style="bold magenta")
    output.add_column("Table")
    output.add_column("Rows")
    for name in names:
        try:
            rows = str(connection.open_table(name).count_rows())
        except LocalRAGError as exc:
            rows = f"[red]{exc}[/red]"
        output.add_row(name, rows)
    console.print(output)


@app.command()
def drop(
    name: str = typer.Argument(..., help="Table to drop"),
    db: Path = typer.Option(None, "--db", help="Table directory"),
) -> None:
    """Delete a table and its records."""
    config = _resolve_config(db)
    if not config.data_dir.exists():
        console.print("[yellow]Table directory not found, nothing to drop.[/yellow]")
        return

    connection = connect(config.data_dir)
    existed = name in connection.table_names()
    connection.drop_table(name)
    if existed:
        console.print(f"Dropped table [bold]{name}[/bold].")
    else:
        console.print(f"[yellow]Table {name} does not exist.[/yellow]")
