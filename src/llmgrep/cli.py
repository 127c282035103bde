"""Command line interface for llmgrep."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from llmgrep.config import AppConfig
from llmgrep.oracle.client import OllamaClient, OracleError
from llmgrep.search.ranking import Ranker
from llmgrep.search.scorer import RelevanceScorer
from llmgrep.search.verifier import ContentVerifier


console = Console()
app = typer.Typer(help="llmgrep - semantic file search using a local Ollama model")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.NOTSET if verbose else logging.WARNING)


def _parse_ignore_paths(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _print_line(text: str) -> None:
    console.print(escape(text), soft_wrap=True, highlight=False)


async def _run(config: AppConfig, directory: Path, query: str) -> None:
    async with OllamaClient(
        config.model_name, host=config.ollama_host, timeout=config.request_timeout
    ) as oracle:
        await oracle.check_model()

        scorer = RelevanceScorer(oracle, batch_size=config.batch_size)
        ranker = Ranker(
            scorer,
            ignore_paths=config.ignore_paths,
            max_file_size=config.max_file_size,
            max_attempts=config.max_attempts,
        )

        console.print("First pass: recursively collecting and scoring all files...")
        candidates = await ranker.rank(directory, query)
        if not candidates:
            console.print("[yellow]No candidates found.[/yellow]")
            return

        console.print("Sorted candidates:")
        for candidate in candidates:
            _print_line(f"{candidate.path} (score: {candidate.score:.2f})")

        console.print("\nSecond pass: analyzing content of promising candidates...")
        verifier = ContentVerifier(
            oracle, chunk_chars=config.chunk_chars, max_file_size=config.max_file_size
        )
        matches = 0
        async for match in verifier.verify(candidates, query):
            matches += 1
            _print_line(f"{match.path}: {match.explanation or '(no explanation given)'}")

        if not matches:
            console.print("[yellow]No matches found.[/yellow]")


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query - what to look for semantically"),
    directory: Path = typer.Argument(Path("."), help="Directory to search in"),
    model: str = typer.Option(AppConfig().model_name, help="Ollama model to use"),
    ignore_paths: str = typer.Option(
        ",".join(AppConfig().ignore_paths),
        "--ignore-paths",
        help="Paths to ignore during search (comma separated)",
    ),
    host: Optional[str] = typer.Option(
        None, help="Ollama server URL (defaults to $OLLAMA_HOST or localhost:11434)"
    ),
    timeout: float = typer.Option(
        AppConfig().request_timeout, help="Per-request deadline in seconds, 0 disables"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Search DIRECTORY for files semantically related to QUERY."""
    _setup_logging(verbose)
    config = AppConfig(
        model_name=model,
        ollama_host=host,
        ignore_paths=_parse_ignore_paths(ignore_paths),
        request_timeout=timeout,
    )
    logging.getLogger(__name__).debug("Searching for: %s", query)

    try:
        asyncio.run(_run(config, directory, query))
    except OracleError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    except OSError as exc:
        console.print(f"[red]Cannot search {escape(str(directory))}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
