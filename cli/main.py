"""Gleaner CLI: search, scrape and summarise from the terminal.

Usage:
    python cli/main.py --help

Commands:
    ask     → search, fetch every result, summarise with a local LLM
    urls    → print the candidate URLs for a query
    scrape  → fetch and extract a single page
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from gleaner.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
import time
from typing import Optional

import typer

from gleaner.config import get_settings
from gleaner.errors import ConfigError, FetchFailed, LLMError, SearchFailed
from gleaner.llm import LLMProcessor
from gleaner.prompt import PromptBuilder
from gleaner.search import SearchEngine

app = typer.Typer(
    name="gleaner",
    help="Search the web and summarise what it says.",
    no_args_is_help=True,
)


def _open_engine() -> SearchEngine:
    try:
        return SearchEngine(get_settings())
    except ConfigError as exc:
        typer.echo(f"[config] {exc}", err=True)
        raise typer.Exit(2)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    """Initialise logging for every sub-command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# ask: the full pipeline
# ---------------------------------------------------------------------------
@app.command("ask")
def ask(
    search_query: str = typer.Argument("rust programming", help="What to search for."),
    question: Optional[str] = typer.Option(
        None, "--question", "-q", help="Question put to the model (defaults to the search query)."
    ),
    results: str = typer.Option("5", "--results", "-n", help="Number of search results to request."),
    model: str = typer.Option("llama3.2:latest", "--model", "-m", help="Ollama model name."),
    summary: bool = typer.Option(
        True, "--summary/--no-summary", help="Summarise with the LLM or print the pages."
    ),
) -> None:
    """Search, fetch every result page, and summarise the findings."""
    query = question or f"based on the content provided what is : {search_query}"
    start = time.perf_counter()

    with _open_engine() as engine:
        typer.echo(f"[ask] Searching for {search_query!r} …")
        try:
            urls = engine.search(search_query, results)
        except SearchFailed as exc:
            typer.echo(f"[ask] {exc}", err=True)
            raise typer.Exit(1)

        if not urls:
            typer.echo(f"[ask] No URLs found for the query: {search_query!r}")
            return

        typer.echo(f"[ask] Fetching {len(urls)} page(s) …")
        report = engine.fetch_report(urls)

    typer.echo(
        f"[ask] Completed: {report.succeeded} of {report.requested} pages scraped successfully"
    )

    if not summary:
        for page in report.contents:
            typer.echo(f"\n=== {page.url} ===\n{page.content}")
        return

    prompt = PromptBuilder(query).with_contents(report.contents).build()
    try:
        text = LLMProcessor(get_settings().llm_config).process(prompt, model)
    except LLMError as exc:
        typer.echo(f"[ask] Failed to process with LLM: {exc}", err=True)
        raise typer.Exit(1)

    elapsed = time.perf_counter() - start
    typer.echo("\n=== Search Results ===")
    typer.echo("\n".join(urls))
    typer.echo("\n=== Search Results Summary ===")
    typer.echo(f"Search Query: {search_query}")
    typer.echo(f"Query: {query}")
    typer.echo(f"Processing time: {elapsed:.2f}s")
    typer.echo(f"Pages analyzed: {report.succeeded}")
    typer.echo(f"\nSummary:\n{text}")


# ---------------------------------------------------------------------------
# urls: search only
# ---------------------------------------------------------------------------
@app.command("urls")
def urls_cmd(
    search_query: str = typer.Argument(..., help="What to search for."),
    results: str = typer.Option("5", "--results", "-n", help="Number of search results to request."),
) -> None:
    """Print the candidate URLs a search returns."""
    with _open_engine() as engine:
        try:
            found = engine.search(search_query, results)
        except SearchFailed as exc:
            typer.echo(f"[urls] {exc}", err=True)
            raise typer.Exit(1)

    if not found:
        typer.echo(f"[urls] No URLs found for the query: {search_query!r}")
        return
    for url in found:
        typer.echo(url)


# ---------------------------------------------------------------------------
# scrape: one page
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="URL to scrape."),
) -> None:
    """Scrape a URL and print extracted clean text to stdout."""
    with _open_engine() as engine:
        typer.echo(f"[scrape] Fetching {url!r} …")
        try:
            page = engine.fetch_content(url)
        except FetchFailed as exc:
            typer.echo(f"[scrape] {exc}", err=True)
            raise typer.Exit(1)

    for name, value in sorted(page.metadata.items()):
        typer.echo(f"[scrape] {name:<12}: {value}")
    typer.echo(f"[scrape] Words       : {len(page.content.split())}")
    typer.echo("")
    typer.echo(page.content)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
