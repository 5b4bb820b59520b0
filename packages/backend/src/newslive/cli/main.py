"""NewsLive CLI — run the API server and browse articles from a terminal.

Usage:
    newslive serve                               # Run the API on :8080
    newslive articles                            # Newest articles
    newslive articles --category Tech            # One category
    newslive articles --search market            # Title search
    newslive show 3f2c...                        # One article in full
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Optional

import click
import httpx

from newslive import __version__
from newslive.schemas.article import Category

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8080"

CATEGORY_COLORS = {
    Category.POLITICS.value: "magenta",
    Category.SPORT.value: "green",
    Category.TECH.value: "cyan",
}


def _api_url() -> str:
    return os.environ.get("NEWSLIVE_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the NewsLive API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fail(resp: httpx.Response) -> None:
    try:
        message = resp.json().get("error", resp.text)
    except ValueError:
        message = resp.text
    click.secho(f"Error ({resp.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="newslive")
def main():
    """NewsLive — real-time news portal backend."""


@main.command()
@click.option("--host", default=None, help="Bind address (default from NEWSLIVE_HOST)")
@click.option("--port", default=None, type=int, help="Port (default from NEWSLIVE_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from newslive.config import settings

    uvicorn.run(
        "newslive.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command()
@click.option(
    "--category", "-c",
    type=click.Choice(Category.values()),
    help="Only this category",
)
@click.option("--search", "-s", help="Case-insensitive title search")
@click.option("--limit", "-n", default=20, show_default=True, help="Max articles")
def articles(category: Optional[str], search: Optional[str], limit: int):
    """List articles, newest first."""
    asyncio.run(_articles_impl(category, search, limit))


async def _articles_impl(category: Optional[str], search: Optional[str], limit: int):
    params: dict = {"limit": limit}
    if category:
        params["category"] = category
    if search:
        params["search"] = search

    async with _client() as c:
        r = await c.get("/articles", params=params)
    if r.status_code != 200:
        _fail(r)

    rows = r.json()
    if not rows:
        click.echo("No articles found.")
        return

    _print_table(rows, [
        ("ID", "id", 8),
        ("CATEGORY", "category", 8),
        ("TITLE", "title", 40),
        ("AUTHOR", "authorName", 16),
        ("CREATED", "createdAt", 20),
    ])


@main.command()
@click.argument("article_id")
def show(article_id: str):
    """Print one article in full."""
    asyncio.run(_show_impl(article_id))


async def _show_impl(article_id: str):
    async with _client() as c:
        r = await c.get(f"/articles/{article_id}")
    if r.status_code != 200:
        _fail(r)

    a = r.json()
    click.secho(a["title"], bold=True)
    click.secho(a["category"], fg=CATEGORY_COLORS.get(a["category"], "white"))
    click.echo(f"by {a['authorName']} · {a['createdAt']}")
    if a["updatedAt"] != a["createdAt"]:
        click.echo(f"updated {a['updatedAt']}")
    click.echo()
    click.echo(a["content"])


if __name__ == "__main__":
    main()
