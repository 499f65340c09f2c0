"""
CLI tool for inspecting and maintaining the author catalog.

Runs AuthorCatalog operations against the database configured by
DATABASE_URL.
"""

import asyncio
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from catalog.exceptions import AppException
from catalog.models.author import Author
from catalog.services.author_catalog import AuthorCatalog
from catalog.storage.db import wait_and_init_db

typer_app = typer.Typer(
    name="catalog",
    help="Author Catalog CLI - manage library authors and aliases",
    add_completion=False,
)
console = Console()


def _run(coro):  # type: ignore[no-untyped-def]
    """Run a catalog coroutine, turning catalog errors into exit code 1."""
    try:
        return asyncio.run(coro)
    except AppException as ex:
        console.print(f"[red]✗ {type(ex).__name__}:[/red] {ex.message}")
        raise typer.Exit(code=1)


def _author_table(authors: list[Author], title: str) -> Table:
    table = Table("ID", "Name", "Last, First", "Alias of", title=title)
    for author in authors:
        table.add_row(
            str(author.id),
            f"[green]{author.name}[/green]",
            author.last_first or "",
            str(author.is_alias_of) if author.is_alias_of else "[dim]-[/dim]",
        )
    return table


@typer_app.command(name="init-db")
def init_db():
    """
    Create the catalog tables if they do not exist.

    Example:
        catalog init-db
    """
    _run(wait_and_init_db())
    console.print("[green]✓[/green] Database initialized")


@typer_app.command(name="add-library")
def add_library(name: str = typer.Argument(..., help="Library name")):
    """Create a library and print its id."""
    library = _run(AuthorCatalog().create_library(name))
    console.print(f"[green]✓[/green] Library [yellow]{library.id}[/yellow]")


@typer_app.command(name="add-author")
def add_author(
    library_id: UUID = typer.Argument(..., help="Owning library id"),
    name: str = typer.Argument(..., help="Author name"),
    alias_of: Optional[UUID] = typer.Option(
        None, "--alias-of", "-a", help="Canonical author this one aliases"
    ),
    asin: Optional[str] = typer.Option(None, "--asin", help="External id"),
):
    """
    Create an author in a library.

    Example:
        catalog add-author <library-id> "Robert Galbraith" --alias-of <id>
    """
    author = _run(
        AuthorCatalog().create(
            {
                "library_id": library_id,
                "name": name,
                "is_alias_of": alias_of,
                "asin": asin,
            }
        )
    )
    console.print(_author_table([author], "Created author"))


@typer_app.command(name="find-author")
def find_author(
    library_id: UUID = typer.Argument(..., help="Library to search"),
    name: str = typer.Argument(..., help="Name to look up"),
    loose: bool = typer.Option(
        False,
        "--loose",
        "-l",
        help="Ignore whitespace and periods as well as case",
    ),
):
    """
    Look up an author by name.

    Example:
        catalog find-author <library-id> "jrr tolkien" --loose
    """
    catalog = AuthorCatalog()
    if loose:
        author = _run(catalog.find_by_normalized_name(name, library_id))
    else:
        author = _run(catalog.find_by_name(name, library_id))

    if author is None:
        console.print(f"[yellow]No author matching[/yellow] {name!r}")
        raise typer.Exit(code=1)
    console.print(_author_table([author], "Match"))


@typer_app.command(name="list-authors")
def list_authors(library_id: UUID = typer.Argument(..., help="Library id")):
    """Show every author of a library."""
    authors = _run(AuthorCatalog().list_by_library(library_id))
    console.print(_author_table(authors, f"Authors ({len(authors)})"))


@typer_app.command(name="unbind-aliases")
def unbind_aliases(author_id: UUID = typer.Argument(..., help="Canonical author")):
    """
    Release every alias pointing at an author.

    Example:
        catalog unbind-aliases <author-id>
    """
    count = _run(AuthorCatalog().unbind_all_aliases_of(author_id))
    console.print(f"[green]✓[/green] Unbound {count} aliases")


@typer_app.command(name="list-items")
def list_items(author_id: UUID = typer.Argument(..., help="Author id")):
    """Show the library items credited to an author."""
    items = _run(AuthorCatalog().list_library_items_for_author(author_id))

    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Library items for {author_id}[/bold cyan]",
            border_style="cyan",
        )
    )
    table = Table("Item", "Title", "Series", "Path", show_lines=True)
    for item in items:
        series = ", ".join(
            f"{s.name} #{s.sequence}" if s.sequence else s.name
            for s in item.media.series
        )
        table.add_row(str(item.id), item.media.title, series, item.path)
    console.print(table)
    console.print(f"[bold]Summary:[/bold] {len(items)} items")


if __name__ == "__main__":
    typer_app()
