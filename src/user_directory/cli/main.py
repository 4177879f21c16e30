"""Command-line interface for operating the user directory.

Provides schema setup, ad-hoc searches, bulk CSV export over the keyset
stream, and search cache invalidation.
"""

import asyncio
import csv
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.user_directory.api.http.app_data import build_dependencies
from src.user_directory.core.exceptions import DirectoryError
from src.user_directory.core.services.database.db_session import DbSessionService
from src.user_directory.core.services.search.search_service import UserSearchService
from src.user_directory.entities.core.user.entity import User
from src.user_directory.runtime.context import get_config
from src.user_directory.runtime.init_db import init_db

console = Console(stderr=True)

app = typer.Typer(
    name="user-directory",
    help="User directory CLI - manage the schema, search users and the search cache",
    rich_markup_mode="rich",
)

EXPORT_COLUMNS = [
    "id",
    "first_name",
    "last_name",
    "email",
    "country",
    "city",
    "post_code",
    "street",
]


async def _search(query: str, limit: int) -> list[User]:
    deps = await build_dependencies(get_config())
    try:
        return await deps.search_service.search_collection(query, limit)
    finally:
        await deps.close()


async def _clear_cache(query: str | None) -> bool:
    deps = await build_dependencies(get_config())
    try:
        return await deps.search_service.clear_cache(query)
    finally:
        await deps.close()


def export_row(user: User) -> list:
    address = user.address
    return [
        user.id,
        user.first_name,
        user.last_name,
        user.email,
        address.country if address else "",
        address.city if address else "",
        address.post_code if address else "",
        address.street if address else "",
    ]


@app.command("init-db")
def init_db_command() -> None:
    """🗄️ Create all database tables."""
    init_db()
    console.print("[green]✅ Database tables created[/green]")


@app.command("search")
def search(
    query: str = typer.Argument("", help="Free-text search, empty lists everyone"),
    limit: int = typer.Option(20, help="Maximum number of users to show"),
) -> None:
    """🔎 Search users and print them as a table."""
    try:
        users = asyncio.run(_search(query, limit))
    except Exception as e:
        console.print(f"[red]❌ Search failed: {e}[/red]")
        raise typer.Exit(1) from None

    if not users:
        console.print(f"[yellow]No users match '{query}'[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email", style="green")
    table.add_column("City", style="blue")
    table.add_column("Country", style="blue")
    for user in users:
        table.add_row(
            str(user.id),
            user.full_name,
            user.email,
            user.address.city if user.address else "",
            user.address.country if user.address else "",
        )

    Console().print(table)
    console.print(f"\n[dim]Showing {len(users)} users[/dim]")


@app.command("export")
def export(
    query: str = typer.Argument("", help="Free-text search, empty exports everyone"),
    chunk_size: int = typer.Option(
        None, help="Rows read per batch (defaults to search.stream_chunk_size)"
    ),
    after_id: int = typer.Option(0, help="Resume after this user id"),
    output: Path = typer.Option(None, help="CSV file to write, stdout when omitted"),
) -> None:
    """📤 Stream every matching user as CSV, oldest id first."""
    db_service = DbSessionService()
    search_service = UserSearchService(db_service, None, get_config().search)
    stream = search_service.stream(query, chunk_size=chunk_size, after_id=after_id)

    handle = output.open("w", newline="") if output else sys.stdout
    count = 0
    try:
        writer = csv.writer(handle)
        writer.writerow(EXPORT_COLUMNS)
        for user in stream:
            writer.writerow(export_row(user))
            count += 1
    except DirectoryError as e:
        console.print(
            f"[red]❌ Export stopped after {count} users "
            f"(resume with --after-id {stream.last_seen_id}): {e}[/red]"
        )
        raise typer.Exit(1) from None
    finally:
        if output:
            handle.close()
        db_service.dispose()

    console.print(
        f"[green]✅ Exported {count} users[/green] [dim](last id {stream.last_seen_id})[/dim]"
    )


@app.command("clear-cache")
def clear_cache(
    query: str = typer.Option(None, help="Only drop entries for this search"),
) -> None:
    """🧹 Invalidate cached search results."""
    console.print(Panel.fit("[bold cyan]Clearing search cache[/bold cyan]", border_style="cyan"))
    cleared = asyncio.run(_clear_cache(query))

    if cleared:
        console.print("[green]✅ Search cache cleared[/green]")
    else:
        console.print(
            "[yellow]Cache backend cannot flush by tag, entries expire within the TTL[/yellow]"
        )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
