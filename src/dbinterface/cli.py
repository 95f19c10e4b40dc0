#!/usr/bin/env python3
"""dbinterface CLI for inspecting the table cache."""

import argparse
import importlib

import questionary
from rich.console import Console
from rich.table import Table as RichTable

from dbinterface.config import ConnectionDescriptor
from dbinterface.interface import Database
from dbinterface.record import resolve

console = Console()


def connect(models: str) -> Database:
    """Import the record types in `models`, then load the cache."""
    importlib.import_module(models)
    database = Database(ConnectionDescriptor.from_env())
    database.cache.populate()
    return database


def show_tables(database: Database) -> None:
    """Print every cached table with its row count."""
    tables = database.cache.tables()
    if not tables:
        console.print("[red]No tables cached.[/]")
        return

    output = RichTable(title="Cached tables")
    output.add_column("Table")
    output.add_column("Rows", justify="right")
    for name, count in sorted(tables.items()):
        output.add_row(name, str(count))
    console.print(output)


def browse(database: Database) -> None:
    """Prompt for a cached table and print its rows."""
    tables = database.cache.tables()
    if not tables:
        console.print("[red]No tables cached.[/]")
        return

    selected = questionary.select(
        "Select a table:",
        choices=[
            questionary.Choice(title=f"{name} ({count} rows)", value=name)
            for name, count in sorted(tables.items())
        ],
    ).ask()

    # User pressed Ctrl+C or Escape
    if selected is None:
        console.print("[dim]Cancelled.[/]")
        return

    record_type = database.cache.record_type(selected)
    records = database.cache.get(selected, record_type)
    bindings = resolve(record_type)

    output = RichTable(title=selected)
    for binding in bindings:
        output.add_column(binding.column)
    for record in records:
        output.add_row(*(str(binding.get(record)) for binding in bindings))
    console.print(output)


def refresh(database: Database) -> None:
    """Reload the cache after confirmation."""
    before = database.cache.tables()
    console.print(
        f"[yellow]Will reload {len(before)} tables "
        f"({sum(before.values())} rows) from the database.[/]"
    )

    if not questionary.confirm("Proceed?").ask():
        console.print("[dim]Cancelled.[/]")
        return

    database.refresh_cache()
    console.print("[green]Cache refreshed.[/]")
    show_tables(database)


def main():
    parser = argparse.ArgumentParser(description="dbinterface CLI")
    parser.add_argument(
        "--models",
        required=True,
        help="Module that defines the record types, e.g. myapp.models",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("tables", help="List cached tables and row counts")
    subparsers.add_parser("browse", help="Show the rows of a cached table")
    subparsers.add_parser("refresh", help="Reload the table cache")

    args = parser.parse_args()
    database = connect(args.models)

    if args.command == "tables":
        show_tables(database)
    elif args.command == "browse":
        browse(database)
    elif args.command == "refresh":
        refresh(database)


if __name__ == "__main__":
    main()
