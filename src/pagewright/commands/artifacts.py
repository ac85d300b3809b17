"""Artifact storage commands."""

from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.syntax import Syntax
from rich.table import Table

from .runtime import load_runtime, reporting_errors

console = Console()

app = typer.Typer(help="Work with stored HTML artifacts")


@app.command("list", help="List stored HTML files for a site")
def list_command(site: int = typer.Argument(..., help="Site id")) -> None:
    with reporting_errors():
        entries = load_runtime().artifacts.list(site)

    if not entries:
        console.print("[dim]No stored HTML files.[/dim]")
        return

    table = Table(title=f"Stored HTML for site {site}")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Title")

    for entry in entries:
        table.add_row(
            escape(entry.path),
            str(entry.size),
            entry.last_modified.strftime("%Y-%m-%d %H:%M"),
            escape(str(entry.metadata.get("title", ""))),
        )

    console.print(table)


@app.command("show", help="Print a stored HTML file and its metadata")
def show_command(path: str = typer.Argument(..., help="Artifact path, e.g. my-site/pages/home.html")) -> None:
    with reporting_errors():
        artifact = load_runtime().artifacts.retrieve(path)

    console.print(f"[bold]{escape(artifact.path)}[/bold] ({artifact.size} bytes)")
    if artifact.url:
        console.print(f"URL: {escape(artifact.url)}")
    if artifact.metadata:
        console.print(Syntax(json.dumps(artifact.metadata, indent=2, default=str), "json"))
    console.print(Syntax(artifact.html, "html"))


@app.command("delete", help="Delete a stored HTML file and its metadata")
def delete_command(
    path: str = typer.Argument(..., help="Artifact path"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    if not yes and not Confirm.ask(f"Delete {escape(path)}?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    with reporting_errors():
        load_runtime().artifacts.delete(path)

    console.print(f"[green]✅ Deleted[/green] [bold]{escape(path)}[/bold]")
