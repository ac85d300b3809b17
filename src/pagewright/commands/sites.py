"""Commands for managing the sites, pages and users that modifications refer to."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from .runtime import load_runtime, reporting_errors

console = Console()

app = typer.Typer(help="Manage sites, pages and team members")


@app.command("create", help="Create a site")
def create_site_command(name: str = typer.Argument(..., help="Site name, used as its storage directory")) -> None:
    with reporting_errors():
        site = load_runtime().sites.create_site(name)
    console.print(f"[green]✅ Created site[/green] [bold]{escape(site.site_name)}[/bold] (#{site.id})")


@app.command("add-page", help="Add a page to a site")
def add_page_command(
    site: int = typer.Argument(..., help="Site id"),
    title: str = typer.Argument(..., help="Page title"),
    file: Path | None = typer.Option(None, "--file", exists=True, dir_okay=False, help="Initial page HTML"),
) -> None:
    html = file.read_text(encoding="utf-8") if file else ""
    with reporting_errors():
        page = load_runtime().sites.create_page(site, title, html)
    console.print(f"[green]✅ Created page[/green] [bold]{escape(page.title)}[/bold] (#{page.id})")


@app.command("add-user", help="Create a user")
def add_user_command(
    name: str = typer.Argument(..., help="User name"),
    super_admin: bool = typer.Option(False, "--super-admin", help="May modify pages of every site"),
) -> None:
    with reporting_errors():
        user = load_runtime().sites.create_user(name, is_super_admin=super_admin)
    console.print(f"[green]✅ Created user[/green] [bold]{escape(user.name)}[/bold] (#{user.id})")


@app.command("add-member", help="Let a user edit a site's pages")
def add_member_command(
    site: int = typer.Argument(..., help="Site id"),
    user: int = typer.Argument(..., help="User id"),
) -> None:
    with reporting_errors():
        load_runtime().sites.add_member(site, user)
    console.print(f"[green]✅ User #{user} is now a member of site #{site}[/green]")
