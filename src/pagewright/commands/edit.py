"""Create, modify, apply, history and prompt log commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from pagewright.core.service import EditOutcome, EditRequest
from pagewright.ledger.models import truncate
from pagewright.processing.models import ValidationReport

from .runtime import load_runtime, reporting_errors
from .validate import print_report

console = Console()


def _report_outcome(outcome: EditOutcome, output: Path | None) -> None:
    if not outcome.success:
        failure = outcome.failure
        console.print(
            Panel.fit(
                f"❌ {escape(failure.message)}\n\nReason: [bold]{failure.reason}[/bold]"
                + (f"\nError code: {escape(failure.error_code)}" if failure.error_code else ""),
                title="Agent Result",
                border_style="red",
            )
        )
        raise typer.Exit(1)

    record = outcome.record
    meta = record.meta
    summary = (
        f"✅ Recorded modification [bold]#{record.id}[/bold]\n"
        f"Size: {meta.get('size_before', 0)} → {meta.get('size_after', 0)} bytes"
    )
    if outcome.storage_path:
        summary += f"\nSaved to: [bold]{escape(outcome.storage_path)}[/bold]"
    if record.session_id:
        summary += f"\nSession: {escape(record.session_id)}"
    console.print(Panel.fit(summary, title="Agent Result", border_style="green"))
    print_report_from_meta(meta)

    if output is not None:
        output.write_text(outcome.html or "", encoding="utf-8")
        console.print(f"[green]Wrote[/green] [bold]{output}[/bold]")
    else:
        typer.echo(outcome.html)


def print_report_from_meta(meta: dict) -> None:
    validation = meta.get("validation")
    if validation:
        print_report(ValidationReport.model_validate(validation))


def create_command(
    prompt: str = typer.Argument(..., help="What the new page should contain"),
    site: int = typer.Option(..., "--site", help="Site id the page belongs to"),
    title: str = typer.Option(..., "--title", help="Title of the modification"),
    user: int | None = typer.Option(None, "--user", help="Author user id"),
    session: str | None = typer.Option(None, "--session", help="Agent session id to continue"),
    save: bool = typer.Option(False, "--save", help="Also store the HTML in object storage"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the HTML to this file"),
) -> None:
    """Generate a new HTML page from a prompt."""
    with reporting_errors():
        service = load_runtime().service()
        request = EditRequest(
            prompt=prompt, site_id=site, title=title, author_id=user, session_id=session, save_to_storage=save
        )
        with console.status("Waiting for the agent...", spinner="dots"):
            outcome = service.create(request)

    _report_outcome(outcome, output)


def modify_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="HTML file to modify"),
    prompt: str = typer.Argument(..., help="How the page should change"),
    site: int = typer.Option(..., "--site", help="Site id the page belongs to"),
    title: str = typer.Option(..., "--title", help="Title of the modification"),
    page: int | None = typer.Option(None, "--page", help="Page id the HTML was taken from"),
    user: int | None = typer.Option(None, "--user", help="Author user id"),
    session: str | None = typer.Option(None, "--session", help="Agent session id to continue"),
    save: bool = typer.Option(False, "--save", help="Also store the HTML in object storage"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the HTML to this file"),
) -> None:
    """Modify an existing HTML page according to a prompt."""
    with reporting_errors():
        service = load_runtime().service()
        request = EditRequest(
            prompt=prompt,
            site_id=site,
            title=title,
            html=file.read_text(encoding="utf-8"),
            author_id=user,
            page_id=page,
            session_id=session,
            save_to_storage=save,
        )
        with console.status("Waiting for the agent...", spinner="dots"):
            outcome = service.modify(request)

    _report_outcome(outcome, output)


def apply_command(
    record_id: int = typer.Argument(..., help="Modification id"),
    page: int = typer.Option(..., "--page", help="Page to publish the HTML to"),
    user: int = typer.Option(..., "--user", help="User id performing the apply"),
    save: bool = typer.Option(False, "--save", help="Also store the published page in object storage"),
) -> None:
    """Publish a recorded modification to a page."""
    with reporting_errors():
        applied = load_runtime().service().apply(record_id, page, user, save_to_storage=save)

    console.print(
        f"[green]✅ Applied[/green] modification [bold]#{applied.record.id}[/bold] "
        f"to page [bold]{escape(applied.page.title)}[/bold] (#{applied.page.id})"
    )
    if applied.storage_path:
        console.print(f"Saved to: [bold]{escape(applied.storage_path)}[/bold]")
    elif save:
        console.print("[yellow]⚠️ The page could not be saved to storage[/yellow]")


def history_command(
    site: int = typer.Option(..., "--site", help="Site id"),
    page: int | None = typer.Option(None, "--page", help="Only modifications of this page"),
    limit: int = typer.Option(20, "--limit", min=1, help="Maximum number of entries"),
) -> None:
    """Show recent modifications for a site."""
    with reporting_errors():
        records = load_runtime().ledger.history(site, page, limit)

    if not records:
        console.print("[dim]No modifications yet.[/dim]")
        return

    table = Table(title=f"Modifications for site {site}")
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Created")
    table.add_column("Prompt")

    for record in records:
        status = f"[green]applied → page {record.page_id}[/green]" if record.is_published else "[dim]unapplied[/dim]"
        table.add_row(
            str(record.id),
            escape(record.title),
            status,
            record.created_at.strftime("%Y-%m-%d %H:%M"),
            escape(truncate(record.prompt, 60)),
        )

    console.print(table)


def prompts_command(
    session: str | None = typer.Option(None, "--session", help="Only attempts in this agent session"),
    failed: bool = typer.Option(False, "--failed", help="Only failed attempts"),
    limit: int = typer.Option(50, "--limit", min=1, help="Maximum number of entries"),
) -> None:
    """Show the prompt log: every agent invocation, successful or not."""
    with reporting_errors():
        entries = load_runtime().ledger.prompt_history(session, False if failed else None, limit)

    if not entries:
        console.print("[dim]No prompts logged yet.[/dim]")
        return

    table = Table(title="Prompt history")
    table.add_column("ID", justify="right")
    table.add_column("Result")
    table.add_column("Created")
    table.add_column("Prompt")
    table.add_column("Response / error")

    for entry in entries:
        if entry.success:
            result = f"[green]modification {entry.modification_id}[/green]"
            detail = entry.truncated_response(60) or ""
        else:
            result = f"[red]{escape(str((entry.meta or {}).get('reason', 'failed')))}[/red]"
            detail = entry.error_message or ""
        table.add_row(
            str(entry.id),
            result,
            entry.created_at.strftime("%Y-%m-%d %H:%M"),
            escape(entry.truncated_prompt(60)),
            escape(detail),
        )

    console.print(table)
