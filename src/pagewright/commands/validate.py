"""Validate command implementation."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from pagewright.core.config import PagewrightConfig, ProcessingConfig
from pagewright.processing.models import ValidationReport
from pagewright.processing.validator import validate

from .runtime import reporting_errors

console = Console()


def print_report(report: ValidationReport) -> None:
    if report.valid:
        console.print("[green]✅ Valid HTML[/green]")
    else:
        console.print("[red]❌ Invalid HTML[/red]")

    for error in report.errors:
        console.print(f"  [red]error[/red]   {escape(error)}")
    for warning in report.warnings:
        console.print(f"  [yellow]warning[/yellow] {escape(warning)}")


def validate_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="HTML file to check"),
) -> None:
    """Validate an HTML file's structure and flag unsafe content."""
    config = ProcessingConfig()
    with reporting_errors():
        if PagewrightConfig.get_config_path().exists():
            config = PagewrightConfig.load_config().processing

    report = validate(file.read_text(encoding="utf-8"), config)
    print_report(report)

    if not report.valid:
        raise typer.Exit(1)
