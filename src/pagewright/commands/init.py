"""Init command implementation."""

from __future__ import annotations

import typer
from rich.console import Console

from pagewright.core.config import PagewrightConfig

console = Console()


def init_command(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing pagewright.yaml"),
) -> None:
    """Write a default pagewright.yaml to the current directory."""
    config_path = PagewrightConfig.get_config_path()

    if config_path.exists() and not force:
        console.print(f"[yellow]⚠️  {config_path.name} already exists.[/yellow] Use --force to overwrite it.")
        raise typer.Exit(1)

    PagewrightConfig().save(config_path)

    console.print(f"[green]✅ Created[/green] [bold]{config_path.name}[/bold]")
    console.print("[dim]Set ANTHROPIC_API_KEY (or configure another agent connector) before creating pages.[/dim]")
