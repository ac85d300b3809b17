"""Main CLI application for pagewright."""

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__

console = Console()
app = typer.Typer(
    name="pagewright",
    help="Prompt-driven HTML page editing with a modification ledger",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"pagewright v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log debug output"),
) -> None:
    """
    pagewright: ask an agent to create or edit HTML pages.

    Every result is sanitized, validated and recorded, and can later be
    published to a site page.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


# Import and register commands after app creation to avoid circular imports
def register_commands() -> None:
    """Register CLI commands."""
    from .commands import artifacts, sites
    from .commands.edit import apply_command, create_command, history_command, modify_command, prompts_command
    from .commands.init import init_command
    from .commands.validate import validate_command

    app.command("init", help="Create a default pagewright.yaml")(init_command)
    app.command("validate", help="Validate an HTML file")(validate_command)
    app.command("create", help="Generate a new HTML page from a prompt")(create_command)
    app.command("modify", help="Modify an HTML page according to a prompt")(modify_command)
    app.command("apply", help="Publish a recorded modification to a page")(apply_command)
    app.command("history", help="Show recent modifications for a site")(history_command)
    app.command("prompts", help="Show the prompt log")(prompts_command)
    app.add_typer(artifacts.app, name="artifacts")
    app.add_typer(sites.app, name="sites")


register_commands()


if __name__ == "__main__":
    app()
