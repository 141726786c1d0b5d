"""Main Typer application: registers the CLI commands.

Entry point: ``outputcas`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from outputcas.cli.commands.manifest_cmd import manifest_cmd
from outputcas.cli.commands.tree_cmd import tree_cmd
from outputcas.config import settings

app = typer.Typer(
    name="outputcas",
    help="outputcas: content-addressed manifests for build action outputs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="tree", help="Show the Merkle tree of a directory.")(tree_cmd)
app.command(name="manifest", help="Build an upload manifest for action outputs.")(manifest_cmd)


@app.callback()
def configure(
    log_level: str = typer.Option(
        settings.log_level, "--log-level", help="Logging level."
    ),
) -> None:
    """Set up logging before any command runs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
