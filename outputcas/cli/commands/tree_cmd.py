"""``outputcas tree DIR``: show the Merkle tree of one directory."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from outputcas.config import settings
from outputcas.core.errors import OutputError, UnexpectedIOError
from outputcas.core.hasher import DigestEngine
from outputcas.core.tree_builder import TreeBuilder

console = Console()


def tree_cmd(
    directory: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory to build a tree snapshot for.",
    ),
    allow_symlinks: bool = typer.Option(
        settings.allow_symlinks,
        "--allow-symlinks/--no-allow-symlinks",
        help="Digest symlinks as their target's content instead of rejecting them.",
    ),
    digest_function: str = typer.Option(
        settings.digest_function,
        "--digest-function",
        "-d",
        help="hashlib algorithm name.",
    ),
) -> None:
    """Build and display the tree snapshot for DIRECTORY."""
    try:
        engine = DigestEngine(digest_function, chunk_size=settings.read_chunk_size)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=2)

    builder = TreeBuilder(engine, allow_symlinks=allow_symlinks, exec_root=directory)
    try:
        root, snapshot = builder.build(directory)
    except (OutputError, UnexpectedIOError) as e:
        console.print(f"[bold red]Cannot build tree:[/bold red] {e}")
        raise typer.Exit(code=1)

    _, tree_digest = engine.compute_model(snapshot)
    console.print(f"[bold]Root digest:[/bold] [cyan]{builder.directory_digest(root)}[/cyan]")
    console.print(f"[bold]Tree digest:[/bold] [cyan]{tree_digest}[/cyan]")

    table = Table(title=f"Directory nodes ({snapshot.node_count})")
    table.add_column("Digest", style="cyan", overflow="fold")
    table.add_column("Files", justify="right")
    table.add_column("Subdirs", justify="right")
    for node in [root, *snapshot.children]:
        table.add_row(
            str(builder.directory_digest(node)),
            str(len(node.files)),
            str(len(node.directories)),
        )
    console.print(table)
