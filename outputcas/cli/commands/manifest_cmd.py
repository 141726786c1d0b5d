"""``outputcas manifest``: classify and digest action outputs.

Builds an upload manifest for the given files and directories and shows
the populated result record plus every blob that would need uploading.
With ``--store`` the blobs are written into a local blob store.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from outputcas.config import settings
from outputcas.core.blob_store import BlobIntegrityError, LocalBlobStore
from outputcas.core.errors import OutputError, UnexpectedIOError
from outputcas.core.upload_manifest import UploadManifest

console = Console()


def manifest_cmd(
    exec_root: Path = typer.Option(
        Path("."),
        "--exec-root",
        "-r",
        help="Execution root that output paths are reported relative to.",
    ),
    files: Optional[list[Path]] = typer.Option(
        None,
        "--file",
        "-f",
        help="Declared output file, relative to the exec root (repeatable).",
    ),
    dirs: Optional[list[Path]] = typer.Option(
        None,
        "--dir",
        "-D",
        help="Declared output directory, relative to the exec root (repeatable).",
    ),
    allow_symlinks: bool = typer.Option(
        settings.allow_symlinks,
        "--allow-symlinks/--no-allow-symlinks",
        help="Accept symlink outputs.",
    ),
    inline_limit: int = typer.Option(
        settings.inline_content_limit,
        "--inline-limit",
        help="Inline content byte budget.",
    ),
    store: Optional[Path] = typer.Option(
        None,
        "--store",
        "-s",
        help="Write every registered blob into a local blob store here.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the result record and registries as JSON.",
    ),
) -> None:
    """Build an upload manifest for the declared outputs."""
    config = settings.model_copy(
        update={"allow_symlinks": allow_symlinks, "inline_content_limit": inline_limit}
    )
    try:
        manifest = UploadManifest.from_settings(config, exec_root)
    except ValueError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=2)

    try:
        manifest.add_files([exec_root / f for f in files or []])
        manifest.add_directories([exec_root / d for d in dirs or []])
    except (OutputError, UnexpectedIOError) as e:
        console.print(f"[bold red]Output rejected:[/bold red] {e}")
        raise typer.Exit(code=1)

    stored = 0
    if store is not None:
        try:
            stored = LocalBlobStore(store, manifest.engine).drain(manifest)
        except (BlobIntegrityError, UnexpectedIOError) as e:
            console.print(f"[bold red]Cannot store blobs:[/bold red] {e}")
            raise typer.Exit(code=1)

    if as_json:
        payload = {
            "result": manifest.result.model_dump(mode="json"),
            "digest_to_file": {
                str(d): str(p) for d, p in manifest.digest_to_file.items()
            },
            "digest_to_upload_unit": [
                str(d) for d in manifest.digest_to_upload_unit
            ],
            "stored": stored,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    _render(manifest)
    if store is not None:
        console.print(f"[green]Stored {stored} blobs in[/green] {store}")


def _render(manifest: UploadManifest) -> None:
    result = manifest.result

    outputs = Table(title="Outputs")
    outputs.add_column("Path", style="cyan")
    outputs.add_column("Kind")
    outputs.add_column("Digest", overflow="fold")
    outputs.add_column("Exec", justify="center")
    for f in result.output_files:
        outputs.add_row(f.path, "file", str(f.digest), "x" if f.is_executable else "")
    for d in result.output_directories:
        outputs.add_row(d.path, "tree", str(d.tree_digest), "")
    console.print(outputs)

    blobs = Table(title="Blobs to upload")
    blobs.add_column("Digest", style="cyan", overflow="fold")
    blobs.add_column("Source")
    for digest, path in manifest.digest_to_file.items():
        blobs.add_row(str(digest), str(path))
    for digest in manifest.digest_to_upload_unit:
        blobs.add_row(str(digest), "[dim](in memory)[/dim]")
    console.print(blobs)
