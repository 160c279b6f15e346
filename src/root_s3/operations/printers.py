"""
Human-readable output formatting.

Centralizes all CLI output formatting so commands stay thin. Listings and
object metadata are rendered as rich tables; short confirmations go through
typer.echo.
"""
from __future__ import annotations

import typer
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import BucketInfo, DownloadResult, ObjectHead, ObjectInfo, PutObjectResult

_console = Console()
_err_console = Console(stderr=True)


def _format_bytes(size: int) -> str:
    """Format byte count in human-readable units."""
    value = float(size)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if value < 1024 or unit == "TB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _format_time(value) -> str:
    return value.isoformat() if value is not None else "-"


def print_message(message: str) -> None:
    """Print a one-line confirmation."""
    typer.echo(message)


def print_error(exc: BaseException) -> None:
    """Print an error to stderr, prefixed with its class name."""
    _err_console.print(f"[bold red]{type(exc).__name__}:[/] {escape(str(exc))}", highlight=False)


def print_buckets(buckets: List[BucketInfo]) -> None:
    """
    Print bucket names in backend order.

    Args:
        buckets: Buckets returned by list_buckets
    """
    if not buckets:
        _console.print("[dim]No buckets[/]")
        return

    table = Table(title="Buckets")
    table.add_column("Name", style="cyan")
    table.add_column("Created", style="dim")
    for bucket in buckets:
        table.add_row(escape(bucket.name), _format_time(bucket.created_at))
    _console.print(table)


def print_objects(bucket: str, objects: List[ObjectInfo]) -> None:
    """
    Print a bucket listing.

    Args:
        bucket: Bucket that was listed
        objects: Object entries returned by list_objects
    """
    if not objects:
        _console.print(f"[dim]No objects in {escape(bucket)}[/]")
        return

    table = Table(title=f"Objects in {escape(bucket)}")
    table.add_column("Key", style="cyan")
    table.add_column("Size", style="yellow", justify="right")
    table.add_column("Last modified", style="dim")
    table.add_column("ETag", style="dim")
    for entry in objects:
        table.add_row(
            escape(entry.key),
            _format_bytes(entry.size),
            _format_time(entry.last_modified),
            escape(entry.etag or "-"),
        )
    _console.print(table)


def print_head(head: ObjectHead) -> None:
    """Print object metadata from a HEAD request."""
    _console.print(f"[bold]Object:[/] {escape(head.bucket)}/{escape(head.key)}")
    _console.print(f"[bold]Size:[/] {_format_bytes(head.size)} ({head.size} bytes)")
    _console.print(f"[bold]Content type:[/] {escape(head.content_type or '-')}")
    _console.print(f"[bold]Last modified:[/] {_format_time(head.last_modified)}")
    _console.print(f"[bold]ETag:[/] {escape(head.etag or '-')}")

    if head.metadata:
        table = Table(title="Metadata")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for name, value in sorted(head.metadata.items()):
            table.add_row(escape(name), escape(value))
        _console.print(table)


def print_put_summary(result: PutObjectResult, source: str) -> None:
    """Print upload confirmation."""
    typer.echo(f"Uploaded {source} to {result.bucket}/{result.key}")
    if result.etag:
        typer.echo(f"ETag: {result.etag}")


def print_download_summary(result: DownloadResult) -> None:
    """
    Print download confirmation.

    Goes to stderr when the object itself was written to stdout.
    """
    target = result.path or "stdout"
    typer.echo(
        f"Downloaded {result.bucket}/{result.key} to {target} ({_format_bytes(result.size)})",
        err=result.path is None,
    )
