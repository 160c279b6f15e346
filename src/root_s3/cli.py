"""
root-s3 CLI

Implements 8 CLI verbs on top of the Client facade:
- create-bucket / delete-bucket / list-buckets: Bucket management
- put-object: Upload a file (or stdin) as an object
- get-object: Download an object to a file (or stdout)
- delete-object: Delete an object (succeeds when already absent)
- list-objects: List the objects of a bucket
- head-object: Show object metadata without downloading it

Every verb takes the project id, organisation id, endpoint URL and API key
as options that fall back to ROOTS3_PROJECT_ID, ROOTS3_ORG_ID, ROOTS3_URL
and ROOTS3_API_KEY.
"""
from __future__ import annotations

import asyncio
import logging
import os
from typing import Dict, Optional

import typer
from rich.logging import RichHandler

from .cli_context import CLIContext
from .operations import run_and_exit
from .operations.printers import (
    print_buckets, print_download_summary, print_head, print_message,
    print_objects, print_put_summary
)
from .settings import DEFAULT_URL

app = typer.Typer(name="root-s3", help="Project-scoped S3 client CLI", no_args_is_help=True)

# Loggers that echo request headers (and so the API key) at DEBUG
_QUIET_LOGGERS = ("botocore", "aiobotocore", "aioboto3", "urllib3")


def _configure_logging(verbose: bool) -> None:
    """
    Configure process logging once, from --verbose or ROOTS3_LOG.

    Protocol client loggers are capped at INFO so request headers never
    reach the log.
    """
    if verbose:
        level = logging.DEBUG
    else:
        name = os.getenv("ROOTS3_LOG", "WARNING").upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )
    logging.getLogger().setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))


def _parse_metadata(value: Optional[str]) -> Optional[Dict[str, str]]:
    """
    Parse user metadata given as ``key=value,key2=value2``.

    Args:
        value: Raw option value (None or empty for no metadata)

    Returns:
        Metadata mapping, or None when no metadata was given

    Raises:
        ValueError: If an entry has no ``=`` or an empty key
    """
    if not value:
        return None

    metadata: Dict[str, str] = {}
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, sep, item = entry.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"Invalid metadata entry {entry!r}: expected key=value")
        metadata[name] = item.strip()
    return metadata or None


def _project_option():
    return typer.Option(..., "--project", "-p", envvar="ROOTS3_PROJECT_ID", help="Project id")


def _url_option():
    return typer.Option(DEFAULT_URL, "--url", "-u", envvar="ROOTS3_URL", help="Backend endpoint URL")


def _api_key_option():
    return typer.Option(..., "--api-key", envvar="ROOTS3_API_KEY", help="API key", show_default=False)


def _org_id_option():
    return typer.Option(
        None, "--org-id", "-o", envvar="ROOTS3_ORG_ID",
        help="Organisation id (default 0)", show_default=False,
    )


def _context(project: int, url: str, api_key: str, org_id: Optional[int] = None) -> CLIContext:
    return CLIContext.from_env(project_id=project, api_key=api_key, url=url, organisation_id=org_id)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Project-scoped S3 client CLI."""
    _configure_logging(verbose)


@app.command("create-bucket")
def create_bucket(
    name: str = typer.Option(..., "--name", help="Bucket name"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """Create a bucket."""

    def _create() -> None:
        client = _context(project, url, api_key, org_id).client
        asyncio.run(client.create_bucket(name))
        print_message(f"Created bucket {name}")

    run_and_exit(_create)


@app.command("delete-bucket")
def delete_bucket(
    name: str = typer.Option(..., "--name", help="Bucket name"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """Delete an empty bucket."""

    def _delete() -> None:
        client = _context(project, url, api_key, org_id).client
        asyncio.run(client.delete_bucket(name))
        print_message(f"Deleted bucket {name}")

    run_and_exit(_delete)


@app.command("list-buckets")
def list_buckets(
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """List the project's buckets."""

    def _list() -> None:
        client = _context(project, url, api_key, org_id).client
        print_buckets(asyncio.run(client.list_buckets()))

    run_and_exit(_list)


@app.command("put-object")
def put_object(
    bucket: str = typer.Option(..., "--bucket", help="Target bucket"),
    key: str = typer.Option(..., "--key", help="Object key"),
    file_path: str = typer.Option(..., "--file-path", help="File to upload ('-' reads stdin)"),
    content_type: Optional[str] = typer.Option(None, "--content-type", help="Content type stored with the object"),
    metadata: Optional[str] = typer.Option(None, "--metadata", help="User metadata as key=value,key2=value2"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """Upload a file as an object."""

    def _put() -> None:
        parsed = _parse_metadata(metadata)
        client = _context(project, url, api_key, org_id).client
        source = typer.get_binary_stream("stdin") if file_path == "-" else file_path
        result = asyncio.run(
            client.put_object(bucket, key, source, content_type=content_type, metadata=parsed)
        )
        print_put_summary(result, "stdin" if file_path == "-" else file_path)

    run_and_exit(_put)


@app.command("get-object")
def get_object(
    bucket: str = typer.Option(..., "--bucket", help="Source bucket"),
    key: str = typer.Option(..., "--key", help="Object key"),
    output: str = typer.Option(..., "--output", help="Destination file ('-' writes stdout)"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """Download an object to a file."""

    def _get() -> None:
        client = _context(project, url, api_key, org_id).client
        sink = typer.get_binary_stream("stdout") if output == "-" else output
        result = asyncio.run(client.download_object(bucket, key, sink))
        print_download_summary(result)

    run_and_exit(_get)


@app.command("delete-object")
def delete_object(
    bucket: str = typer.Option(..., "--bucket", help="Bucket"),
    key: str = typer.Option(..., "--key", help="Object key"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """Delete an object."""

    def _delete() -> None:
        client = _context(project, url, api_key, org_id).client
        asyncio.run(client.delete_object(bucket, key))
        print_message(f"Deleted {bucket}/{key}")

    run_and_exit(_delete)


@app.command("list-objects")
def list_objects(
    bucket: str = typer.Option(..., "--bucket", help="Bucket to list"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """List the objects of a bucket."""

    def _list() -> None:
        client = _context(project, url, api_key, org_id).client
        print_objects(bucket, asyncio.run(client.list_objects(bucket)))

    run_and_exit(_list)


@app.command("head-object")
def head_object(
    bucket: str = typer.Option(..., "--bucket", help="Bucket"),
    key: str = typer.Option(..., "--key", help="Object key"),
    project: int = _project_option(),
    url: str = _url_option(),
    org_id: Optional[int] = _org_id_option(),
    api_key: str = _api_key_option(),
) -> None:
    """Show object metadata without downloading it."""

    def _head() -> None:
        client = _context(project, url, api_key, org_id).client
        print_head(asyncio.run(client.head_object(bucket, key)))

    run_and_exit(_head)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
