"""
Transfer adapter between local byte resources and object bodies.

Uploads take a path, in-memory bytes or a readable binary file object and
hand the protocol client a seekable body that streams from the source.
Downloads expose the response body as an async iterator of chunks and write
it to a path (atomically) or to a binary writer.

Local failures are raised as LocalIOError, stream failures as TransportError.
"""
from __future__ import annotations

import asyncio
import io
import logging
import os
import tempfile
import warnings
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import IO, Any, AsyncIterator, Awaitable, Callable, Optional, Union

from .errors import LocalIOError, StorageError, TransportError
from .storage.base import StreamingBody

__all__ = [
    "CHUNK_SIZE",
    "ByteSource",
    "ByteSink",
    "ObjectStream",
    "open_source",
    "write_stream",
]

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MiB

# Type aliases for local sources and sinks
ByteSource = Union[str, "os.PathLike[str]", bytes, bytearray, memoryview, IO[bytes]]
ByteSink = Union[str, "os.PathLike[str]", IO[bytes]]


class _GuardedReader(io.BufferedIOBase):
    """
    Read-only view of a local source that reports OSError as LocalIOError.

    Closing the view leaves the wrapped file open; its owner closes it.
    """

    def __init__(self, raw: IO[bytes], name: str) -> None:
        super().__init__()
        self._raw = raw
        self.name = name

    def _fail(self, action: str, exc: OSError) -> LocalIOError:
        return LocalIOError(f"{action} {self.name} failed: {exc}")

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return self._raw.seekable()

    def read(self, size: Optional[int] = -1) -> bytes:
        try:
            return self._raw.read(-1 if size is None else size)
        except OSError as exc:
            raise self._fail("Reading", exc) from exc

    def read1(self, size: Optional[int] = -1) -> bytes:
        return self.read(size)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        try:
            return self._raw.seek(offset, whence)
        except OSError as exc:
            raise self._fail("Seeking", exc) from exc

    def tell(self) -> int:
        try:
            return self._raw.tell()
        except OSError as exc:
            raise self._fail("Seeking", exc) from exc


def _is_seekable(fileobj: Any) -> bool:
    try:
        return bool(fileobj.seekable())
    except (AttributeError, OSError, ValueError):
        return False


def _spool(source: IO[bytes], spool: IO[bytes], chunk_size: int) -> None:
    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        spool.write(chunk)
    spool.seek(0)


@asynccontextmanager
async def open_source(source: ByteSource, *, spool_size: int = CHUNK_SIZE) -> AsyncIterator[io.BufferedIOBase]:
    """
    Open a local byte source as an upload body.

    Paths are opened here and closed on every exit path. Caller-owned file
    objects are never closed. Non-seekable sources (pipes, sockets) are spooled
    to a temporary file that stays in memory up to ``spool_size`` bytes. Spooling
    runs in a worker thread so a slow producer never stalls the event loop.

    Args:
        source: Path, bytes-like data or readable binary file object
        spool_size: In-memory limit for spooling non-seekable sources

    Yields:
        Seekable binary reader positioned at the start of the payload

    Raises:
        LocalIOError: If the source cannot be opened or read
        TypeError: If the source is not a supported type
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield _GuardedReader(io.BytesIO(bytes(source)), name="<bytes>")
        return

    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        try:
            fh = open(path, "rb")
        except OSError as exc:
            raise LocalIOError(f"Cannot open upload source {path}: {exc}") from exc
        with fh:
            logger.debug(f"Streaming upload from {path}")
            yield _GuardedReader(fh, name=path)
        return

    if not hasattr(source, "read"):
        raise TypeError(f"Unsupported upload source type: {type(source).__name__}")

    name = str(getattr(source, "name", "<stream>"))
    if _is_seekable(source):
        yield _GuardedReader(source, name=name)
        return

    with tempfile.SpooledTemporaryFile(max_size=spool_size) as spool:
        try:
            await asyncio.to_thread(_spool, source, spool, spool_size)
        except OSError as exc:
            raise LocalIOError(f"Reading {name} failed: {exc}") from exc
        logger.debug(f"Spooled non-seekable upload source {name}")
        yield _GuardedReader(spool, name=name)


class ObjectStream:
    """
    Lazy, finite sequence of byte chunks of a downloaded object.

    Iterating to the end yields the complete payload and releases the
    connection. Close it explicitly (or use ``async with``) when stopping
    early. Failures after the response started are raised as TransportError.

    A stream that is dropped without being exhausted or closed keeps its
    protocol client and concurrency permit until the process exits; garbage
    collecting it emits a ResourceWarning.
    """

    def __init__(
        self,
        body: StreamingBody,
        *,
        bucket: str,
        key: str,
        content_length: Optional[int] = None,
        content_type: Optional[str] = None,
        chunk_size: int = CHUNK_SIZE,
        on_close: Optional[Callable[[], Awaitable[Any]]] = None,
    ) -> None:
        self._body = body
        self.bucket = bucket
        self.key = key
        self.content_length = content_length
        self.content_type = content_type
        self._chunk_size = chunk_size
        self._on_close = on_close
        self._received = 0
        self._closed = False

    @property
    def bytes_received(self) -> int:
        return self._received

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> ObjectStream:
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration

        try:
            chunk = await self._body.read(self._chunk_size)
        except StorageError:
            await self.aclose()
            raise
        except Exception as exc:
            await self.aclose()
            raise TransportError(f"Download of {self.bucket}/{self.key} failed mid-stream: {exc}") from exc
        except BaseException:
            await self.aclose()
            raise

        if not chunk:
            await self.aclose()
            if self.content_length is not None and self._received != self.content_length:
                raise TransportError(
                    f"Download of {self.bucket}/{self.key} truncated: "
                    f"expected {self.content_length} bytes, got {self._received}"
                )
            raise StopAsyncIteration

        self._received += len(chunk)
        return chunk

    async def read(self) -> bytes:
        """Consume the remaining stream into memory."""
        async with self:
            return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        """Release the body and the protocol client. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        try:
            self._body.close()
        finally:
            if self._on_close is not None:
                await self._on_close()

    async def __aenter__(self) -> ObjectStream:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __del__(self) -> None:
        # The body and client can only be released from a running loop
        if not getattr(self, "_closed", True):
            warnings.warn(
                f"Unclosed ObjectStream for {self.bucket}/{self.key}; its connection is leaked",
                ResourceWarning,
                source=self,
            )


async def _write_chunks(stream: ObjectStream, writer: IO[bytes], name: str) -> int:
    written = 0
    async for chunk in stream:
        try:
            await asyncio.to_thread(writer.write, chunk)
        except OSError as exc:
            raise LocalIOError(f"Writing {name} failed: {exc}") from exc
        written += len(chunk)
    return written


def _sync(out: IO[bytes]) -> None:
    out.flush()
    os.fsync(out.fileno())


async def _write_to_path(stream: ObjectStream, target: Path) -> int:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".roots3.tmp.", dir=target.parent)
    except OSError as exc:
        raise LocalIOError(f"Cannot create download target {target}: {exc}") from exc

    temp_path = Path(temp_name)
    committed = False
    try:
        with os.fdopen(fd, "wb") as out:
            written = await _write_chunks(stream, out, str(target))
            try:
                await asyncio.to_thread(_sync, out)
            except OSError as exc:
                raise LocalIOError(f"Writing {target} failed: {exc}") from exc
        try:
            await asyncio.to_thread(os.replace, temp_path, target)
        except OSError as exc:
            raise LocalIOError(f"Cannot move download into place at {target}: {exc}") from exc
        committed = True
    finally:
        if not committed:
            with suppress(FileNotFoundError):
                temp_path.unlink()

    logger.debug(f"Wrote {written} bytes to {target}")
    return written


async def write_stream(stream: ObjectStream, sink: ByteSink) -> int:
    """
    Consume a download stream into a local sink.

    Paths are written through a temporary file in the same directory and
    renamed into place on success; on failure or cancellation the temporary
    file is removed and the target is left untouched. Writers are not closed.

    Args:
        stream: Download stream, closed when this returns or raises
        sink: Destination path or writable binary file object

    Returns:
        Number of bytes written

    Raises:
        LocalIOError: If the sink cannot be written
        TransportError: If the stream fails
    """
    async with stream:
        if isinstance(sink, (str, os.PathLike)):
            return await _write_to_path(stream, Path(sink))
        name = str(getattr(sink, "name", "<writer>"))
        return await _write_chunks(stream, sink, name)
