"""
Fake S3 transport implementation for testing.

Mimics the response shapes of an aiobotocore S3 client closely enough for
the Client facade: backend errors are raised as botocore ClientError with the
same codes and statuses a real backend returns, and object bodies are async
readers with a ``close()`` method.
"""
from __future__ import annotations

import asyncio
import hashlib
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional

from botocore.exceptions import ClientError

__all__ = ["FakeBody", "FakeObject", "FakeS3Api", "FakeS3Backend", "FakeS3Transport", "client_error"]


def client_error(code: str, status: int, operation: str, message: str = "") -> ClientError:
    """Build a ClientError the way botocore does for an S3 error response."""
    return ClientError(
        {
            "Error": {"Code": code, "Message": message or code},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeBody:
    """
    Async object body backed by bytes.

    Options simulate stream failures:
    - truncate_to: stop returning data after this many bytes
    - fail_after: raise ``fail_with`` once this many bytes were returned
    - block_after: wait forever once this many bytes were returned
    """

    def __init__(
        self,
        data: bytes,
        *,
        truncate_to: Optional[int] = None,
        fail_after: Optional[int] = None,
        fail_with: Optional[BaseException] = None,
        block_after: Optional[int] = None,
    ) -> None:
        self._data = data if truncate_to is None else data[:truncate_to]
        self._fail_after = fail_after
        self._fail_with = fail_with
        self._block_after = block_after
        self.bytes_read = 0
        self.read_calls = 0
        self.closed = False
        self.blocked = asyncio.Event()

    async def read(self, amt: Optional[int] = None) -> bytes:
        if self.closed:
            raise RuntimeError("read on closed body")
        self.read_calls += 1

        if self._fail_after is not None and self.bytes_read >= self._fail_after:
            raise self._fail_with or ConnectionResetError("connection reset by peer")
        if self._block_after is not None and self.bytes_read >= self._block_after:
            self.blocked.set()
            await asyncio.Event().wait()

        end = len(self._data) if amt is None or amt < 0 else self.bytes_read + amt
        chunk = self._data[self.bytes_read:end]
        self.bytes_read += len(chunk)
        return chunk

    def close(self) -> None:
        self.closed = True


@dataclass
class FakeObject:
    data: bytes
    content_type: str = "binary/octet-stream"
    metadata: Dict[str, str] = field(default_factory=dict)
    last_modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def etag(self) -> str:
        return f'"{hashlib.md5(self.data).hexdigest()}"'


class FakeS3Backend:
    """
    In-memory bucket/object state shared by all clients of a fake transport.

    This is a test double; not for production use.
    """

    def __init__(self) -> None:
        self.buckets: Dict[str, Dict[str, FakeObject]] = {}
        self.created: Dict[str, datetime] = {}
        self.calls: List[tuple] = []
        self.bodies: List[FakeBody] = []
        # Options for the next bodies handed out by get_object
        self.body_options: Dict[str, Any] = {}
        # Raised by the next operation instead of executing it
        self.fail_next: Optional[BaseException] = None
        # Truncate ListObjectsV2 responses after this many keys
        self.max_keys: Optional[int] = None

    def _bucket(self, name: str, operation: str) -> Dict[str, FakeObject]:
        if name not in self.buckets:
            raise client_error("NoSuchBucket", 404, operation, "The specified bucket does not exist")
        return self.buckets[name]

    def _record(self, operation: str, **params: Any) -> None:
        self.calls.append((operation, params))
        if self.fail_next is not None:
            exc, self.fail_next = self.fail_next, None
            raise exc

    def seed(self, bucket: str, key: str, data: bytes, **kwargs: Any) -> None:
        """Put an object directly into the backend (test utility)."""
        self.buckets.setdefault(bucket, {})
        self.created.setdefault(bucket, datetime.now(timezone.utc))
        self.buckets[bucket][key] = FakeObject(data=data, **kwargs)

    @property
    def operations(self) -> List[str]:
        return [name for name, _ in self.calls]


class FakeS3Api:
    """Protocol client view over a FakeS3Backend."""

    def __init__(self, backend: FakeS3Backend) -> None:
        self._backend = backend

    async def create_bucket(self, *, Bucket: str, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("CreateBucket", Bucket=Bucket)
        if Bucket in self._backend.buckets:
            raise client_error("BucketAlreadyOwnedByYou", 409, "CreateBucket")
        self._backend.buckets[Bucket] = {}
        self._backend.created[Bucket] = datetime.now(timezone.utc)
        return {"Location": f"/{Bucket}"}

    async def delete_bucket(self, *, Bucket: str, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("DeleteBucket", Bucket=Bucket)
        objects = self._backend._bucket(Bucket, "DeleteBucket")
        if objects:
            raise client_error("BucketNotEmpty", 409, "DeleteBucket")
        del self._backend.buckets[Bucket]
        self._backend.created.pop(Bucket, None)
        return {}

    async def list_buckets(self, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("ListBuckets")
        return {
            "Buckets": [
                {"Name": name, "CreationDate": self._backend.created.get(name)}
                for name in self._backend.buckets
            ]
        }

    async def put_object(self, *, Bucket: str, Key: str, Body: Any = b"", **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("PutObject", Bucket=Bucket, Key=Key, **kwargs)
        objects = self._backend._bucket(Bucket, "PutObject")
        data = Body if isinstance(Body, bytes) else Body.read()
        obj = FakeObject(
            data=data,
            content_type=kwargs.get("ContentType") or "binary/octet-stream",
            metadata=dict(kwargs.get("Metadata") or {}),
        )
        objects[Key] = obj
        return {"ETag": obj.etag}

    async def get_object(self, *, Bucket: str, Key: str, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("GetObject", Bucket=Bucket, Key=Key)
        objects = self._backend._bucket(Bucket, "GetObject")
        if Key not in objects:
            raise client_error("NoSuchKey", 404, "GetObject", "The specified key does not exist.")
        obj = objects[Key]
        body = FakeBody(obj.data, **self._backend.body_options)
        self._backend.bodies.append(body)
        return {
            "Body": body,
            "ContentLength": len(obj.data),
            "ContentType": obj.content_type,
            "ETag": obj.etag,
            "LastModified": obj.last_modified,
            "Metadata": dict(obj.metadata),
        }

    async def delete_object(self, *, Bucket: str, Key: str, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("DeleteObject", Bucket=Bucket, Key=Key)
        objects = self._backend._bucket(Bucket, "DeleteObject")
        if Key not in objects:
            raise client_error("NoSuchKey", 404, "DeleteObject")
        del objects[Key]
        return {}

    async def list_objects_v2(self, *, Bucket: str, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("ListObjectsV2", Bucket=Bucket)
        objects = self._backend._bucket(Bucket, "ListObjectsV2")
        keys = sorted(objects)
        truncated = self._backend.max_keys is not None and len(keys) > self._backend.max_keys
        if truncated:
            keys = keys[:self._backend.max_keys]
        return {
            "Contents": [
                {
                    "Key": key,
                    "Size": len(objects[key].data),
                    "LastModified": objects[key].last_modified,
                    "ETag": objects[key].etag,
                }
                for key in keys
            ],
            "KeyCount": len(keys),
            "IsTruncated": truncated,
        }

    async def head_object(self, *, Bucket: str, Key: str, **kwargs: Any) -> Dict[str, Any]:
        self._backend._record("HeadObject", Bucket=Bucket, Key=Key)
        objects = self._backend.buckets.get(Bucket)
        # HEAD responses carry no error body, only the status
        if objects is None or Key not in objects:
            raise client_error("404", 404, "HeadObject", "Not Found")
        obj = objects[Key]
        return {
            "ContentLength": len(obj.data),
            "ContentType": obj.content_type,
            "ETag": obj.etag,
            "LastModified": obj.last_modified,
            "Metadata": dict(obj.metadata),
        }


class FakeS3Transport:
    """
    Transport handing out FakeS3Api clients over one shared backend.

    Counts opened and closed clients so tests can assert that every protocol
    client was released.
    """

    def __init__(self, backend: Optional[FakeS3Backend] = None) -> None:
        self.backend = backend if backend is not None else FakeS3Backend()
        self.opened = 0
        self.closed = 0

    @property
    def open_clients(self) -> int:
        return self.opened - self.closed

    @asynccontextmanager
    async def open(self) -> AsyncIterator[FakeS3Api]:
        self.opened += 1
        try:
            yield FakeS3Api(self.backend)
        finally:
            self.closed += 1
