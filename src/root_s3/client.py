"""
Client facade for the root S3 backend.

Design Notes: Client Facade

The Client is the public entry point. It binds one endpoint, one API key and
one project at construction and exposes one coroutine per supported
operation. It centralizes:

- Construction-time validation (URL, API key, project id); no network
- Error translation (protocol exceptions -> root_s3.errors taxonomy)
- Concurrency bounding (one semaphore permit per in-flight operation)
- Transport injection (enables testing with fakes)

It performs no retries; retry policy belongs to the transport.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, List, Mapping, Optional

from .errors import ConfigurationError, NotFoundError, translate
from .models import BucketInfo, DownloadResult, ObjectHead, ObjectInfo, PutObjectResult
from .settings import Settings
from .storage.base import S3Api, Transport
from .storage.credentials import ApiKeyCredentials
from .storage.endpoint import Endpoint
from .storage.transport import AioBotoTransport, ProjectScope
from .transfer import ByteSink, ByteSource, ObjectStream, open_source, write_stream

__all__ = ["Client"]

logger = logging.getLogger(__name__)


def _validate_project_id(project_id: Any) -> int:
    if isinstance(project_id, bool) or not isinstance(project_id, int) or project_id <= 0:
        raise ConfigurationError(f"project_id must be a positive integer, got {project_id!r}")
    return project_id


def _raise_translated(exc: BaseException, operation: str) -> None:
    translated = translate(exc, operation)
    if translated is exc:
        raise exc
    raise translated from exc


class Client:
    """
    Project-scoped client for an S3-compatible backend.

    The client is immutable and holds no open connections, so it can be
    shared between tasks and dropped without teardown.

    Example:
        client = Client("http://localhost:9000", api_key, project_id=42)
        await client.create_bucket("reports")
        await client.put_object("reports", "2024/q1.csv", "q1.csv")
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        project_id: int,
        *,
        settings: Optional[Settings] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            url: Base URL of the backend
            api_key: API key sent with every request
            project_id: Project all operations are scoped to
            settings: Transport settings (defaults when None)
            transport: Protocol client factory (aioboto3 when None)

        Raises:
            ConfigurationError: If the URL, API key or project id is invalid
        """
        settings = settings if settings is not None else Settings()
        endpoint = Endpoint.parse(url)
        credentials = ApiKeyCredentials(api_key)
        project_id = _validate_project_id(project_id)

        if transport is None:
            scope = ProjectScope(
                endpoint=endpoint,
                credentials=credentials,
                organisation_id=settings.organisation_id,
                project_id=project_id,
            )
            transport = AioBotoTransport(
                endpoint=endpoint,
                credentials=credentials,
                scope=scope,
                settings=settings,
            )

        object.__setattr__(self, "_endpoint", endpoint)
        object.__setattr__(self, "_credentials", credentials)
        object.__setattr__(self, "_project_id", project_id)
        object.__setattr__(self, "_settings", settings)
        object.__setattr__(self, "_transport", transport)
        object.__setattr__(self, "_limiter", asyncio.Semaphore(settings.max_concurrency))

        logger.debug(
            f"Client for {endpoint.url} (organisation={settings.organisation_id}, project={project_id})"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"Client(url={self.url!r}, project_id={self._project_id})"

    @property
    def url(self) -> str:
        return self._endpoint.url

    @property
    def project_id(self) -> int:
        return self._project_id

    @property
    def organisation_id(self) -> int:
        return self._settings.organisation_id

    @property
    def settings(self) -> Settings:
        return self._settings

    @asynccontextmanager
    async def _call(self, operation: str) -> AsyncIterator[S3Api]:
        """Open a protocol client for one operation, translating its failures."""
        async with self._limiter:
            try:
                async with self._transport.open() as s3:
                    yield s3
            except Exception as exc:
                _raise_translated(exc, operation)

    # Buckets

    async def create_bucket(self, name: str) -> None:
        """
        Create a bucket in the project.

        Not idempotent: creating an existing bucket raises the backend's
        ConflictError.
        """
        async with self._call("create_bucket") as s3:
            await s3.create_bucket(Bucket=name)
        logger.debug(f"Created bucket {name}")

    async def delete_bucket(self, name: str) -> None:
        """
        Delete an empty bucket.

        Raises:
            NotFoundError: If the bucket does not exist
            ConflictError: If the bucket is not empty
        """
        async with self._call("delete_bucket") as s3:
            await s3.delete_bucket(Bucket=name)
        logger.debug(f"Deleted bucket {name}")

    async def list_buckets(self) -> List[BucketInfo]:
        """List the project's buckets in backend order."""
        async with self._call("list_buckets") as s3:
            response = await s3.list_buckets()
        return [BucketInfo.from_response(entry) for entry in response.get("Buckets") or []]

    # Objects

    async def put_object(
        self,
        bucket: str,
        key: str,
        source: ByteSource,
        *,
        content_type: Optional[str] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> PutObjectResult:
        """
        Upload an object, streaming it from a local source.

        Args:
            bucket: Target bucket
            key: Object key, used verbatim
            source: Path, bytes-like data or readable binary file object
            content_type: MIME type stored with the object
            metadata: User metadata stored with the object

        Returns:
            PutObjectResult with the ETag reported by the backend

        Raises:
            LocalIOError: If the source cannot be read
            NotFoundError: If the bucket does not exist
            TransportError: If the upload fails in transit
        """
        params: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if content_type:
            params["ContentType"] = content_type
        if metadata:
            params["Metadata"] = dict(metadata)

        async with open_source(source, spool_size=self._settings.chunk_size) as body:
            async with self._call("put_object") as s3:
                response = await s3.put_object(Body=body, **params)

        logger.debug(f"Uploaded {bucket}/{key}")
        return PutObjectResult.from_response(bucket, key, response)

    async def get_object(self, bucket: str, key: str) -> ObjectStream:
        """
        Start downloading an object.

        The returned stream keeps its protocol client (and concurrency permit)
        until it is exhausted or closed.

        Raises:
            NotFoundError: If the bucket or key does not exist (before streaming)
        """
        stack = AsyncExitStack()
        try:
            s3 = await stack.enter_async_context(self._call("get_object"))
            response = await s3.get_object(Bucket=bucket, Key=key)
        except BaseException as exc:
            await stack.aclose()
            _raise_translated(exc, "get_object")

        return ObjectStream(
            response["Body"],
            bucket=bucket,
            key=key,
            content_length=response.get("ContentLength"),
            content_type=response.get("ContentType"),
            chunk_size=self._settings.chunk_size,
            on_close=stack.aclose,
        )

    async def download_object(self, bucket: str, key: str, sink: ByteSink) -> DownloadResult:
        """
        Download an object into a local path or binary writer.

        Paths are replaced atomically; a failed or cancelled download leaves
        no partial file behind.

        Raises:
            NotFoundError: If the bucket or key does not exist
            LocalIOError: If the sink cannot be written
            TransportError: If the download fails in transit
        """
        stream = await self.get_object(bucket, key)
        size = await write_stream(stream, sink)
        path = str(sink) if not hasattr(sink, "write") else None
        return DownloadResult(bucket=bucket, key=key, path=path, size=size)

    async def delete_object(self, bucket: str, key: str) -> None:
        """
        Delete an object.

        Idempotent: deleting a key that does not exist succeeds. A missing
        bucket still raises NotFoundError.
        """
        try:
            async with self._call("delete_object") as s3:
                await s3.delete_object(Bucket=bucket, Key=key)
        except NotFoundError as exc:
            if exc.code == "NoSuchBucket":
                raise
            logger.debug(f"Object {bucket}/{key} already absent")
            return
        logger.debug(f"Deleted {bucket}/{key}")

    async def list_objects(self, bucket: str) -> List[ObjectInfo]:
        """
        List the objects of a bucket from a single ListObjectsV2 response.

        Order is the backend's. Continuation is not followed.
        """
        async with self._call("list_objects") as s3:
            response = await s3.list_objects_v2(Bucket=bucket)

        if response.get("IsTruncated"):
            logger.debug(f"Listing of {bucket} truncated after {response.get('KeyCount')} keys")
        return [ObjectInfo.from_response(entry) for entry in response.get("Contents") or []]

    async def head_object(self, bucket: str, key: str) -> ObjectHead:
        """
        Fetch object metadata without transferring the body.

        Raises:
            NotFoundError: If the bucket or key does not exist
        """
        async with self._call("head_object") as s3:
            response = await s3.head_object(Bucket=bucket, Key=key)
        return ObjectHead.from_response(bucket, key, response)
