"""
Storage interfaces for root-s3.

These protocols define the boundary between the Client facade and the protocol
client implementation, enabling clean dependency injection and testing with fakes.
The method shapes follow the aiobotocore S3 client, which is the production
implementation.
"""
from __future__ import annotations

from typing import Any, AsyncContextManager, Callable, Dict, Optional, Protocol, runtime_checkable

__all__ = ["S3Api", "StreamingBody", "EventRegistry", "Transport"]


@runtime_checkable
class StreamingBody(Protocol):
    """Response body of a GET request, consumed chunk by chunk."""

    async def read(self, amt: Optional[int] = None) -> bytes:
        """
        Read up to ``amt`` bytes (everything when None).

        Returns:
            The next chunk; ``b""`` once the body is exhausted
        """
        ...

    def close(self) -> None:
        """Release the underlying connection."""
        ...


class EventRegistry(Protocol):
    """Subset of the botocore event emitter used to hook outgoing requests."""

    def register(self, event_name: str, handler: Callable[..., Any]) -> None:
        ...


class S3Api(Protocol):
    """
    Protocol for the S3 operations the Client issues.

    Every method returns the parsed response dictionary and raises
    ``botocore.exceptions.ClientError`` when the backend answers with an error.
    """

    async def create_bucket(self, *, Bucket: str, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def delete_bucket(self, *, Bucket: str, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def list_buckets(self, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def put_object(self, *, Bucket: str, Key: str, Body: Any, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def get_object(self, *, Bucket: str, Key: str, **kwargs: Any) -> Dict[str, Any]:
        """The ``Body`` entry of the response is a StreamingBody."""
        ...

    async def delete_object(self, *, Bucket: str, Key: str, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def list_objects_v2(self, *, Bucket: str, **kwargs: Any) -> Dict[str, Any]:
        ...

    async def head_object(self, *, Bucket: str, Key: str, **kwargs: Any) -> Dict[str, Any]:
        ...


@runtime_checkable
class Transport(Protocol):
    """
    Opens configured protocol clients.

    Each call to ``open()`` yields a client whose outgoing requests already
    carry the API key and the project scope. The client is released when the
    context exits.
    """

    def open(self) -> AsyncContextManager[S3Api]:
        ...
