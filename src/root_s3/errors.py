"""
Storage error classes.

Provides a clear taxonomy of errors that can occur during storage operations.
Protocol client exceptions (botocore service errors, transport failures) are
translated into this hierarchy at the Client boundary so callers get a
consistent error interface regardless of the underlying implementation.
"""
from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp
from botocore.exceptions import BotoCoreError, ClientError, ParamValidationError


class StorageError(Exception):
    """Base class for all root-s3 errors."""
    pass


class ConfigurationError(StorageError, ValueError):
    """
    Invalid client configuration.

    Raised when:
    - The endpoint URL cannot be parsed
    - The API key is empty or contains control characters
    - The project identifier is not a positive integer
    - Request parameters are rejected before anything is sent
    """
    pass


class BackendError(StorageError):
    """
    The backend answered a request with an error.

    Carries the S3 error code, the HTTP status and the operation name so
    callers can inspect details the subclasses do not model.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status: Optional[int] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.status = status
        self.operation = operation


class NotFoundError(BackendError):
    """
    Target bucket or object does not exist.

    Raised when:
    - HTTP 404 Not Found
    - NoSuchBucket / NoSuchKey / NotFound error codes
    """
    pass


class ConflictError(BackendError):
    """
    Operation conflicts with backend state.

    Raised when:
    - HTTP 409 Conflict
    - Creating a bucket that already exists
    - Deleting a bucket that is not empty
    """
    pass


class AccessDeniedError(BackendError):
    """
    Authentication or authorization error.

    Raised when:
    - HTTP 401 Unauthorized (invalid API key)
    - HTTP 403 Forbidden (key not allowed on the project)
    """
    pass


class TransportError(StorageError):
    """
    Network failure, timeout or malformed response.

    Also raised when a download stream fails after the response started.
    """
    pass


class LocalIOError(StorageError, OSError):
    """
    Reading the local source or writing the local sink failed.

    Distinct from TransportError so callers can tell "my file is the problem"
    from "the backend or the network is the problem".
    """
    pass


NOT_FOUND_CODES = frozenset({"NoSuchBucket", "NoSuchKey", "NotFound", "404"})
CONFLICT_CODES = frozenset({
    "BucketAlreadyExists",
    "BucketAlreadyOwnedByYou",
    "BucketNotEmpty",
    "OperationAborted",
    "409",
})
ACCESS_DENIED_CODES = frozenset({
    "AccessDenied",
    "InvalidAccessKeyId",
    "Unauthorized",
    "Forbidden",
    "401",
    "403",
})


def error_code(exc: ClientError) -> Optional[str]:
    """Return the S3 error code of a service error, if present."""
    return exc.response.get("Error", {}).get("Code")


def error_status(exc: ClientError) -> Optional[int]:
    """Return the HTTP status code of a service error, if present."""
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _find_local_io_error(exc: BaseException) -> Optional[LocalIOError]:
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, LocalIOError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


def translate(exc: BaseException, operation: str) -> BaseException:
    """
    Map a protocol client exception onto the root-s3 error taxonomy.

    Already-classified errors are returned unchanged. Exceptions that are not
    storage failures (programming errors, cancellation) are also returned
    unchanged so the caller re-raises them as they are.

    Args:
        exc: Exception raised while executing an operation
        operation: Operation name used in messages (e.g. "put_object")

    Returns:
        Exception to raise; callers chain it with ``from exc``
    """
    if isinstance(exc, StorageError):
        return exc

    # The HTTP layer may wrap a failing upload body read
    local = _find_local_io_error(exc)
    if local is not None:
        return local

    if isinstance(exc, ClientError):
        code = error_code(exc)
        status = error_status(exc)
        message = f"{operation} failed: {code or status}: {exc}"
        kwargs = {"code": code, "status": status, "operation": operation}

        if code in NOT_FOUND_CODES or status == 404:
            return NotFoundError(message, **kwargs)
        if code in CONFLICT_CODES or status == 409:
            return ConflictError(message, **kwargs)
        if code in ACCESS_DENIED_CODES or status in (401, 403):
            return AccessDeniedError(message, **kwargs)
        return BackendError(message, **kwargs)

    if isinstance(exc, ParamValidationError):
        return ConfigurationError(f"{operation} rejected before sending: {exc}")

    if isinstance(exc, (BotoCoreError, aiohttp.ClientError, asyncio.TimeoutError)):
        return TransportError(f"{operation} failed: {exc}")

    return exc


__all__ = [
    "StorageError",
    "ConfigurationError",
    "BackendError",
    "NotFoundError",
    "ConflictError",
    "AccessDeniedError",
    "TransportError",
    "LocalIOError",
    "translate",
    "error_code",
    "error_status",
]
