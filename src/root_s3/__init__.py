"""
root-s3: project-scoped client for an S3-compatible object storage backend.

Requests are authenticated with a static API key and addressed under the
backend's project scope instead of being signed with AWS credentials.
"""
from .client import Client
from .errors import (
    AccessDeniedError,
    BackendError,
    ConfigurationError,
    ConflictError,
    LocalIOError,
    NotFoundError,
    StorageError,
    TransportError,
)
from .models import BucketInfo, DownloadResult, ObjectHead, ObjectInfo, PutObjectResult
from .settings import Settings, create_settings_from_env
from .transfer import ObjectStream

__version__ = "0.1.0"

__all__ = [
    "Client",
    "Settings",
    "create_settings_from_env",
    "ObjectStream",
    "BucketInfo",
    "ObjectInfo",
    "ObjectHead",
    "PutObjectResult",
    "DownloadResult",
    "StorageError",
    "ConfigurationError",
    "BackendError",
    "NotFoundError",
    "ConflictError",
    "AccessDeniedError",
    "TransportError",
    "LocalIOError",
]
