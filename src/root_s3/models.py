"""
Data models for storage operation results.

These Pydantic models give the Client facade typed results and keep the
protocol client's response dictionaries from leaking into callers.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


def _strip_etag(value: Optional[str]) -> Optional[str]:
    # S3 returns ETags wrapped in double quotes
    return value.strip('"') if value else value


class BucketInfo(BaseModel):
    """A bucket visible to the client's project."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Bucket name")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")

    @classmethod
    def from_response(cls, entry: Mapping[str, Any]) -> BucketInfo:
        """Build from one element of a ListBuckets ``Buckets`` array."""
        return cls(name=entry["Name"], created_at=entry.get("CreationDate"))


class ObjectInfo(BaseModel):
    """An object entry from a bucket listing."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Object key")
    size: int = Field(default=0, ge=0, description="Size in bytes")
    last_modified: Optional[datetime] = Field(default=None, description="Last modification time")
    etag: Optional[str] = Field(default=None, description="Entity tag without quotes")

    @classmethod
    def from_response(cls, entry: Mapping[str, Any]) -> ObjectInfo:
        """Build from one element of a ListObjectsV2 ``Contents`` array."""
        return cls(
            key=entry["Key"],
            size=entry.get("Size") or 0,
            last_modified=entry.get("LastModified"),
            etag=_strip_etag(entry.get("ETag")),
        )


class ObjectHead(BaseModel):
    """
    Object metadata returned by a HEAD request.

    No body bytes are transferred to produce it.
    """
    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    size: int = Field(default=0, ge=0, description="Content length in bytes")
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict, description="User metadata")

    @classmethod
    def from_response(cls, bucket: str, key: str, response: Mapping[str, Any]) -> ObjectHead:
        return cls(
            bucket=bucket,
            key=key,
            size=response.get("ContentLength") or 0,
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            etag=_strip_etag(response.get("ETag")),
            metadata=dict(response.get("Metadata") or {}),
        )


class PutObjectResult(BaseModel):
    """Outcome of a successful upload."""
    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    etag: Optional[str] = None
    version_id: Optional[str] = None

    @classmethod
    def from_response(cls, bucket: str, key: str, response: Mapping[str, Any]) -> PutObjectResult:
        return cls(
            bucket=bucket,
            key=key,
            etag=_strip_etag(response.get("ETag")),
            version_id=response.get("VersionId"),
        )


class DownloadResult(BaseModel):
    """Outcome of a download into a local sink."""
    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    path: Optional[str] = Field(default=None, description="Destination path, None for file objects")
    size: int = Field(..., ge=0, description="Bytes written to the sink")


__all__ = ["BucketInfo", "ObjectInfo", "ObjectHead", "PutObjectResult", "DownloadResult"]
