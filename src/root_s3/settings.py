"""
Settings and configuration for root-s3.

Centralizes transport tuning values and provides validation with fail-fast behavior.
The endpoint URL, API key and project identifier are construction inputs of the
Client, not settings; the CLI layer reads those from its own options.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

__all__ = ["Settings", "create_settings_from_env", "DEFAULT_URL"]

DEFAULT_URL = "http://localhost:9000"


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the root-s3 client.

    Backend Settings:
        region: Region name handed to the protocol client (the backend ignores it,
            but the S3 protocol requires one)
        organisation_id: Organisation the project belongs to; part of the scope path

    Transport Settings:
        http_timeout_s: Read timeout for a single request in seconds
        connect_timeout_s: Connection timeout in seconds
        http_retry: Transport-level retries (0 = single attempt)
        max_concurrency: Maximum number of in-flight operations per Client
        chunk_size: Streaming chunk size in bytes for downloads and spooled uploads
    """
    # Backend settings
    region: str = "weur"
    organisation_id: int = 0

    # Transport settings
    http_timeout_s: float = 30.0
    connect_timeout_s: float = 10.0
    http_retry: int = 0
    max_concurrency: int = 20
    chunk_size: int = 1024 * 1024

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.region:
            raise ValueError("region is required")

        if self.organisation_id < 0:
            raise ValueError(f"organisation_id must be non-negative, got {self.organisation_id}")

        # Validate timeouts are positive
        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.connect_timeout_s <= 0:
            raise ValueError(f"connect_timeout_s must be positive, got {self.connect_timeout_s}")

        # Validate retry count is non-negative
        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {self.max_concurrency}")

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - ROOTS3_REGION (default: weur)
        - ROOTS3_ORG_ID (default: 0)
        - ROOTS3_HTTP_TIMEOUT (default: 30.0)
        - ROOTS3_CONNECT_TIMEOUT (default: 10.0)
        - ROOTS3_HTTP_RETRY (default: 0)
        - ROOTS3_MAX_CONCURRENCY (default: 20)
        - ROOTS3_CHUNK_SIZE (default: 1048576)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        try:
            return float(value) if value else default
        except ValueError:
            raise ValueError(f"{key} must be a number, got {value!r}") from None

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        try:
            return int(value) if value else default
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None

    return Settings(
        region=os.getenv("ROOTS3_REGION") or Settings.region,
        organisation_id=get_int("ROOTS3_ORG_ID", Settings.organisation_id),
        http_timeout_s=get_float("ROOTS3_HTTP_TIMEOUT", Settings.http_timeout_s),
        connect_timeout_s=get_float("ROOTS3_CONNECT_TIMEOUT", Settings.connect_timeout_s),
        http_retry=get_int("ROOTS3_HTTP_RETRY", Settings.http_retry),
        max_concurrency=get_int("ROOTS3_MAX_CONCURRENCY", Settings.max_concurrency),
        chunk_size=get_int("ROOTS3_CHUNK_SIZE", Settings.chunk_size),
    )
