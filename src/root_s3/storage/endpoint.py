"""
Endpoint resolution and project scoping.

The backend is addressed directly at the configured URL: no regional endpoint
construction, no virtual-hosted bucket subdomains, no HTTPS upgrade. Every
request path is moved under the project scope
``/api/v1/organisations/{org}/projects/{project}/s3``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict
from urllib.parse import urlsplit, urlunsplit

from botocore import UNSIGNED
from botocore.config import Config

from ..errors import ConfigurationError
from ..settings import Settings

__all__ = ["Endpoint", "scope_prefix"]

logger = logging.getLogger(__name__)

_SCHEMES = ("http", "https")


def scope_prefix(organisation_id: int, project_id: int) -> str:
    """Path prefix under which the backend serves a project's S3 API."""
    return f"/api/v1/organisations/{organisation_id}/projects/{project_id}/s3"


@dataclass(frozen=True)
class Endpoint:
    """
    A parsed base URL of the storage backend.

    Invariants:
    - scheme is http or https and is never changed
    - netloc is non-empty
    - base_path has no trailing slash ("" for a bare host)
    """
    scheme: str
    netloc: str
    base_path: str = ""

    @classmethod
    def parse(cls, url: str) -> Endpoint:
        """
        Parse and validate a base URL.

        Args:
            url: Base URL such as ``http://localhost:9000`` or ``https://host/prefix``

        Returns:
            Endpoint for the URL

        Raises:
            ConfigurationError: If the URL cannot be used as an endpoint
        """
        if not isinstance(url, str) or not url.strip():
            raise ConfigurationError("Endpoint URL is required")

        try:
            parts = urlsplit(url.strip())
            # Accessing the port validates it
            parts.port
        except ValueError as exc:
            raise ConfigurationError(f"Invalid endpoint URL {url!r}: {exc}") from exc

        if parts.scheme.lower() not in _SCHEMES:
            raise ConfigurationError(f"Invalid endpoint URL {url!r}: scheme must be http or https")
        if not parts.hostname:
            raise ConfigurationError(f"Invalid endpoint URL {url!r}: missing host")
        if parts.query or parts.fragment:
            raise ConfigurationError(f"Invalid endpoint URL {url!r}: query and fragment are not allowed")

        return cls(
            scheme=parts.scheme.lower(),
            netloc=parts.netloc,
            base_path=parts.path.rstrip("/"),
        )

    @property
    def url(self) -> str:
        return urlunsplit((self.scheme, self.netloc, self.base_path, "", ""))

    def client_kwargs(self, settings: Settings) -> Dict[str, Any]:
        """
        Protocol client arguments that pin the endpoint and addressing style.

        Requests are unsigned (authentication is the API key header), use
        path-style addressing and only compute checksums when an operation
        requires them.
        """
        config = Config(
            signature_version=UNSIGNED,
            s3={"addressing_style": "path"},
            connect_timeout=settings.connect_timeout_s,
            read_timeout=settings.http_timeout_s,
            retries={"total_max_attempts": settings.http_retry + 1, "mode": "standard"},
            max_pool_connections=settings.max_concurrency,
            request_checksum_calculation="when_required",
            response_checksum_validation="when_required",
        )
        return {
            "endpoint_url": self.url,
            "region_name": settings.region,
            "use_ssl": self.scheme == "https",
            "config": config,
        }

    def scope(self, request_url: str, organisation_id: int, project_id: int) -> str:
        """
        Move a request URL under the project scope.

        ``{endpoint}{object-path}?{query}`` becomes
        ``{endpoint}{scope-prefix}{object-path}?{query}``. A bare ``/`` object
        path (ListBuckets) is dropped. Every call adds the prefix, even to paths
        that already start with it.

        Args:
            request_url: Fully built request URL
            organisation_id: Organisation owning the project
            project_id: Project the request is issued for

        Returns:
            Scoped request URL on the same scheme, host and port
        """
        parts = urlsplit(request_url)
        path = parts.path
        if self.base_path and (path == self.base_path or path.startswith(self.base_path + "/")):
            path = path[len(self.base_path):]

        prefix = scope_prefix(organisation_id, project_id)
        object_path = path if path not in ("", "/") else ""
        scoped = urlunsplit((
            self.scheme,
            self.netloc,
            f"{self.base_path}{prefix}{object_path}",
            parts.query,
            "",
        ))
        logger.debug(f"Scoped request {request_url} -> {scoped}")
        return scoped
