"""
aioboto3 transport.

Opens S3 protocol clients bound to the configured endpoint and registers the
request hook that applies the API key and the project scope. Request
construction, HTTP transport and transport-level retries belong to
aiobotocore; nothing here retries.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import aioboto3

from ..settings import Settings
from .base import EventRegistry, S3Api
from .credentials import ApiKeyCredentials
from .endpoint import Endpoint

__all__ = ["ProjectScope", "AioBotoTransport", "REQUEST_HOOK_EVENT"]

logger = logging.getLogger(__name__)

# Emitted for every S3 request right before signing (also when unsigned)
REQUEST_HOOK_EVENT = "before-sign.s3"


class ProjectScope:
    """
    Request hook binding one API key and one project to outgoing requests.

    Applied to every request, including transport-level retries, which are
    rebuilt from scratch by the protocol client.
    """

    def __init__(
        self,
        *,
        endpoint: Endpoint,
        credentials: ApiKeyCredentials,
        organisation_id: int,
        project_id: int,
    ) -> None:
        self._endpoint = endpoint
        self._credentials = credentials
        self.organisation_id = organisation_id
        self.project_id = project_id

    def register(self, events: EventRegistry) -> None:
        """Attach the hook to a protocol client's event emitter."""
        events.register(REQUEST_HOOK_EVENT, self.apply)

    def apply(self, request: Any, **kwargs: Any) -> None:
        """Add the API key header and rewrite the URL into the project scope."""
        self._credentials.apply(request)
        request.url = self._endpoint.scope(request.url, self.organisation_id, self.project_id)


class AioBotoTransport:
    """
    Transport backed by an aioboto3 session.

    A protocol client is opened per operation and closed when the operation
    (or its download stream) finishes, so the transport holds no connections
    between calls.
    """

    def __init__(
        self,
        *,
        endpoint: Endpoint,
        credentials: ApiKeyCredentials,
        scope: ProjectScope,
        settings: Settings,
    ) -> None:
        self._scope = scope
        self._session = aioboto3.Session()
        self._client_kwargs = {
            **endpoint.client_kwargs(settings),
            **credentials.client_kwargs(),
        }
        logger.debug(
            f"aioboto3 transport for {endpoint.url} (region={settings.region}, "
            f"timeout={settings.http_timeout_s}s, retry={settings.http_retry})"
        )

    @asynccontextmanager
    async def open(self) -> AsyncIterator[S3Api]:
        async with self._session.client("s3", **self._client_kwargs) as s3:
            self._scope.register(s3.meta.events)
            yield s3
