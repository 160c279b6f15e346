"""
API key credentials.

The backend authenticates requests with a static API key sent as a header
rather than with AWS signatures. This adapter hands the protocol client fixed
placeholder credentials, so it never consults the default credential chain
(environment, shared config files, instance metadata), and stamps the key on
each outgoing request.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict

from ..errors import ConfigurationError

__all__ = ["ApiKeyCredentials", "API_KEY_HEADER"]

API_KEY_HEADER = "x-api-key"

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


@dataclass(frozen=True)
class ApiKeyCredentials:
    """
    A single opaque API key, used verbatim for the lifetime of a Client.

    Invariants:
    - api_key is a non-empty string without control characters
    - the key never appears in repr() or log output
    """
    api_key: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key:
            raise ConfigurationError("API key is required")
        if _CONTROL_CHARS.search(self.api_key):
            raise ConfigurationError("API key contains control characters")

    def client_kwargs(self) -> Dict[str, Any]:
        """
        Credential arguments for the protocol client.

        Explicit (empty) keys pin the credentials; requests are sent unsigned,
        so their value is never used for signing.
        """
        return {"aws_access_key_id": "", "aws_secret_access_key": ""}

    def apply(self, request: Any) -> None:
        """Set the API key header on an outgoing request, replacing any previous value."""
        if API_KEY_HEADER in request.headers:
            del request.headers[API_KEY_HEADER]
        request.headers[API_KEY_HEADER] = self.api_key
