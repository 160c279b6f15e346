"""
Storage layer: protocol client configuration for the root S3 backend.
"""
from .base import EventRegistry, S3Api, StreamingBody, Transport
from .credentials import API_KEY_HEADER, ApiKeyCredentials
from .endpoint import Endpoint, scope_prefix
from .transport import AioBotoTransport, ProjectScope

__all__ = [
    "API_KEY_HEADER",
    "AioBotoTransport",
    "ApiKeyCredentials",
    "Endpoint",
    "EventRegistry",
    "ProjectScope",
    "S3Api",
    "StreamingBody",
    "Transport",
    "scope_prefix",
]
