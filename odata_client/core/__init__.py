"""
odata_client.core - Configuration and connectivity
====================================================

- ClientConfig / TlsPolicy: validated, immutable client configuration
- BasicSecurity / BearerSecurity: credential collaborators
- RequestsTransport: pooled HTTP transport with a pinned TLS policy
- Error taxonomy shared by the whole package

"""

from odata_client.core.config import ClientConfig, TlsPolicy, DEFAULT_TLS_POLICY
from odata_client.core.errors import (
    ODataError,
    ConfigError,
    FieldError,
    TransportError,
    ParseError,
    NotFoundError,
    BindError,
    SecurityError,
)
from odata_client.core.security import BasicSecurity, BearerSecurity
from odata_client.core.transport import RequestsTransport, TlsPolicyAdapter

__all__ = [
    "ClientConfig",
    "TlsPolicy",
    "DEFAULT_TLS_POLICY",
    "ODataError",
    "ConfigError",
    "FieldError",
    "TransportError",
    "ParseError",
    "NotFoundError",
    "BindError",
    "SecurityError",
    "BasicSecurity",
    "BearerSecurity",
    "RequestsTransport",
    "TlsPolicyAdapter",
]
