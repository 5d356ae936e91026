"""
OData Client (odata_client)
===========================

A client for OData-style HTTP services: entity set CRUD, queries, file
downloads and $metadata driven per-entity-set helper methods.

Usage
-----
>>> from odata_client import create_client
>>>
>>> with create_client(url="https://host/_vti_bin/listdata.svc", username="USER", password="PASS") as client:
...     # Generic operations
...     order = client.get(resource="Orders", id=1)
...     page = client.query(resource="Orders", filter="Total gt 10", top="5")
...
...     # Generated helpers
...     client.hook()
...     client.lookup_method("queryOrders")(top="5")

Subpackages
-----------
- odata_client.core: Configuration, errors, security and HTTP transport
- odata_client.odata: Paths, request/response translation, metadata and the client

"""

__version__ = "0.3.0"

# Core exports - available at package root
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

# Convenience re-exports
from odata_client.odata import (
    ODataClient,
    create_client,
    build_path,
    MethodTable,
    ResponseEnvelope,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "ClientConfig",
    "TlsPolicy",
    "DEFAULT_TLS_POLICY",
    "BasicSecurity",
    "BearerSecurity",
    # Errors
    "ODataError",
    "ConfigError",
    "FieldError",
    "TransportError",
    "ParseError",
    "NotFoundError",
    "BindError",
    "SecurityError",
    # OData
    "ODataClient",
    "create_client",
    "build_path",
    "MethodTable",
    "ResponseEnvelope",
]
