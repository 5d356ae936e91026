"""
odata_client.odata - OData request pipeline
=============================================

- build_path / build_query_string: URL and command construction
- RequestTranslator: call options to transport descriptors
- decode / decode_response: content-type driven response decoding
- EntitySetResolver: one-shot $metadata discovery
- MethodBinder / MethodTable: generated per-entity-set methods
- ODataClient / create_client: the public facade

"""

from odata_client.odata.paths import build_path, build_query_string, escape_odata_literal, format_key
from odata_client.odata.request import RequestTranslator, TransportDescriptor
from odata_client.odata.response import ResponseEnvelope, decode, decode_response
from odata_client.odata.metadata import EntitySetResolver, ResolverState, extract_entity_sets
from odata_client.odata.binder import MethodBinder, MethodTable, BOUND_OPERATIONS
from odata_client.odata.client import ODataClient, create_client

__all__ = [
    "build_path",
    "build_query_string",
    "format_key",
    "escape_odata_literal",
    "RequestTranslator",
    "TransportDescriptor",
    "ResponseEnvelope",
    "decode",
    "decode_response",
    "EntitySetResolver",
    "ResolverState",
    "extract_entity_sets",
    "MethodBinder",
    "MethodTable",
    "BOUND_OPERATIONS",
    "ODataClient",
    "create_client",
]
