"""
odata_client.odata.response - Response decoding
=================================================

Turns a transport response into a ``ResponseEnvelope`` according to its
declared content type.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from requests import Response

from odata_client.core.errors import ParseError


@dataclass
class ResponseEnvelope:
    """
    Uniform result of a buffered call.

    Attributes
    ----------
    status_code : int
        HTTP status code
    data : Element, dict, list, str or bytes
        Parsed XML root element, parsed JSON value, or the raw body
    headers : dict
        Response headers
    """
    status_code: int
    data: Any = None
    headers: Dict[str, str] = field(default_factory=dict)


def content_type(headers: Optional[Mapping[str, str]]) -> str:
    """Content type from a header mapping, whatever the header name casing."""
    for name, value in (headers or {}).items():
        if name.lower() == "content-type":
            return value or ""
    return ""


def decode(
    status_code: int,
    headers: Optional[Mapping[str, str]],
    body: Any,
    logger: Optional[logging.Logger] = None,
) -> ResponseEnvelope:
    """
    Decode a response body per its content type.

    - "xml" in the content type: parsed with ``ElementTree.fromstring``
    - "json": parsed with ``json.loads`` unless already a dict or list
    - anything else: passed through unchanged

    Raises
    ------
    ParseError
        If the body does not parse as its declared type
    """
    ctype = content_type(headers).lower()
    hdrs = dict(headers or {})
    try:
        if "xml" in ctype:
            data = ET.fromstring(body)
        elif "json" in ctype:
            data = body if isinstance(body, (dict, list)) else json.loads(body)
        else:
            data = body
    except (ET.ParseError, ValueError, TypeError) as exc:
        log = logger or logging.getLogger("odata_client")
        log.debug("Unable to parse response, statusCode: %s", status_code)
        log.debug("Unable to parse response, body: %r", body)
        log.debug("Unable to parse response, headers: %s", hdrs)
        raise ParseError(status_code, body, hdrs, exc) from exc
    return ResponseEnvelope(status_code=status_code, data=data, headers=hdrs)


def decode_response(r: Response, logger: Optional[logging.Logger] = None) -> ResponseEnvelope:
    """
    Decode a buffered ``requests.Response``.

    XML is parsed from the raw bytes so the document's own encoding
    declaration wins; JSON from the decoded text. Other bodies are returned
    as text for ``text/*`` types and as bytes otherwise.
    """
    ctype = content_type(r.headers).lower()
    if "xml" in ctype:
        body: Any = r.content
    elif "json" in ctype or ctype.startswith("text/"):
        body = r.text
    else:
        body = r.content
    return decode(r.status_code, r.headers, body, logger)
