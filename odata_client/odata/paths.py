"""
odata_client.odata.paths - URL and command construction
=========================================================

Pure helpers that turn a service root plus a relative command into a request
URL, and turn operation options into OData command paths.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional
from urllib.parse import quote

from odata_client.core.errors import FieldError


# Characters left as-is by JavaScript's encodeURI
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#"

_SLASH_RUN = re.compile(r"/{2,}")

# (option name, accepted alias) in query-string order
QUERY_MODIFIERS = (
    ("filter", None),
    ("expand", None),
    ("select", None),
    ("order_by", "orderBy"),
    ("top", None),
    ("skip", None),
)


def build_path(base_url: str, command: Optional[str] = "", location: Optional[str] = None) -> str:
    """
    Join a service root and a command into one percent-encoded URL.

    Parameters
    ----------
    base_url : str
        Service root, with or without a trailing slash
    command : str
        Relative command, e.g. "Orders(1)/Items"
    location : str, optional
        Absolute URL returned unchanged (no normalization)

    Examples
    --------
    >>> build_path("http://foo.com/srv_root/", "Entity//Property")
    'http://foo.com/srv_root/Entity/Property'
    """
    if location:
        return location
    cmd = _SLASH_RUN.sub("/", command or "")
    if not cmd.startswith("/"):
        cmd = "/" + cmd
    base = base_url[:-1] if base_url.endswith("/") else base_url
    return quote(base + cmd, safe=_URI_SAFE)


def format_key(entity_id: Any) -> str:
    """
    Render an entity id for use inside ``Resource(<key>)``.

    >>> format_key("ALFKI")
    "'ALFKI'"
    >>> format_key(42)
    '42'
    >>> format_key(True)
    'true'
    """
    if isinstance(entity_id, str):
        return f"'{entity_id}'"
    if isinstance(entity_id, bool):
        return "true" if entity_id else "false"
    return str(entity_id)


def entity_command(resource: str, entity_id: Any) -> str:
    """Command addressing one entity: ``/Resource(<key>)``."""
    return f"/{resource}({format_key(entity_id)})"


def _param_name(name: str) -> str:
    return "$" + name.replace("_", "").lower()


def build_query_string(options: Mapping[str, Any]) -> str:
    """
    Build the query string for a ``query`` call.

    Recognized modifiers are filter, expand, select, order_by (or orderBy),
    top and skip; each must be a string. ``$inlinecount`` is always appended
    last, ``allpages`` when ``inline_count`` (or ``inLineCount``) is truthy.

    Raises
    ------
    FieldError
        If a present modifier is not a string

    Examples
    --------
    >>> build_query_string({"filter": "X eq 1", "top": "10"})
    '$filter=X eq 1&$top=10&$inlinecount=none'
    """
    params = []
    for name, alias in QUERY_MODIFIERS:
        value = options.get(name)
        if not value and alias:
            value = options.get(alias)
            name = alias if value else name
        if not value:
            continue
        if not isinstance(value, str):
            raise FieldError(name, "property must be a valid string.")
        params.append(f"{_param_name(name)}={value}")

    inline = options.get("inline_count", options.get("inLineCount"))
    params.append("$inlinecount=" + ("allpages" if inline else "none"))
    return "&".join(params)


def escape_odata_literal(value: str) -> str:
    """
    Escape a string value for use inside an OData string literal.

    >>> escape_odata_literal("O'Brien")
    "O''Brien"
    """
    return value.replace("'", "''")
