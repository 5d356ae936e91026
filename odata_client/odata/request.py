"""
odata_client.odata.request - Operation to transport translation
=================================================================

Maps the options of one call (command, verb, headers, payload, etag,
streaming) onto a fully resolved ``TransportDescriptor``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from requests.structures import CaseInsensitiveDict

from odata_client.core.config import ClientConfig, TlsPolicy
from odata_client.core.errors import FieldError, ODataError, SecurityError
from odata_client.odata.paths import build_path


DEFAULT_HEADERS = {
    "MaxDataServiceVersion": "3.0",
    "accept": "application/json;odata=light;q=1,application/json;odata=verbose;q=0.5",
}

JSON_CONTENT_TYPE = "application/json;odata=verbose"


@dataclass
class TransportDescriptor:
    """
    Fully resolved request handed to the transport.

    The security collaborator receives this object and may change any field.
    ``json`` is not read by the transport; it tells the security collaborator
    whether ``data`` holds a serialized JSON payload or a pass-through body
    (e.g. XML), so signers can hash or rewrite it accordingly.
    """
    url: str
    method: str = "GET"
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    data: Any = None
    json: bool = True
    timeout: float = 180.0
    stream: bool = False
    verify: bool = True
    tls_policy: Optional[TlsPolicy] = None
    auth: Any = None


class RequestTranslator:
    """
    Builds ``TransportDescriptor`` objects for one client.

    Parameters
    ----------
    cfg : ClientConfig
        Client configuration
    """

    def __init__(self, cfg: ClientConfig) -> None:
        self.cfg = cfg

    def translate(
        self,
        *,
        command: Optional[str] = None,
        location: Optional[str] = None,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        data: Any = None,
        streaming: Optional[bool] = None,
        etag: Optional[str] = None,
    ) -> TransportDescriptor:
        """
        Translate call options into a descriptor.

        Parameters
        ----------
        command : str, optional
            Command relative to the service root
        location : str, optional
            Absolute URL overriding ``command``
        method : str
            HTTP verb (default: GET)
        headers : mapping, optional
            Header overrides; a content-type containing "xml" sends ``data`` as-is
        data : any, optional
            Payload; non-string payloads are serialized as JSON
        streaming : bool, optional
            Per-call override of the client's streaming default
        etag : str, optional
            Sent as ``if-match``

        Returns
        -------
        TransportDescriptor
        """
        cfg = self.cfg
        merged = CaseInsensitiveDict(DEFAULT_HEADERS)
        if headers:
            merged.update(headers)

        ctype = merged.get("content-type") or ""
        is_json = "xml" not in ctype

        body = data
        if data is not None:
            merged.setdefault("content-type", JSON_CONTENT_TYPE)
            if is_json and not isinstance(data, (str, bytes)):
                try:
                    body = json.dumps(data, separators=(",", ":"))
                except (TypeError, ValueError) as exc:
                    raise FieldError("data", f"is not JSON serializable: {exc}") from exc

        if etag:
            merged["if-match"] = etag

        desc = TransportDescriptor(
            url=build_path(cfg.url, command, location),
            method=(method or "GET").upper(),
            headers=merged,
            data=body,
            json=is_json,
            timeout=cfg.timeout_seconds,
            stream=streaming if isinstance(streaming, bool) else cfg.streaming,
        )

        if cfg.use_https:
            desc.tls_policy = cfg.tls_policy
            desc.verify = cfg.strict_ssl

        if cfg.security is not None:
            try:
                cfg.security.add_options(desc)
            except ODataError:
                raise
            except Exception as exc:
                raise SecurityError(exc) from exc

        return desc
