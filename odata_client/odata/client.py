"""
odata_client.odata.client - OData client facade
=================================================

Generic CRUD, query and discovery operations over one OData service, plus
per-entity-set convenience methods generated from $metadata.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple
from urllib.parse import urljoin

from odata_client.core.config import ClientConfig
from odata_client.core.errors import FieldError, NotFoundError, ODataError
from odata_client.core.transport import RequestsTransport
from odata_client.odata.binder import MethodBinder, MethodTable
from odata_client.odata.calls import Callback, normalize_call
from odata_client.odata.metadata import METADATA_ACCEPT, METADATA_COMMAND, EntitySetResolver
from odata_client.odata.paths import build_query_string, entity_command
from odata_client.odata.request import RequestTranslator
from odata_client.odata.response import decode_response


GENERIC_OPERATIONS = frozenset({
    "odata",
    "entity_sets",
    "get",
    "query",
    "links",
    "count",
    "create",
    "replace",
    "update",
    "remove",
    "download",
    "process_query",
})

_COMMAND_OPTIONS = ("command", "location", "method", "headers", "data", "streaming", "etag")


def _require_resource(opts: Mapping[str, Any]) -> str:
    resource = opts.get("resource")
    if not resource or not isinstance(resource, str):
        raise FieldError("resource")
    return resource


def _require_present(opts: Mapping[str, Any], name: str) -> Any:
    value = opts.get(name)
    if value is None:
        raise FieldError(name, "property is missing.")
    return value


class ODataClient:
    """
    Client for one OData service root.

    Every operation accepts ``(options)``, ``(options, callback)`` or
    ``(callback)`` and keyword options. Results are passed to
    ``callback(error, result)``; without a callback the result is returned
    and errors are raised.

    Parameters
    ----------
    cfg : ClientConfig
        Client configuration
    transport : object, optional
        Object exposing ``send(descriptor)``; defaults to ``RequestsTransport``

    Examples
    --------
    >>> with create_client(url="https://host/_vti_bin/listdata.svc") as client:
    ...     orders = client.query(resource="Orders", filter="Total gt 10", top="5")
    ...     print(orders.status_code, orders.data)
    ...
    ...     client.hook()
    ...     client.lookup_method("getOrders")(id=1)
    """

    def __init__(self, cfg: ClientConfig, transport: Optional[Any] = None) -> None:
        self.cfg = cfg
        self.logger = cfg.logger or logging.getLogger("odata_client")
        self.transport = transport or RequestsTransport(cfg, self.logger)
        self.translator = RequestTranslator(cfg)
        self.methods = MethodTable()
        self._binder = MethodBinder(self)
        self._resolver = EntitySetResolver(self._fetch_metadata, self.logger)

    def close(self) -> None:
        """Release pooled connections."""
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "ODataClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- pipeline ----------------

    def _execute(self, **options: Any) -> Any:
        desc = self.translator.translate(**options)
        r = self.transport.send(desc)
        if desc.stream:
            return r
        return decode_response(r, self.logger)

    def _invoke(
        self,
        handler: Callable[[Dict[str, Any]], Any],
        options: Any,
        callback: Optional[Callback],
        kwargs: Mapping[str, Any],
    ) -> Any:
        opts, cb = normalize_call(options, callback, kwargs)
        if opts is None:
            return cb(FieldError("options", "argument is missing or invalid."), None)
        try:
            result = handler(opts)
        except ODataError as exc:
            return cb(exc, None)
        return cb(None, result)

    def _fetch_metadata(self) -> Any:
        return self._execute(
            method="GET",
            command=METADATA_COMMAND,
            headers={"accept": METADATA_ACCEPT},
            streaming=False,
        )

    # ---------------- generic command ----------------

    def odata(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """
        Execute a raw OData command.

        Parameters
        ----------
        command : str
            Command relative to the service root, e.g. "Orders(1)/Items"
        location : str, optional
            Absolute URL used instead of the command
        method : str
            HTTP verb (default: GET)
        headers : dict, optional
            Header overrides
        data : any, optional
            Request payload
        streaming : bool, optional
            Return the live response instead of a decoded envelope
        etag : str, optional
            Optimistic concurrency tag, sent as ``if-match``
        """
        return self._invoke(self._odata, options, callback, kwargs)

    def _odata(self, opts: Dict[str, Any]) -> Any:
        command = opts.get("command")
        if not command or not isinstance(command, str):
            raise FieldError("command")
        return self._execute(**{k: opts[k] for k in _COMMAND_OPTIONS if k in opts})

    # ---------------- discovery ----------------

    def entity_sets(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """
        Names of the service's entity sets, in $metadata order.

        The $metadata document is fetched once per client; services without
        one resolve to an empty tuple.
        """
        return self._invoke(lambda opts: self._resolver.resolve(), options, callback, kwargs)

    def bind(self, table: MethodTable) -> MethodTable:
        """
        Install ``<operation><EntitySet>`` methods into ``table``.

        Runs immediately when the entity sets are known, otherwise once they
        have been resolved.
        """
        self._resolver.when_resolved(lambda names: self._binder.bind(table, names))
        return table

    def hook(self, table: Optional[MethodTable] = None) -> MethodTable:
        """Bind into ``table``, or into this client's own ``methods``."""
        return self.bind(self.methods if table is None else table)

    def lookup_method(self, name: str) -> Optional[Callable[..., Any]]:
        """
        Find an operation by name.

        Generic operations are returned directly. While a binding is still
        waiting for entity sets, a wrapper is returned that resolves them
        first and then dispatches to the generated method (delivering a None
        result if the name still does not exist).
        """
        if name in GENERIC_OPERATIONS:
            return getattr(self, name)
        if not self._resolver.has_pending:
            return self.methods.resolve(name)

        def wrapper(options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
            opts, cb = normalize_call(options, callback, kwargs)
            try:
                self._resolver.resolve()
            except ODataError as exc:
                return cb(exc, None)
            method = self.methods.resolve(name)
            if method is None:
                return cb(None, None)
            return method(options if opts is None else opts, cb)

        return wrapper

    # ---------------- entity operations ----------------

    def get(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Read one entity: ``resource`` and ``id`` are required."""
        return self._invoke(self._get, options, callback, kwargs)

    def _get(self, opts: Dict[str, Any]) -> Any:
        resource = _require_resource(opts)
        entity_id = _require_present(opts, "id")
        return self._execute(method="GET", command=entity_command(resource, entity_id))

    def query(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """
        Query an entity set.

        Parameters
        ----------
        resource : str
            Entity set name
        filter, expand, select, order_by, top, skip : str, optional
            Raw values for the matching ``$`` system query options
        inline_count : bool, optional
            Request ``$inlinecount=allpages``

        Examples
        --------
        >>> client.query(resource="Orders", filter="Total gt 10", order_by="Total desc", top="5")
        """
        return self._invoke(self._query, options, callback, kwargs)

    def _query(self, opts: Dict[str, Any]) -> Any:
        resource = _require_resource(opts)
        qs = build_query_string(opts)
        return self._execute(method="GET", command=f"/{resource}?{qs}")

    def count(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Number of entities in ``resource``."""
        return self._invoke(self._count, options, callback, kwargs)

    def _count(self, opts: Dict[str, Any]) -> Any:
        resource = _require_resource(opts)
        return self._execute(method="GET", command=f"/{resource}/$count")

    def links(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Links from entity ``id`` of ``resource`` to entities of type ``entity``."""
        return self._invoke(self._links, options, callback, kwargs)

    def _links(self, opts: Dict[str, Any]) -> Any:
        resource = _require_resource(opts)
        entity_id = _require_present(opts, "id")
        entity = opts.get("entity")
        if not entity or not isinstance(entity, str):
            raise FieldError("entity")
        return self._execute(
            method="GET",
            command=f"{entity_command(resource, entity_id)}/$links/{entity}",
        )

    def create(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Add ``data`` as a new entity of ``resource``."""
        return self._invoke(self._create, options, callback, kwargs)

    def _create(self, opts: Dict[str, Any]) -> Any:
        resource = _require_resource(opts)
        data = _require_present(opts, "data")
        return self._execute(method="POST", command=f"/{resource}", data=data)

    def replace(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Overwrite entity ``id`` of ``resource`` with ``data`` (PUT)."""
        return self._invoke(lambda opts: self._write(opts, "PUT"), options, callback, kwargs)

    def update(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Merge ``data`` into entity ``id`` of ``resource`` (PATCH)."""
        return self._invoke(lambda opts: self._write(opts, "PATCH"), options, callback, kwargs)

    def _write(self, opts: Dict[str, Any], method: str) -> Any:
        resource = _require_resource(opts)
        entity_id = _require_present(opts, "id")
        data = _require_present(opts, "data")
        return self._execute(
            method=method,
            command=entity_command(resource, entity_id),
            data=data,
            etag="*",
        )

    def remove(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """Delete entity ``id`` of ``resource``."""
        return self._invoke(self._remove, options, callback, kwargs)

    def _remove(self, opts: Dict[str, Any]) -> Any:
        resource = _require_resource(opts)
        entity_id = _require_present(opts, "id")
        return self._execute(method="DELETE", command=entity_command(resource, entity_id), etag="*")

    # ---------------- files & queries ----------------

    def download(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """
        Stream the file attached to ``resource``.

        Looks up ``/<resource>/File`` first, then streams from the
        ``ServerRelativeUrl`` it reports. The callback receives
        ``(error, stream, headers)`` where headers carries a
        ``Content-Disposition`` built from the file name; without a callback
        ``(stream, headers)`` is returned.

        Raises
        ------
        NotFoundError
            If the file lookup does not report a location
        """
        opts, cb = normalize_call(options, callback, kwargs)
        if opts is None:
            return cb(FieldError("options", "argument is missing or invalid."), None)
        try:
            stream, headers = self._download(opts)
        except ODataError as exc:
            return cb(exc, None)
        return cb(None, stream, headers)

    def _download(self, opts: Dict[str, Any]) -> Tuple[Any, Dict[str, str]]:
        resource = _require_resource(opts)
        meta = self._execute(method="GET", command=f"/{resource}/File", streaming=False)

        data = meta.data if isinstance(meta.data, dict) else {}
        file = data.get("d")
        if not isinstance(file, dict) or not file.get("ServerRelativeUrl"):
            raise NotFoundError("File location not found.")

        location = file["ServerRelativeUrl"]
        stream = self._execute(
            method="GET",
            command=location,
            location=urljoin(self.cfg.url, location),
            streaming=True,
        )
        return stream, {"Content-Disposition": f"attachment;filename={file.get('Name')}"}

    def process_query(self, options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
        """POST the XML in ``data`` to ``/ProcessQuery``."""
        return self._invoke(self._process_query, options, callback, kwargs)

    def _process_query(self, opts: Dict[str, Any]) -> Any:
        return self._execute(
            method="POST",
            command="/ProcessQuery",
            data=opts.get("data"),
            headers={"content-type": "text/xml"},
        )


def create_client(
    settings: Optional[Mapping[str, Any]] = None,
    transport: Optional[Any] = None,
    **kwargs: Any,
) -> ODataClient:
    """
    Validate settings and build an ``ODataClient``.

    Parameters
    ----------
    settings : mapping, optional
        Raw settings: ``url`` (required), ``timeout`` (ms), ``strictSSL``,
        ``streaming``, ``logger``, ``security``, ``username``, ``password``,
        ``retries``, ``tls_policy``
    transport : object, optional
        Transport override, mostly for tests
    **kwargs
        Settings merged over ``settings``

    Raises
    ------
    ConfigError
        If a setting is missing or invalid

    Examples
    --------
    >>> client = create_client({"url": "https://host/odata", "strictSSL": False})
    """
    return ODataClient(ClientConfig.from_settings(settings, **kwargs), transport=transport)
