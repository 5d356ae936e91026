"""
odata_client.odata.binder - Per-entity-set convenience methods
================================================================

Generates ``<operation><EntitySet>`` callables (``getOrders``,
``queryOrders``, ...) and installs them into a ``MethodTable``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from odata_client.odata.calls import Callback, normalize_call


BOUND_OPERATIONS = ("get", "query", "links", "count", "create", "replace", "update", "remove")


class MethodTable:
    """
    Explicit name -> callable mapping filled by ``MethodBinder``.

    Examples
    --------
    >>> table = client.hook()
    >>> table.resolve("getOrders")(id=1)
    """

    def __init__(self) -> None:
        self._methods: Dict[str, Callable[..., Any]] = {}

    def install(self, name: str, method: Callable[..., Any]) -> None:
        self._methods[name] = method

    def resolve(self, name: str) -> Optional[Callable[..., Any]]:
        """The method registered under ``name``, or None."""
        return self._methods.get(name)

    def names(self) -> List[str]:
        return list(self._methods)

    def __contains__(self, name: object) -> bool:
        return name in self._methods

    def __len__(self) -> int:
        return len(self._methods)

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)


class MethodBinder:
    """
    Builds resource-bound wrappers around a client's generic operations.

    Parameters
    ----------
    client : ODataClient
        Client whose operations are wrapped
    operations : sequence of str
        Operation names; each one doubles as the generated method's prefix
    """

    def __init__(self, client: Any, operations: Sequence[str] = BOUND_OPERATIONS) -> None:
        self.client = client
        self.operations = tuple(operations)

    def make_method(self, operation: str, entity_set: str) -> Callable[..., Any]:
        target = getattr(self.client, operation)

        def method(options: Any = None, callback: Optional[Callback] = None, **kwargs: Any) -> Any:
            opts, cb = normalize_call(options, callback, kwargs)
            if opts is None:
                return target(options, cb)
            opts["resource"] = entity_set
            return target(opts, cb)

        method.__name__ = operation + entity_set
        method.__qualname__ = method.__name__
        method.__doc__ = f"``{operation}`` on entity set ``{entity_set}``."
        return method

    def bind(self, table: MethodTable, entity_sets: Iterable[str]) -> MethodTable:
        """Install one method per (operation, entity set) pair."""
        for entity_set in entity_sets or ():
            for operation in self.operations:
                table.install(operation + entity_set, self.make_method(operation, entity_set))
        return table
