"""
odata_client.odata.metadata - Entity set discovery
====================================================

Fetches the service's $metadata document once per client and extracts the
entity set names. Callers that need the names before the first fetch
completes wait for it; binding actions registered before resolution run
right after the names are known.
"""

from __future__ import annotations

import enum
import logging
import threading
import xml.etree.ElementTree as ET
from typing import Any, Callable, List, Optional, Tuple

from odata_client.core.errors import BindError, ODataError


METADATA_COMMAND = "$metadata"
METADATA_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

BindAction = Callable[[Tuple[str, ...]], None]


def _strip_ns(tag: str) -> str:
    """Strip XML namespace from a tag name."""
    return tag.split("}", 1)[-1] if "}" in tag else tag


def extract_entity_sets(root: ET.Element) -> List[str]:
    """
    Names of all ``EntitySet`` elements, in document order.

    Matching is on the local element name, so any edmx/edm namespace works.
    """
    names: List[str] = []
    for node in root.iter():
        if not isinstance(node.tag, str) or _strip_ns(node.tag) != "EntitySet":
            continue
        name = node.attrib.get("Name")
        if name:
            names.append(name)
    return names


class ResolverState(enum.Enum):
    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class EntitySetResolver:
    """
    One-shot, single-flight resolution of a service's entity sets.

    Parameters
    ----------
    fetch : callable
        Returns the ``ResponseEnvelope`` of the $metadata request; may raise
        ``ODataError`` subclasses on transport or parse failures
    logger : logging.Logger, optional
        Logger for fallback diagnostics

    Notes
    -----
    Resolution holds a re-entrant lock for the whole fetch, so concurrent
    callers block until the first fetch completes and all observe the same
    tuple. A failed or unusable $metadata response resolves to ``()``.
    """

    def __init__(self, fetch: Callable[[], Any], logger: Optional[logging.Logger] = None) -> None:
        self._fetch = fetch
        self.logger = logger or logging.getLogger("odata_client")
        self._lock = threading.RLock()
        self._state = ResolverState.UNRESOLVED
        self._entity_sets: Optional[Tuple[str, ...]] = None
        self._pending: List[BindAction] = []

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def entity_sets(self) -> Optional[Tuple[str, ...]]:
        """Cached names, or None before resolution."""
        return self._entity_sets

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def when_resolved(self, action: BindAction) -> bool:
        """
        Run ``action(entity_sets)`` now if resolved, else queue it.

        Returns True when the action ran immediately.

        Raises
        ------
        BindError
            If the action ran immediately and raised
        """
        with self._lock:
            if self._state is not ResolverState.RESOLVED:
                self._pending.append(action)
                return False
            names = self._entity_sets
        try:
            action(names)
        except Exception as exc:
            raise BindError(exc) from exc
        return True

    def resolve(self) -> Tuple[str, ...]:
        """
        Return the entity set names, fetching $metadata on first use.

        Raises
        ------
        BindError
            If a queued binding action raised; the names stay cached
        """
        with self._lock:
            if self._state is ResolverState.RESOLVED:
                return self._entity_sets  # type: ignore[return-value]

            self._state = ResolverState.RESOLVING
            try:
                names = tuple(self._load())
            except BaseException:
                self._state = ResolverState.UNRESOLVED
                raise
            self._entity_sets = names
            self._state = ResolverState.RESOLVED

            pending, self._pending = self._pending, []
            first_error: Optional[Exception] = None
            for action in pending:
                try:
                    action(names)
                except Exception as exc:
                    self.logger.debug("Deferred binding failed: %s", exc)
                    if first_error is None:
                        first_error = exc
            if first_error is not None:
                raise BindError(first_error) from first_error
            return names

    def _load(self) -> List[str]:
        try:
            result = self._fetch()
        except ODataError as exc:
            self.logger.debug("No discoverable $metadata, continuing without entity sets: %s", exc)
            return []

        data = getattr(result, "data", None)
        if not isinstance(data, ET.Element):
            self.logger.debug(
                "$metadata response is not an XML document (status %s), continuing without entity sets",
                getattr(result, "status_code", None),
            )
            return []
        return extract_entity_sets(data)
