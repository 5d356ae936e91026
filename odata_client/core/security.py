"""
odata_client.core.security - Credential attachment
====================================================

A security collaborator is any object exposing ``add_options(descriptor)``.
It is invoked last while a request is being translated, so it can add or
override authentication fields on the ``TransportDescriptor``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from odata_client.odata.request import TransportDescriptor


@dataclass
class BasicSecurity:
    """
    HTTP basic authentication.

    Examples
    --------
    >>> client = create_client(url="https://host/odata", security=BasicSecurity("USER", "PASS"))
    """
    username: str
    password: str

    def add_options(self, descriptor: "TransportDescriptor") -> None:
        descriptor.auth = (self.username, self.password)


@dataclass
class BearerSecurity:
    """OAuth bearer token authentication."""
    token: str

    def add_options(self, descriptor: "TransportDescriptor") -> None:
        descriptor.headers["Authorization"] = f"Bearer {self.token}"
