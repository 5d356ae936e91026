"""
odata_client.core.errors - Error taxonomy
==========================================

Every error raised or delivered by the client derives from ``ODataError``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ODataError(RuntimeError):
    """Base class for all client errors."""


class ConfigError(ODataError):
    """
    Raised when the client is constructed with invalid settings.

    Attributes
    ----------
    field : str
        Name of the offending setting
    reason : str
        Human readable description of the problem
    """

    def __init__(self, field: str, reason: str):
        name = field if field == "settings" else f"settings.{field}"
        super().__init__(f"'{name}' {reason}")
        self.field = field
        self.reason = reason


class FieldError(ODataError):
    """
    Raised when a per-call option is missing or has the wrong type.

    Attributes
    ----------
    field : str
        Name of the offending option
    reason : str
        Human readable description of the problem
    """

    def __init__(self, field: str, reason: str = "property is missing or invalid."):
        super().__init__(f"'{field}' {reason}")
        self.field = field
        self.reason = reason


class TransportError(ODataError):
    """Network level failure (connection, TLS, timeout)."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ParseError(ODataError):
    """
    Raised when a response body cannot be decoded per its content type.

    Attributes
    ----------
    status_code : int
        HTTP status code of the response
    body : Any
        Raw response body
    headers : dict
        Response headers
    cause : Exception, optional
        Underlying parser exception
    """

    def __init__(
        self,
        status_code: int,
        body: Any,
        headers: Optional[Dict[str, str]] = None,
        cause: Optional[BaseException] = None,
    ):
        snippet = str(body if body is not None else "")[:1200]
        super().__init__(
            f"Couldn't parse the response from the server (status {status_code}): {snippet}"
        )
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.cause = cause


class NotFoundError(ODataError):
    """A resource the client expected in a response was not there."""


class BindError(ODataError):
    """A deferred method binding failed after entity sets were resolved."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Couldn't add operations from metadata: {cause}")
        self.cause = cause


class SecurityError(ODataError):
    """The security collaborator failed while decorating a request."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Couldn't apply security options: {cause}")
        self.cause = cause
