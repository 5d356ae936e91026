"""
odata_client.core.config - Client configuration
=================================================

Raw settings (a mapping, keyword arguments or environment variables) are
validated with a pydantic model and frozen into a ``ClientConfig``.
"""

from __future__ import annotations

import logging
import os
import ssl
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from odata_client.core.errors import ConfigError
from odata_client.core.security import BasicSecurity, BearerSecurity


DEFAULT_TIMEOUT_MS = 180000

# Cipher suite list required by the target service family.
DEFAULT_CIPHERS = "ECDHE-RSA-AES256-SHA:AES256-SHA:RC4-SHA:RC4:HIGH:!MD5:!aNULL:!EDH:!AESGCM"
DEFAULT_DISABLED_PROTOCOLS = ("TLSv1_2",)


@dataclass(frozen=True)
class TlsPolicy:
    """
    TLS settings attached to every request sent over HTTPS.

    Parameters
    ----------
    ciphers : str
        OpenSSL cipher list
    disabled_protocols : tuple of str
        Protocol names as used by ``ssl.OP_NO_<name>``, e.g. "TLSv1_2"
    honor_cipher_order : bool
        Prefer the server's cipher order over the client's
    minimum_version : ssl.TLSVersion
        Lowest protocol version the context may negotiate (default: the
        lowest OpenSSL supports)
    """
    ciphers: str = DEFAULT_CIPHERS
    disabled_protocols: Tuple[str, ...] = DEFAULT_DISABLED_PROTOCOLS
    honor_cipher_order: bool = True
    minimum_version: ssl.TLSVersion = ssl.TLSVersion.MINIMUM_SUPPORTED

    def ssl_options(self) -> int:
        """Bit mask of ``ssl.OP_*`` flags for this policy."""
        opts = 0
        for name in self.disabled_protocols:
            flag = getattr(ssl, f"OP_NO_{name}", None)
            if flag is None:
                raise ValueError(f"Unknown TLS protocol name: {name}")
            opts |= flag
        if self.honor_cipher_order:
            opts |= ssl.OP_CIPHER_SERVER_PREFERENCE
        return opts


DEFAULT_TLS_POLICY = TlsPolicy()


class ClientSettings(BaseModel):
    """Validation model for raw client settings."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    url: StrictStr = Field(min_length=1)
    timeout: Optional[Union[StrictInt, StrictFloat]] = None
    strict_ssl: Optional[StrictBool] = Field(default=None, alias="strictSSL")
    streaming: Optional[StrictBool] = None
    username: Optional[StrictStr] = None
    password: Optional[StrictStr] = None
    retries: StrictInt = Field(default=0, ge=0)
    logger: Any = None
    security: Any = None
    tls_policy: Optional[TlsPolicy] = None

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        if urlparse(v).scheme.lower() not in ("http", "https"):
            raise ValueError("must be an absolute http(s) URL")
        return v

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("must be a positive number of milliseconds")
        return v

    @field_validator("logger")
    @classmethod
    def _has_debug(cls, v: Any) -> Any:
        if v is not None and not callable(getattr(v, "debug", None)):
            raise ValueError("must expose a debug() method")
        return v

    @field_validator("security")
    @classmethod
    def _has_add_options(cls, v: Any) -> Any:
        if v is not None and not callable(getattr(v, "add_options", None)):
            raise ValueError("must expose an add_options() method")
        return v


def _config_error(exc: ValidationError) -> ConfigError:
    err = exc.errors()[0]
    loc = err.get("loc") or ("settings",)
    name = str(loc[0])
    if err.get("type") == "missing":
        return ConfigError(name, "property is required.")
    msg = err.get("msg", "is invalid")
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return ConfigError(name, f"property is invalid: {msg}")


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable configuration owned by one ``ODataClient``.

    Parameters
    ----------
    url : str
        Service root, e.g. "https://host/_vti_bin/listdata.svc"
    timeout : float
        Request timeout in milliseconds (default: 180000)
    strict_ssl : bool
        Verify server certificates (default: True)
    streaming : bool
        Return live streams instead of decoded envelopes (default: False)
    security : object, optional
        Collaborator exposing ``add_options(descriptor)``
    logger : logging.Logger, optional
        Logger used for request tracing and decode failures
    username, password : str, optional
        Basic credentials, used when no ``security`` is given
    retries : int
        Retries for connection failures and 429/5xx responses (default: 0)
    tls_policy : TlsPolicy
        Cipher and protocol policy applied over HTTPS

    Examples
    --------
    >>> cfg = ClientConfig.from_settings({"url": "https://host/odata", "timeout": 30000})
    >>> cfg.use_https
    True
    """
    url: str
    timeout: float = DEFAULT_TIMEOUT_MS
    strict_ssl: bool = True
    streaming: bool = False
    security: Any = None
    logger: Optional[logging.Logger] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    retries: int = 0
    tls_policy: TlsPolicy = DEFAULT_TLS_POLICY

    @property
    def use_https(self) -> bool:
        return urlparse(self.url).scheme.lower() == "https"

    @property
    def timeout_seconds(self) -> float:
        return float(self.timeout) / 1000.0

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Mapping[str, Any]] = None,
        **overrides: Any,
    ) -> "ClientConfig":
        """
        Validate raw settings and build a config.

        Raises
        ------
        ConfigError
            If a setting is missing or has the wrong type
        """
        if settings is not None and not isinstance(settings, Mapping):
            raise ConfigError("settings", "argument must be a mapping.")
        raw = dict(settings or {})
        raw.update(overrides)
        if "url" not in raw:
            raise ConfigError("url", "property is a required string.")

        try:
            s = ClientSettings.model_validate(raw)
        except ValidationError as exc:
            raise _config_error(exc) from exc

        security = s.security
        if security is None and s.username is not None and s.password is not None:
            security = BasicSecurity(s.username, s.password)

        return cls(
            url=s.url,
            timeout=s.timeout or DEFAULT_TIMEOUT_MS,
            strict_ssl=True if s.strict_ssl is None else s.strict_ssl,
            streaming=bool(s.streaming),
            security=security,
            logger=s.logger,
            username=s.username,
            password=s.password,
            retries=s.retries,
            tls_policy=s.tls_policy or DEFAULT_TLS_POLICY,
        )

    @classmethod
    def from_env(cls, prefix: str = "ODATA_", **overrides: Any) -> "ClientConfig":
        """
        Build a config from environment variables.

        Reads ``<prefix>URL``, ``<prefix>TIMEOUT``, ``<prefix>STRICT_SSL``,
        ``<prefix>STREAMING``, ``<prefix>USER``, ``<prefix>PASS``,
        ``<prefix>BEARER_TOKEN`` and ``<prefix>RETRIES``. Keyword arguments
        take precedence over the environment.
        """
        env = os.environ
        raw: dict = {}
        if env.get(f"{prefix}URL"):
            raw["url"] = env[f"{prefix}URL"]
        if env.get(f"{prefix}TIMEOUT"):
            raw["timeout"] = float(env[f"{prefix}TIMEOUT"])
        if env.get(f"{prefix}STRICT_SSL"):
            raw["strict_ssl"] = env[f"{prefix}STRICT_SSL"].lower() != "false"
        if env.get(f"{prefix}STREAMING"):
            raw["streaming"] = env[f"{prefix}STREAMING"].lower() == "true"
        if env.get(f"{prefix}RETRIES"):
            raw["retries"] = int(env[f"{prefix}RETRIES"])
        if env.get(f"{prefix}BEARER_TOKEN"):
            raw["security"] = BearerSecurity(env[f"{prefix}BEARER_TOKEN"])
        elif env.get(f"{prefix}USER") and env.get(f"{prefix}PASS"):
            raw["username"] = env[f"{prefix}USER"]
            raw["password"] = env[f"{prefix}PASS"]
        raw.update(overrides)
        return cls.from_settings(raw)
