"""
odata_client.core.transport - HTTP transport
=============================================

Executes ``TransportDescriptor`` objects with a pooled ``requests.Session``:
- keep-alive connection pools for http and https
- a pinned TLS cipher/protocol policy for https endpoints
- optional retry with exponential backoff
- network failures mapped to ``TransportError``
"""

from __future__ import annotations

import logging
import ssl
import time
from typing import TYPE_CHECKING, Optional

import requests
from requests import Response, Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from urllib3.util.ssl_ import create_urllib3_context

from odata_client.core.config import ClientConfig, TlsPolicy
from odata_client.core.errors import TransportError

if TYPE_CHECKING:
    from odata_client.odata.request import TransportDescriptor


_BASE_SSL_OPTIONS = ssl.OP_NO_SSLv2 | ssl.OP_NO_SSLv3 | ssl.OP_NO_COMPRESSION | ssl.OP_NO_TICKET


class TlsPolicyAdapter(HTTPAdapter):
    """
    ``HTTPAdapter`` whose pools use an SSL context built from a ``TlsPolicy``.

    Parameters
    ----------
    tls_policy : TlsPolicy
        Ciphers and protocol flags for the SSL context
    """

    def __init__(self, tls_policy: TlsPolicy, *args, **kwargs) -> None:
        # HTTPAdapter.__init__ calls init_poolmanager
        self.tls_policy = tls_policy
        super().__init__(*args, **kwargs)

    def build_ssl_context(self):
        # options= replaces urllib3's default flags
        return create_urllib3_context(
            ssl_minimum_version=self.tls_policy.minimum_version,
            ciphers=self.tls_policy.ciphers,
            options=_BASE_SSL_OPTIONS | self.tls_policy.ssl_options(),
        )

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self.build_ssl_context()
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        kwargs["ssl_context"] = self.build_ssl_context()
        return super().proxy_manager_for(*args, **kwargs)


class RequestsTransport:
    """
    ``send(descriptor) -> Response`` over a ``requests.Session``.

    Parameters
    ----------
    cfg : ClientConfig
        Client configuration
    logger : logging.Logger, optional
        Logger for request timing

    Examples
    --------
    >>> transport = RequestsTransport(cfg)
    >>> r = transport.send(descriptor)
    """

    def __init__(self, cfg: ClientConfig, logger: Optional[logging.Logger] = None) -> None:
        self.cfg = cfg
        self.logger = logger or logging.getLogger("odata_client")
        self._tls_policy: Optional[TlsPolicy] = None
        self.session = self._build_session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    # ---------------- session ----------------

    def _retry(self) -> Retry:
        return Retry(
            total=self.cfg.retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset({"GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"}),
            raise_on_status=False,
        )

    def _mount_https(self, sess: Session, tls_policy: TlsPolicy) -> None:
        adapter = TlsPolicyAdapter(
            tls_policy,
            max_retries=self._retry(),
            pool_connections=20,
            pool_maxsize=50,
        )
        sess.mount("https://", adapter)
        self._tls_policy = tls_policy

    def _build_session(self) -> Session:
        sess = requests.Session()
        sess.mount(
            "http://",
            HTTPAdapter(max_retries=self._retry(), pool_connections=20, pool_maxsize=50),
        )
        if self.cfg.use_https:
            self._mount_https(sess, self.cfg.tls_policy)
        return sess

    # ---------------- send ----------------

    def send(self, descriptor: "TransportDescriptor") -> Response:
        """
        Execute a descriptor.

        Returns the ``requests.Response``; when ``descriptor.stream`` is set the
        body has not been read and the response is a live stream.

        Raises
        ------
        TransportError
            On connection failures and timeouts
        """
        if descriptor.tls_policy is not None and descriptor.tls_policy != self._tls_policy:
            self._mount_https(self.session, descriptor.tls_policy)

        t0 = time.perf_counter()
        try:
            r = self.session.request(
                method=descriptor.method,
                url=descriptor.url,
                headers=descriptor.headers,
                data=descriptor.data,
                timeout=descriptor.timeout,
                verify=descriptor.verify,
                stream=descriptor.stream,
                auth=descriptor.auth,
            )
        except requests.Timeout as exc:
            raise TransportError(
                f"{descriptor.method} {descriptor.url} timed out after {descriptor.timeout}s",
                exc,
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"{descriptor.method} {descriptor.url} failed: {exc}", exc) from exc

        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("%s %s %sms", descriptor.method.upper(), descriptor.url, round(dt, 1))
        return r
