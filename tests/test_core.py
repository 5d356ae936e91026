"""
Tests for odata_client.core module.
"""

import logging
import ssl

import pytest
import requests
from unittest.mock import MagicMock, Mock, patch

from odata_client.core.config import (
    ClientConfig,
    TlsPolicy,
    DEFAULT_CIPHERS,
    DEFAULT_TIMEOUT_MS,
)
from odata_client.core.errors import (
    BindError,
    ConfigError,
    FieldError,
    ParseError,
    SecurityError,
    TransportError,
)
from odata_client.core.security import BasicSecurity, BearerSecurity
from odata_client.core.transport import RequestsTransport, TlsPolicyAdapter
from odata_client.odata.request import TransportDescriptor
from odata_client import create_client


class TestClientConfig:
    """Tests for ClientConfig construction and validation."""

    def test_default_values(self):
        cfg = ClientConfig.from_settings({"url": "https://test.com/odata/"})
        assert cfg.timeout == DEFAULT_TIMEOUT_MS
        assert cfg.timeout_seconds == 180.0
        assert cfg.strict_ssl is True
        assert cfg.streaming is False
        assert cfg.security is None
        assert cfg.retries == 0
        assert cfg.use_https is True

    def test_custom_values(self):
        logger = logging.getLogger("test.odata")
        cfg = ClientConfig.from_settings(
            {"url": "http://test.com/odata", "strictSSL": False, "streaming": True},
            timeout=30000,
            logger=logger,
        )
        assert cfg.strict_ssl is False
        assert cfg.streaming is True
        assert cfg.timeout_seconds == 30.0
        assert cfg.logger is logger
        assert cfg.use_https is False

    def test_snake_case_strict_ssl(self):
        cfg = ClientConfig.from_settings(url="https://test.com", strict_ssl=False)
        assert cfg.strict_ssl is False

    def test_config_is_frozen(self):
        cfg = ClientConfig.from_settings(url="https://test.com")
        with pytest.raises(Exception):
            cfg.url = "https://other.com"

    def test_missing_url_raises(self):
        with pytest.raises(ConfigError) as exc:
            ClientConfig.from_settings({})
        assert exc.value.field == "url"

    def test_non_mapping_settings_raises(self):
        with pytest.raises(ConfigError) as exc:
            ClientConfig.from_settings("https://test.com")
        assert exc.value.field == "settings"

    @pytest.mark.parametrize("settings, field", [
        ({"url": 42}, "url"),
        ({"url": ""}, "url"),
        ({"url": "ftp://test.com"}, "url"),
        ({"url": "https://test.com", "timeout": "60"}, "timeout"),
        ({"url": "https://test.com", "timeout": -1}, "timeout"),
        ({"url": "https://test.com", "strictSSL": "yes"}, "strictSSL"),
        ({"url": "https://test.com", "streaming": 1}, "streaming"),
        ({"url": "https://test.com", "username": 7}, "username"),
        ({"url": "https://test.com", "security": object()}, "security"),
        ({"url": "https://test.com", "logger": "stdout"}, "logger"),
    ])
    def test_invalid_setting_names_field(self, settings, field):
        with pytest.raises(ConfigError) as exc:
            ClientConfig.from_settings(settings)
        assert exc.value.field == field
        assert field in str(exc.value)

    def test_username_password_use_basic_security(self):
        cfg = ClientConfig.from_settings(url="https://test.com", username="user", password="pass")
        assert isinstance(cfg.security, BasicSecurity)
        assert cfg.security.username == "user"

    def test_explicit_security_wins(self):
        security = BearerSecurity("token")
        cfg = ClientConfig.from_settings(
            url="https://test.com", username="user", password="pass", security=security
        )
        assert cfg.security is security

    @patch.dict("os.environ", {
        "ODATA_URL": "https://env.test.com/odata/",
        "ODATA_USER": "envuser",
        "ODATA_PASS": "envpass",
        "ODATA_TIMEOUT": "5000",
        "ODATA_STRICT_SSL": "false",
    })
    def test_reads_from_environment(self):
        cfg = ClientConfig.from_env()
        assert cfg.url == "https://env.test.com/odata/"
        assert cfg.timeout_seconds == 5.0
        assert cfg.strict_ssl is False
        assert isinstance(cfg.security, BasicSecurity)

    @patch.dict("os.environ", {
        "ODATA_URL": "https://env.test.com/odata/",
        "ODATA_BEARER_TOKEN": "tok",
    })
    def test_explicit_params_override_env(self):
        cfg = ClientConfig.from_env(url="https://explicit.com/odata/")
        assert cfg.url == "https://explicit.com/odata/"
        assert isinstance(cfg.security, BearerSecurity)

    def test_create_client_validates(self):
        with pytest.raises(ConfigError):
            create_client({"timeout": 10})


class TestTlsPolicy:
    """Tests for the pinned TLS policy."""

    def test_default_policy(self):
        policy = TlsPolicy()
        assert policy.ciphers == DEFAULT_CIPHERS
        opts = policy.ssl_options()
        assert opts & ssl.OP_NO_TLSv1_2
        assert opts & ssl.OP_CIPHER_SERVER_PREFERENCE
        assert policy.minimum_version == ssl.TLSVersion.MINIMUM_SUPPORTED

    def test_policy_is_overridable(self):
        policy = TlsPolicy(ciphers="HIGH", disabled_protocols=(), honor_cipher_order=False)
        assert policy.ssl_options() == 0

    def test_unknown_protocol_raises(self):
        with pytest.raises(ValueError):
            TlsPolicy(disabled_protocols=("TLSv9",)).ssl_options()


class TestErrors:
    """Tests for the error taxonomy."""

    def test_field_error_attributes(self):
        err = FieldError("resource")
        assert err.field == "resource"
        assert "'resource'" in str(err)

    def test_parse_error_attributes(self):
        cause = ValueError("bad")
        err = ParseError(500, "not json", {"content-type": "application/json"}, cause)
        assert err.status_code == 500
        assert err.body == "not json"
        assert err.headers == {"content-type": "application/json"}
        assert err.cause is cause

    def test_parse_error_message_truncation(self):
        err = ParseError(500, "x" * 2000)
        assert len(str(err)) < 1500

    def test_bind_error_keeps_cause(self):
        cause = KeyError("boom")
        assert BindError(cause).cause is cause

    def test_security_error_keeps_cause(self):
        cause = KeyError("no token")
        err = SecurityError(cause)
        assert err.cause is cause
        assert "no token" in str(err)


class TestSecurity:
    """Tests for shipped security collaborators."""

    def test_basic_security(self):
        desc = TransportDescriptor(url="https://test.com")
        BasicSecurity("user", "pass").add_options(desc)
        assert desc.auth == ("user", "pass")

    def test_bearer_security(self):
        desc = TransportDescriptor(url="https://test.com")
        BearerSecurity("tok").add_options(desc)
        assert desc.headers["authorization"] == "Bearer tok"


class TestRequestsTransport:
    """Tests for RequestsTransport."""

    @patch("odata_client.core.transport.requests.Session")
    def test_https_mounts_tls_adapter(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        cfg = ClientConfig.from_settings(url="https://test.com/odata")
        RequestsTransport(cfg)

        mounted = {c.args[0]: c.args[1] for c in mock_session.mount.call_args_list}
        assert isinstance(mounted["https://"], TlsPolicyAdapter)
        assert mounted["https://"].tls_policy == cfg.tls_policy

    @patch("odata_client.core.transport.requests.Session")
    def test_http_has_no_tls_adapter(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        cfg = ClientConfig.from_settings(url="http://test.com/odata")
        RequestsTransport(cfg)

        prefixes = [c.args[0] for c in mock_session.mount.call_args_list]
        assert prefixes == ["http://"]

    def test_adapter_ssl_context(self):
        adapter = TlsPolicyAdapter(TlsPolicy())
        ctx = adapter.build_ssl_context()
        assert ctx.options & ssl.OP_CIPHER_SERVER_PREFERENCE
        assert ctx.options & ssl.OP_NO_TLSv1_2
        # TLS 1.0/1.1 stay negotiable so the pinned cipher list applies
        assert ctx.minimum_version < ssl.TLSVersion.TLSv1_2

    def test_adapter_keeps_default_hardening(self):
        ctx = TlsPolicyAdapter(TlsPolicy()).build_ssl_context()
        assert ctx.options & ssl.OP_NO_COMPRESSION
        assert ctx.options & ssl.OP_NO_TICKET

    def test_adapter_minimum_version_from_policy(self):
        policy = TlsPolicy(disabled_protocols=(), minimum_version=ssl.TLSVersion.TLSv1_2)
        ctx = TlsPolicyAdapter(policy).build_ssl_context()
        assert ctx.minimum_version == ssl.TLSVersion.TLSv1_2

    @patch("odata_client.core.transport.requests.Session")
    def test_send_passes_descriptor(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        response = Mock()
        mock_session.request.return_value = response

        cfg = ClientConfig.from_settings(url="http://test.com/odata")
        transport = RequestsTransport(cfg)
        desc = TransportDescriptor(
            url="http://test.com/odata/Orders",
            method="POST",
            data="{}",
            timeout=3.0,
            stream=True,
            auth=("u", "p"),
        )

        assert transport.send(desc) is response
        kwargs = mock_session.request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"] == "http://test.com/odata/Orders"
        assert kwargs["timeout"] == 3.0
        assert kwargs["stream"] is True
        assert kwargs["auth"] == ("u", "p")

    @patch("odata_client.core.transport.requests.Session")
    def test_timeout_maps_to_transport_error(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        cause = requests.Timeout("slow")
        mock_session.request.side_effect = cause

        transport = RequestsTransport(ClientConfig.from_settings(url="http://test.com"))
        with pytest.raises(TransportError) as exc:
            transport.send(TransportDescriptor(url="http://test.com/x"))
        assert exc.value.cause is cause
        assert "timed out" in str(exc.value)

    @patch("odata_client.core.transport.requests.Session")
    def test_connection_error_maps_to_transport_error(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session
        mock_session.request.side_effect = requests.ConnectionError("refused")

        transport = RequestsTransport(ClientConfig.from_settings(url="http://test.com"))
        with pytest.raises(TransportError):
            transport.send(TransportDescriptor(url="http://test.com/x"))

    @patch("odata_client.core.transport.requests.Session")
    def test_close(self, mock_session_class):
        mock_session = MagicMock()
        mock_session_class.return_value = mock_session

        with create_client(url="http://test.com"):
            pass

        mock_session.close.assert_called_once()
