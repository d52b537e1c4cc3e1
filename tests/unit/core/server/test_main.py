"""Tests for the server entry point guards."""

from __future__ import annotations

import logging

import pytest

from tempo.core.config.settings import Settings
from tempo.core.server.main import _is_loopback_host, check_bind_host, configure_logging


class TestLoopbackHost:
    @pytest.mark.parametrize("host", ["127.0.0.1", "localhost", "::1", "127.0.0.53"])
    def test_loopback(self, host):
        assert _is_loopback_host(host)

    @pytest.mark.parametrize("host", ["0.0.0.0", "192.168.1.20", "example.com"])
    def test_not_loopback(self, host):
        assert not _is_loopback_host(host)


class TestBindGuard:
    def test_default_host_allowed(self):
        check_bind_host(Settings())

    def test_exposed_host_refused(self):
        with pytest.raises(RuntimeError, match="TEMPO_ALLOW_INSECURE_BIND"):
            check_bind_host(Settings(tempo_host="0.0.0.0"))

    def test_override_allows_exposed_host(self):
        check_bind_host(Settings(tempo_host="0.0.0.0", tempo_allow_insecure_bind=True))

    def test_stdio_ignores_host(self):
        check_bind_host(Settings(tempo_host="0.0.0.0", tempo_transport="stdio"))

    def test_transport_from_env(self, monkeypatch):
        monkeypatch.setenv("TEMPO_TRANSPORT", "stdio")
        assert Settings().tempo_transport == "stdio"


class TestConfigureLogging:
    def test_known_level(self):
        assert configure_logging("debug") == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        assert configure_logging("chatty") == logging.INFO
