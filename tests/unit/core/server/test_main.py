"""Tests for the server entry point's bind guard."""

from __future__ import annotations

import pytest

from lifelens.core.config.settings import Settings
from lifelens.core.server.main import check_bind


class TestCheckBind:
    @pytest.mark.parametrize("host", ["127.0.0.1", "localhost", "::1"])
    def test_loopback_allowed(self, host):
        check_bind(Settings(lifelens_host=host))

    def test_public_host_refused(self):
        with pytest.raises(RuntimeError, match="LIFELENS_ALLOW_INSECURE_BIND"):
            check_bind(Settings(lifelens_host="0.0.0.0"))

    def test_hostname_refused(self):
        with pytest.raises(RuntimeError):
            check_bind(Settings(lifelens_host="wellness.example.com"))

    def test_override(self):
        check_bind(Settings(lifelens_host="0.0.0.0", lifelens_allow_insecure_bind=True))

    def test_stdio_never_binds(self):
        check_bind(Settings(lifelens_host="0.0.0.0", lifelens_transport="stdio"))
