"""Tests for the app factory."""

from __future__ import annotations

from relaycloud import server
from relaycloud.config import RelayConfig


class TestCreateApp:
    def test_no_module_level_app(self):
        assert not hasattr(server, "app")

    def test_explicit_config_ignores_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "not-a-port")
        monkeypatch.setenv("RELAY_QUEUE_POLICY", "bogus")
        app = server.create_app(RelayConfig(admin_token="tok", max_queue_length=3))
        assert app.state.config.admin_token == "tok"
        assert app.state.registry.max_queue_length == 3

    def test_default_token_warning(self, caplog):
        with caplog.at_level("WARNING", logger="relaycloud.server"):
            server.create_app(RelayConfig())
        assert "insecure default token" in caplog.text

    def test_configured_token_is_quiet(self, caplog):
        with caplog.at_level("WARNING", logger="relaycloud.server"):
            server.create_app(RelayConfig(admin_token="tok"))
        assert caplog.text == ""
