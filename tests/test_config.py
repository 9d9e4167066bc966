"""Tests for environment-sourced settings."""

from __future__ import annotations

import pytest

from relaycloud.config import DEFAULT_ADMIN_TOKEN, DEFAULT_PORT, RelayConfig


class TestFromEnv:
    def test_defaults(self):
        cfg = RelayConfig.from_env({})
        assert cfg.admin_token == DEFAULT_ADMIN_TOKEN
        assert cfg.uses_default_token
        assert cfg.port == DEFAULT_PORT
        assert cfg.max_queue_length == 0
        assert cfg.list_requires_admin is False

    def test_overrides(self):
        cfg = RelayConfig.from_env({
            "ADMIN_TOKEN": "s3cret",
            "PORT": "8080",
            "RELAY_HOST": "127.0.0.1",
            "LOG_LEVEL": "debug",
            "RELAY_MAX_QUEUE": "50",
            "RELAY_QUEUE_POLICY": "Reject",
            "RELAY_LIST_REQUIRES_ADMIN": "yes",
        })
        assert cfg.admin_token == "s3cret"
        assert not cfg.uses_default_token
        assert cfg.port == 8080
        assert cfg.host == "127.0.0.1"
        assert cfg.log_level == "DEBUG"
        assert cfg.max_queue_length == 50
        assert cfg.queue_policy == "reject"
        assert cfg.list_requires_admin is True

    def test_empty_token_falls_back(self):
        assert RelayConfig.from_env({"ADMIN_TOKEN": ""}).uses_default_token

    @pytest.mark.parametrize("env", [
        {"PORT": "abc"},
        {"RELAY_MAX_QUEUE": "-1"},
        {"RELAY_QUEUE_POLICY": "drop-newest"},
        {"RELAY_LIST_REQUIRES_ADMIN": "maybe"},
    ])
    def test_invalid(self, env):
        with pytest.raises(ValueError):
            RelayConfig.from_env(env)

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("ADMIN_TOKEN", "from-env")
        assert RelayConfig.from_env().admin_token == "from-env"
