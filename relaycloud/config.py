"""Process-wide settings for the relay server.

Everything is read once from the environment at startup::

    ADMIN_TOKEN                 operator credential (default: dev-admin-token)
    RELAY_HOST / PORT           listen address (default: 0.0.0.0:3000)
    LOG_LEVEL                   logging level name (default: INFO)
    RELAY_MAX_QUEUE             per-device queue cap, 0 = unbounded (default: 0)
    RELAY_QUEUE_POLICY          drop-oldest | reject (default: drop-oldest)
    RELAY_LIST_REQUIRES_ADMIN   guard GET /devices with the admin token (default: 0)

The default admin token is deliberately weak.  Override it in any real
deployment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_ADMIN_TOKEN = "dev-admin-token"
DEFAULT_PORT = 3000

QUEUE_POLICIES = ("drop-oldest", "reject")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _env_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUTHY:
        return True
    if v in _FALSY:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


@dataclass(frozen=True)
class RelayConfig:
    admin_token: str = DEFAULT_ADMIN_TOKEN
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    max_queue_length: int = 0
    queue_policy: str = "drop-oldest"
    list_requires_admin: bool = False

    def __post_init__(self) -> None:
        if not self.admin_token:
            raise ValueError("admin_token must not be empty")
        if self.max_queue_length < 0:
            raise ValueError("max_queue_length must be >= 0")
        if self.queue_policy not in QUEUE_POLICIES:
            raise ValueError(
                f"Unknown queue policy {self.queue_policy!r}, expected one of {QUEUE_POLICIES}"
            )

    @property
    def uses_default_token(self) -> bool:
        return self.admin_token == DEFAULT_ADMIN_TOKEN

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RelayConfig":
        """Build a config from ``os.environ`` (or the given mapping)."""
        env = os.environ if environ is None else environ
        return cls(
            admin_token=env.get("ADMIN_TOKEN") or DEFAULT_ADMIN_TOKEN,
            host=env.get("RELAY_HOST", "0.0.0.0"),
            port=int(env.get("PORT", str(DEFAULT_PORT))),
            log_level=env.get("LOG_LEVEL", "INFO").strip().upper(),
            max_queue_length=int(env.get("RELAY_MAX_QUEUE", "0")),
            queue_policy=env.get("RELAY_QUEUE_POLICY", "drop-oldest").strip().lower(),
            list_requires_admin=_env_bool(env.get("RELAY_LIST_REQUIRES_ADMIN", "0")),
        )
