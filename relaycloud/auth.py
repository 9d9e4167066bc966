"""Authentication for Relay Cloud.

Two independent checks that are never unified:

  - device calls carry ``device_id`` + ``secret``, matched exactly against
    the registry;
  - operator calls carry the single static admin token configured at
    startup.  It grants control over every device.
"""

from __future__ import annotations

import hmac
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from relaycloud.errors import AuthError, AuthFailure
from relaycloud.registry import DeviceRecord, DeviceRegistry

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


# ── Device credentials ────────────────────────────────────────────

def authenticate_device(
    registry: DeviceRegistry, device_id: str | None, secret: str | None,
) -> DeviceRecord:
    """Return the device's record if *secret* matches, else raise :class:`AuthError`.

    The caller is responsible for refreshing ``last_seen``.
    """
    if not device_id or not secret:
        raise AuthError(AuthFailure.MISSING_CREDENTIALS, "device_id and secret required")
    record = registry.lookup(device_id)
    if record is None:
        raise AuthError(AuthFailure.UNKNOWN_DEVICE, f"unknown device {device_id}")
    with record.lock:
        stored = record.secret
    if not hmac.compare_digest(stored.encode(), secret.encode()):
        raise AuthError(AuthFailure.SECRET_MISMATCH, f"bad secret for {device_id}")
    return record


# ── Admin token ───────────────────────────────────────────────────

def check_admin_token(token: str | None, expected: str) -> None:
    if not token or not hmac.compare_digest(token.encode(), expected.encode()):
        raise AuthError(AuthFailure.BAD_ADMIN_TOKEN, "bad admin_token")


# ── FastAPI dependency ────────────────────────────────────────────

async def guard_listing(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> None:
    """Dependency for ``GET /devices``.

    The listing is open unless ``list_requires_admin`` is configured, in
    which case a ``Bearer`` admin token is required.
    """
    config = request.app.state.config
    if config.list_requires_admin:
        check_admin_token(creds.credentials if creds else None, config.admin_token)
