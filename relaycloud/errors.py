"""Error taxonomy for the relay core.

The core raises these; only :mod:`relaycloud.api` turns them into HTTP
responses.
"""

from __future__ import annotations

import enum


class RelayError(Exception):
    """Base error for rejected relay operations."""


class ValidationError(RelayError):
    """Raised when a required input is missing or malformed."""


class AuthFailure(enum.Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    UNKNOWN_DEVICE = "unknown_device"
    SECRET_MISMATCH = "secret_mismatch"
    BAD_ADMIN_TOKEN = "bad_admin_token"


class AuthError(RelayError):
    """Raised when device or admin credentials do not check out."""

    def __init__(self, kind: AuthFailure, message: str = "") -> None:
        super().__init__(message or kind.value)
        self.kind = kind


class NotFoundError(RelayError):
    """Raised when the operator references an unregistered device."""

    def __init__(self, device_id: str) -> None:
        super().__init__(f"unknown device_id: {device_id}")
        self.device_id = device_id


class QueueFullError(RelayError):
    """Raised by the ``reject`` queue policy when a device queue is at capacity."""

    def __init__(self, device_id: str, limit: int) -> None:
        super().__init__(f"command queue for {device_id} is full ({limit})")
        self.device_id = device_id
        self.limit = limit
