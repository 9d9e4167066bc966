"""Device directory and command relay.

One :class:`DeviceRegistry` per service instance holds every known device:
its secret, when it was last heard from, the state snapshot it last
reported and the FIFO queue of commands waiting for its next pull.

Delivery is at-most-once: :meth:`DeviceRegistry.pull_commands` hands the
whole queue to the caller and forgets it.  There is no acknowledgment and
no redelivery.

Payloads are deep-copied on the way in and snapshots on the way out, so
callers never share nested values with live state.

Locking:
  - ``_table_lock`` guards insertion into and iteration over the table.
  - each :class:`DeviceRecord` carries its own lock guarding its secret,
    state, queue and ``last_seen``.  Operations on different devices never
    contend on a record lock.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

from relaycloud.errors import NotFoundError, QueueFullError, ValidationError

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    """Milliseconds since the Unix epoch."""
    return int(time.time() * 1000)


@dataclass
class DeviceRecord:
    """Everything the relay knows about one device."""

    id: str
    secret: str
    last_seen: int
    state: dict[str, Any] = field(default_factory=dict)
    queue: deque = field(default_factory=deque)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


@dataclass
class DeviceSummary:
    """Read-only snapshot of a record, as served by the directory listing."""

    id: str
    last_seen: int
    state: dict[str, Any]
    queue_length: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "device_id": self.id,
            "lastSeen": self.last_seen,
            "state": self.state,
            "queueLen": self.queue_length,
        }


class DeviceRegistry:
    """In-memory device directory with per-device command queues.

    ``max_queue_length`` of 0 leaves queues unbounded.  A positive value
    applies ``queue_policy`` when a push finds the queue full:
    ``"drop-oldest"`` discards the head, ``"reject"`` raises
    :class:`~relaycloud.errors.QueueFullError`.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        max_queue_length: int = 0,
        queue_policy: str = "drop-oldest",
    ) -> None:
        self._clock: Clock = clock or now_ms
        self._devices: dict[str, DeviceRecord] = {}
        self._table_lock = threading.Lock()
        self.max_queue_length = max_queue_length
        self.queue_policy = queue_policy

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def now(self) -> int:
        return self._clock()

    # ── Directory ──────────────────────────────────────────────────

    def register(self, device_id: str, secret: str) -> DeviceRecord:
        """Create a device, or rotate the secret of an existing one.

        Re-registering keeps the device's state and pending queue.
        """
        if not device_id or not secret:
            raise ValidationError("device_id and secret required")

        with self._table_lock:
            record = self._devices.get(device_id)
            if record is None:
                record = DeviceRecord(id=device_id, secret=secret, last_seen=self._clock())
                self._devices[device_id] = record
                logger.info("Registered device %s", device_id)
                return record

        with record.lock:
            record.secret = secret
            record.last_seen = self._clock()
        logger.info("Rotated secret for device %s", device_id)
        return record

    def lookup(self, device_id: str) -> DeviceRecord | None:
        return self._devices.get(device_id)

    def list_devices(self) -> list[DeviceSummary]:
        """Snapshot every device in registration order."""
        with self._table_lock:
            records = list(self._devices.values())

        out: list[DeviceSummary] = []
        for record in records:
            with record.lock:
                out.append(DeviceSummary(
                    id=record.id,
                    last_seen=record.last_seen,
                    state=copy.deepcopy(record.state),
                    queue_length=len(record.queue),
                ))
        return out

    # ── Relay operations ───────────────────────────────────────────

    def report_state(self, record: DeviceRecord, payload: Mapping[str, Any] | None) -> int:
        """Replace the device's state snapshot; returns server time (ms).

        Last write wins: fields missing from *payload* are dropped.
        """
        if payload is not None and not isinstance(payload, Mapping):
            raise ValidationError("state must be an object")

        with record.lock:
            now = self._clock()
            record.state = copy.deepcopy(dict(payload or {}))
            record.last_seen = now
        logger.debug("State report from %s (%d fields)", record.id, len(record.state))
        return now

    def pull_commands(self, record: DeviceRecord) -> list[dict[str, Any]]:
        """Drain and return the device's whole queue, oldest first."""
        with record.lock:
            record.last_seen = self._clock()
            commands = list(record.queue)
            record.queue.clear()
        if commands:
            logger.debug("Device %s drained %d command(s)", record.id, len(commands))
        return commands

    def push_command(self, device_id: str, command: Any) -> dict[str, Any]:
        """Append *command* to the device's queue, stamped with ``ts``."""
        record = self._devices.get(device_id)
        if record is None:
            raise NotFoundError(device_id)
        if not isinstance(command, Mapping):
            raise ValidationError("command object required")

        with record.lock:
            envelope = {**copy.deepcopy(dict(command)), "ts": self._clock()}
            limit = self.max_queue_length
            if limit and len(record.queue) >= limit:
                if self.queue_policy == "reject":
                    raise QueueFullError(device_id, limit)
                dropped = record.queue.popleft()
                logger.warning(
                    "Queue for %s full (%d), dropped command queued at %s",
                    device_id, limit, dropped.get("ts"),
                )
            record.queue.append(envelope)
            depth = len(record.queue)

        logger.info("Queued command for %s (depth %d)", device_id, depth)
        return envelope
