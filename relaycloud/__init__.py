"""Relay Cloud — pull-based command relay for remote relay-switch devices.

Devices push their observed state and drain pending commands over plain
request/response calls; an operator enqueues commands with an admin token.

Quickstart::

    from relaycloud.registry import DeviceRegistry

    registry = DeviceRegistry()
    registry.register("r1", "s1")
    registry.push_command("r1", {"type": "set", "ch": 1, "state": "on"})
    registry.pull_commands(registry.lookup("r1"))
"""

__version__ = "1.0.0"
