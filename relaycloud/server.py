"""Relay Cloud — standalone HTTP server.

Start with::

    python -m relaycloud.server
    # or
    relay-cloud
    # or
    uvicorn relaycloud.server:create_app --factory --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from relaycloud import __version__
from relaycloud.api import install_error_handlers, router
from relaycloud.config import RelayConfig
from relaycloud.registry import DeviceRegistry

logger = logging.getLogger(__name__)


def create_app(config: RelayConfig | None = None) -> FastAPI:
    """Build an app with its own empty device registry."""
    config = config or RelayConfig.from_env()
    if config.uses_default_token:
        logger.warning("ADMIN_TOKEN not set, using the insecure default token")

    app = FastAPI(title="Relay Cloud", version=__version__)
    app.state.config = config
    app.state.registry = DeviceRegistry(
        max_queue_length=config.max_queue_length,
        queue_policy=config.queue_policy,
    )
    app.include_router(router)
    install_error_handlers(app)
    return app


# ──────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────

def main():
    import uvicorn
    config = RelayConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(config)
    logger.info("Relay server listening on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
