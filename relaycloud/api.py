"""HTTP router for Relay Cloud.

Each operation declares exactly where its credentials come from:

  POST /register   body  {device_id, secret}
  POST /state      body  {device_id, secret, ...state fields}
  GET  /pull       query ?device_id=&secret=
  POST /push       body  {admin_token, device_id, command}
  GET  /devices    open, or Bearer admin token when configured
  GET  /health

A missing body is treated as an empty one; a body of the wrong shape is a
400.  Core errors are translated by :func:`install_error_handlers`.  Auth
failures all read ``unauthorized`` on the wire; the sub-kind is only logged.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from relaycloud.auth import authenticate_device, check_admin_token, guard_listing
from relaycloud.errors import AuthError, NotFoundError, QueueFullError, ValidationError
from relaycloud.registry import DeviceRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_registry(request: Request) -> DeviceRegistry:
    return request.app.state.registry


# ──────────────────────────────────────────────────────────────────
# Request models
# ──────────────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    device_id: str = ""
    secret: str = ""


class StateReport(BaseModel):
    """Credentials plus a device-defined state snapshot.

    Every field other than ``device_id`` and ``secret`` is state.
    """

    model_config = ConfigDict(extra="allow")

    device_id: str = ""
    secret: str = ""

    def state(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class PushRequest(BaseModel):
    admin_token: str = ""
    device_id: str = ""
    command: Any = None


# ──────────────────────────────────────────────────────────────────
# Device endpoints
# ──────────────────────────────────────────────────────────────────

@router.post("/register")
async def register(
    req: RegisterRequest | None = None,
    registry: DeviceRegistry = Depends(get_registry),
):
    req = req or RegisterRequest()
    registry.register(req.device_id, req.secret)
    return {"ok": True}


@router.post("/state")
async def report_state(
    req: StateReport | None = None,
    registry: DeviceRegistry = Depends(get_registry),
):
    req = req or StateReport()
    record = authenticate_device(registry, req.device_id, req.secret)
    server_time = registry.report_state(record, req.state())
    return {"ok": True, "serverTime": server_time}


@router.get("/pull")
async def pull(
    device_id: str = Query(""),
    secret: str = Query(""),
    registry: DeviceRegistry = Depends(get_registry),
):
    record = authenticate_device(registry, device_id, secret)
    commands = registry.pull_commands(record)
    return {"commands": commands, "serverTime": registry.now()}


# ──────────────────────────────────────────────────────────────────
# Operator endpoints
# ──────────────────────────────────────────────────────────────────

@router.post("/push")
async def push(
    request: Request,
    req: PushRequest | None = None,
    registry: DeviceRegistry = Depends(get_registry),
):
    req = req or PushRequest()
    check_admin_token(req.admin_token, request.app.state.config.admin_token)
    registry.push_command(req.device_id, req.command)
    return {"ok": True}


@router.get("/devices", dependencies=[Depends(guard_listing)])
async def list_devices(registry: DeviceRegistry = Depends(get_registry)):
    return [d.to_dict() for d in registry.list_devices()]


@router.get("/health")
async def health(registry: DeviceRegistry = Depends(get_registry)):
    return {"status": "ok", "devices": len(registry)}


# ──────────────────────────────────────────────────────────────────
# Error translation
# ──────────────────────────────────────────────────────────────────

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _bad_body(request: Request, exc: RequestValidationError):
        return _error(400, "malformed request body")

    @app.exception_handler(ValidationError)
    async def _validation(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(AuthError)
    async def _auth(request: Request, exc: AuthError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.kind.value)
        return _error(401, "unauthorized")

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(QueueFullError)
    async def _queue_full(request: Request, exc: QueueFullError):
        logger.warning("Rejected push: %s", exc)
        return _error(409, str(exc))
