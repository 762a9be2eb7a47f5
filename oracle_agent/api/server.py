"""Starlette application exposing run control and oracle callback endpoints."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from oracle_agent.agent.runtime.controller import RunController
from oracle_agent.agent.runtime.models import MAX_ITERATIONS_LIMIT, ModelResponse
from oracle_agent.api.auth import AdminTokenAuthProvider, AuthProvider, bearer_token
from oracle_agent.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    OracleDispatchError,
)
from oracle_agent.oracle.gateway import OracleIdentity

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER = "anonymous"


class StartRunRequest(BaseModel):
    """Validated payload for POST /runs."""

    model_config = ConfigDict(extra="forbid")

    query: str = Field(min_length=1)
    max_iterations: int | None = Field(default=None, ge=0, le=MAX_ITERATIONS_LIMIT)
    system_prompt: str | None = None


class ModelResponseCallback(BaseModel):
    """Payload the oracle posts when a model call completes."""

    response: ModelResponse = Field(default_factory=ModelResponse)
    error_message: str = ""


class ToolResponseCallback(BaseModel):
    """Payload the oracle posts when a tool call completes."""

    response: str = ""
    error_message: str = ""


class OracleIdentityUpdate(BaseModel):
    """Payload for PUT /admin/oracle-identity."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    token: str = Field(min_length=1)

    @field_validator("name", "token", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value


def _error(status_code: int, error: str, reason: str) -> JSONResponse:
    return JSONResponse({"error": error, "reason": reason}, status_code=status_code)


def _map_exception(exc: Exception) -> JSONResponse:
    if isinstance(exc, AuthorizationError):
        return _error(403, "forbidden", str(exc))
    if isinstance(exc, NotFoundError):
        return _error(404, "not_found", str(exc))
    if isinstance(exc, InvalidStateError):
        return _error(409, "invalid_state", str(exc))
    if isinstance(exc, OracleDispatchError):
        body: dict[str, object] = {"error": "oracle_unavailable", "reason": str(exc)}
        if exc.run_id is not None:
            body["run_id"] = exc.run_id
        return JSONResponse(body, status_code=502)
    if isinstance(exc, ValueError):
        return _error(400, "bad_request", str(exc))
    raise exc


async def _json_body(request: Request) -> object:
    try:
        return await request.json()
    except ValueError as exc:
        raise ValueError(f"invalid JSON body: {exc}") from exc


def create_app(
    controller: RunController,
    *,
    client_auth: AuthProvider | None = None,
    admin_auth: AuthProvider | None = None,
    default_system_prompt: str = "You are a helpful AI agent.",
    default_max_iterations: int = 10,
) -> Starlette:
    """Build the HTTP app around *controller*.

    Public endpoints use *client_auth* when given; the authenticated identity
    becomes the run owner. Oracle callbacks present the oracle token as a
    bearer credential. Identity rotation requires *admin_auth*, by default the
    admin token configured on the controller's gateway.
    """
    admin_auth = admin_auth if admin_auth is not None else AdminTokenAuthProvider(controller.gateway)

    async def _owner(request: Request) -> str | JSONResponse:
        if client_auth is None:
            return request.headers.get("X-Owner", "").strip() or ANONYMOUS_OWNER
        result = await client_auth.authenticate(request)
        if not result.ok:
            return _error(result.status_code, "unauthorized", result.reason or "auth_failed")
        return result.identity or ANONYMOUS_OWNER

    async def start_run(request: Request) -> JSONResponse:
        owner = await _owner(request)
        if isinstance(owner, JSONResponse):
            return owner
        try:
            payload = StartRunRequest.model_validate(await _json_body(request))
        except (ValidationError, ValueError) as exc:
            return _error(400, "bad_request", str(exc))
        max_iterations = payload.max_iterations if payload.max_iterations is not None else default_max_iterations
        system_prompt = payload.system_prompt if payload.system_prompt is not None else default_system_prompt
        try:
            run_id = await controller.start(system_prompt, payload.query, max_iterations, owner=owner)
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse({"run_id": run_id}, status_code=201)

    async def get_run(request: Request) -> JSONResponse:
        try:
            run = controller.get_run(request.path_params["run_id"])
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse(run.snapshot())

    async def get_messages(request: Request) -> JSONResponse:
        run_id = request.path_params["run_id"]
        try:
            history = controller.get_history(run_id)
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse({"run_id": run_id, "messages": [message.to_dict() for message in history]})

    async def get_finished(request: Request) -> JSONResponse:
        run_id = request.path_params["run_id"]
        try:
            finished = controller.is_finished(run_id)
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse({"run_id": run_id, "is_finished": finished})

    async def model_response(request: Request) -> JSONResponse:
        credential = bearer_token(request)
        if credential is None:
            return _error(401, "unauthorized", "missing_bearer")
        try:
            payload = ModelResponseCallback.model_validate(await _json_body(request))
            await controller.on_model_response(
                request.path_params["run_id"],
                payload.response,
                payload.error_message,
                credential=credential,
            )
        except ValidationError as exc:
            return _error(400, "bad_request", str(exc))
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse({"status": "accepted"})

    async def tool_response(request: Request) -> JSONResponse:
        credential = bearer_token(request)
        if credential is None:
            return _error(401, "unauthorized", "missing_bearer")
        try:
            payload = ToolResponseCallback.model_validate(await _json_body(request))
            await controller.on_tool_response(
                request.path_params["run_id"],
                payload.response,
                payload.error_message,
                credential=credential,
            )
        except ValidationError as exc:
            return _error(400, "bad_request", str(exc))
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse({"status": "accepted"})

    async def update_oracle_identity(request: Request) -> JSONResponse:
        result = await admin_auth.authenticate(request)
        if not result.ok or result.identity is None:
            return _error(result.status_code, "unauthorized", result.reason or "auth_failed")
        caller = result.identity
        try:
            payload = OracleIdentityUpdate.model_validate(await _json_body(request))
            controller.set_oracle_identity(OracleIdentity(name=payload.name, token=payload.token), caller=caller)
        except ValidationError as exc:
            return _error(400, "bad_request", str(exc))
        except Exception as exc:
            return _map_exception(exc)
        return JSONResponse({"status": "updated", "oracle": payload.name})

    routes = [
        Route("/runs", endpoint=start_run, methods=["POST"]),
        Route("/runs/{run_id:int}", endpoint=get_run, methods=["GET"]),
        Route("/runs/{run_id:int}/messages", endpoint=get_messages, methods=["GET"]),
        Route("/runs/{run_id:int}/finished", endpoint=get_finished, methods=["GET"]),
        Route("/runs/{run_id:int}/model-response", endpoint=model_response, methods=["POST"]),
        Route("/runs/{run_id:int}/tool-response", endpoint=tool_response, methods=["POST"]),
        Route("/admin/oracle-identity", endpoint=update_oracle_identity, methods=["PUT"]),
    ]
    return Starlette(routes=routes)
