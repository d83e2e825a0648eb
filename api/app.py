"""HTTP surface for the weekend sale workflow.

Routes
------
GET    /health                      liveness probe
GET    /listings                    listings visible to the demo actor
POST   /workflows                   start a workflow and prepare a sale
GET    /workflows/{id}              pollable snapshot
POST   /workflows/{id}/execute      approve and execute the plan
DELETE /workflows/{id}              stop and discard a workflow
"""

from __future__ import annotations

import contextlib
import json
from typing import AsyncIterator, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from agents.errors import InvalidSignalError, InvalidTransitionError, WorkflowNotFoundError
from agents.server import WorkflowRegistry
from agents.tools import build_snapshot
from clients.llm_client import TextGenerationClient
from config.settings import Settings, settings as default_settings
from models.listing import Actor
from storage.listing_store import ListingStore


class PrepareRequest(BaseModel):
    discount_percent: Optional[int] = Field(default=None, ge=0, le=100)
    use_llm: Optional[bool] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _not_found(request: Request, exc: Exception) -> JSONResponse:
    return _error(404, str(exc))


async def _conflict(request: Request, exc: Exception) -> JSONResponse:
    return _error(409, str(exc))


async def _unprocessable(request: Request, exc: Exception) -> JSONResponse:
    return _error(422, str(exc))


def create_app(
    store: ListingStore,
    actor: Actor,
    registry: Optional[WorkflowRegistry] = None,
    config: Optional[Settings] = None,
    llm: Optional[TextGenerationClient] = None,
) -> Starlette:
    """Build the Starlette app around a store and the actor requests act as.

    ``llm`` is handed to every workflow's support specialist and closed
    when the app shuts down.
    """
    config = config or default_settings
    registry = registry or WorkflowRegistry(store, llm=llm, config=config)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    async def list_listings(request: Request) -> JSONResponse:
        listings = store.list(actor)
        return JSONResponse([item.model_dump(mode="json") for item in listings])

    async def create_workflow(request: Request) -> JSONResponse:
        raw = await request.body()
        try:
            body = PrepareRequest(**(json.loads(raw) if raw else {}))
        except (json.JSONDecodeError, TypeError, ValidationError) as exc:
            return _error(422, f"invalid request body: {exc}")

        discount = (
            config.default_discount_percent
            if body.discount_percent is None
            else body.discount_percent
        )
        use_llm = config.use_llm if body.use_llm is None else body.use_llm

        server = await registry.create()
        state = await server.prepare(discount, use_llm, actor)
        logger.info(f"API: workflow {server.id} preparing {discount}% sale")
        return JSONResponse(
            {"workflow_id": server.id, "status": state.status.value}, status_code=201
        )

    async def get_workflow(request: Request) -> JSONResponse:
        server = registry.get(request.path_params["workflow_id"])
        return JSONResponse(build_snapshot(server.id, server.state))

    async def execute_workflow(request: Request) -> JSONResponse:
        server = registry.get(request.path_params["workflow_id"])
        state = await server.execute(actor)
        return JSONResponse(
            {"accepted": True, "status": state.status.value}, status_code=202
        )

    async def delete_workflow(request: Request) -> Response:
        await registry.remove(request.path_params["workflow_id"])
        return Response(status_code=204)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        yield
        await registry.close()
        if llm is not None:
            await llm.aclose()

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/listings", list_listings, methods=["GET"]),
            Route("/workflows", create_workflow, methods=["POST"]),
            Route("/workflows/{workflow_id}", get_workflow, methods=["GET"]),
            Route("/workflows/{workflow_id}", delete_workflow, methods=["DELETE"]),
            Route("/workflows/{workflow_id}/execute", execute_workflow, methods=["POST"]),
        ],
        exception_handlers={
            WorkflowNotFoundError: _not_found,
            InvalidTransitionError: _conflict,
            InvalidSignalError: _unprocessable,
        },
        lifespan=lifespan,
    )
    app.state.registry = registry
    return app
