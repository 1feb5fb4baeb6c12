from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from hypercorn.asyncio import serve
from hypercorn.config import Config
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...api import ROUTERS
from ..context import ServiceContext

logger = logging.getLogger(__name__)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    content = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(content, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Rejected %s %s: invalid request data", request.method, request.url.path)
    return JSONResponse(
        {"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
        status_code=400,
    )


def create_app(context: Optional[ServiceContext] = None) -> FastAPI:
    """Build the API around ``context``; a fresh context is created from settings when omitted."""

    context = context or ServiceContext()

    app = FastAPI(title="Heap Scheduler API", version="0.1.0")
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(context.settings.server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    for router in ROUTERS:
        app.include_router(router)

    logger.debug("API ready. Data file: %s", context.store.path)
    return app


async def _serve(app: FastAPI, config: Config) -> None:
    await serve(app, config)


def run_local_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    *,
    context: Optional[ServiceContext] = None,
) -> None:
    context = context or ServiceContext()
    server = context.settings.server
    config = Config()
    config.bind = [f"{host or server.host}:{port or server.port}"]
    logger.info("Serving Heap Scheduler API on %s", config.bind[0])
    asyncio.run(_serve(create_app(context), config))
