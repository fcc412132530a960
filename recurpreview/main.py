from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from recurpreview import __version__
from recurpreview.config import get_settings
from recurpreview.db import schema_ready
from recurpreview.logging_config import configure_logging, reset_request_id, set_request_id
from recurpreview.routes.api import api_router

configure_logging()
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "Starting RecurPreview application default_preview_count=%s max_preview_count=%s",
        settings.default_preview_count,
        settings.max_preview_count,
    )
    if not schema_ready():
        logger.warning("Rule draft tables missing; run `alembic upgrade head` before using /api/rule-drafts")
    yield
    logger.info("Shutting down RecurPreview application")


def create_app() -> FastAPI:
    app = FastAPI(title="RecurPreview", version=__version__, lifespan=lifespan)

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
