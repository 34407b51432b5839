"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from workorders.api.router import api_router
from workorders.db.engine import engine, create_all
from workorders.errors import WorkOrderError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_all()
    yield
    await engine.dispose()


app = FastAPI(
    title="Work Orders",
    description="Work order lifecycle engine: intake, numbering, labor, materials, sign-off and completion.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(WorkOrderError)
async def work_order_error_handler(request: Request, exc: WorkOrderError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code},
    )


app.include_router(api_router)


@app.get("/api/health")
async def health():
    return {"ok": True}
