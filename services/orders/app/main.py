"""Marketplace orders service entrypoint."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from services.orders.app.db.init_db import init_db
from services.orders.app.routers.admin import router as admin_router
from services.orders.app.routers.order import router as order_router
from services.orders.app.services.errors import OrderServiceError
from services.orders.app.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

app = FastAPI(title="Marketplace Orders API")

app.include_router(order_router)
app.include_router(admin_router)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    init_db()


@app.exception_handler(OrderServiceError)
def _order_service_error(request: Request, exc: OrderServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": exc.kind, "detail": exc.message},
    )


@app.exception_handler(Exception)
def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    # Never echo the exception: it may carry database detail.
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content={"kind": "internal", "detail": "Internal Server Error"},
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
