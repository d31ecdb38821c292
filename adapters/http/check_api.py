from __future__ import annotations

from typing import List

import structlog
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from application.context import AppContext
from domain.errors import StorageError, ValidationError

logger = structlog.get_logger(__name__)


def create_app(context: AppContext) -> FastAPI:
    app = FastAPI(
        title="Courier Risk Checker",
        description="Delivery, return and cancellation ratios per customer phone.",
        version="1.0.0",
    )

    @app.exception_handler(ValidationError)
    async def _validation_error(_, exc: ValidationError):
        return JSONResponse(status_code=400, content={"code": exc.code, "message": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage_error(_, exc: StorageError):
        logger.error("api.storage_error", error=str(exc))
        return JSONResponse(status_code=503, content={"code": "storage_error", "message": str(exc)})

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/vw/v1/check")
    def check(
        phone: str = Query("", description="Customer phone in any format."),
        providers: List[str] = Query([]),
    ) -> dict:
        return context.check().execute(phone, providers)

    return app
