from __future__ import annotations

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from voucher_admin.db import get_db, ping
from voucher_admin.logging import configure_logging
from voucher_admin.routes import vouchers
from voucher_admin.settings import settings

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="Storefront Voucher Admin API", version="0.1.0")

# Error envelope
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        if exc.detail.get("ok") is False:
            return JSONResponse(status_code=exc.status_code, content=exc.detail)
        if "code" in exc.detail and "message" in exc.detail:
            return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": {"code": "HTTP_ERROR", "message": str(exc.detail)}},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={
            "ok": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Validation failed.",
                "details": jsonable_encoder(exc.errors()),
            },
        },
    )

# CORS: allow the dashboard frontend in dev; lock down in prod
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vouchers.router, prefix="/api/vouchers", tags=["vouchers"])

@app.get("/healthz")
def healthz() -> dict:
    return {"ok": True}

@app.get("/readyz")
def readyz(db: Session = Depends(get_db)) -> JSONResponse:
    try:
        ping(db)
    except SQLAlchemyError as exc:
        logger.error("readiness_check_failed", error=str(exc))
        return JSONResponse(status_code=503, content={"ready": False})
    return JSONResponse(content={"ready": True})
