from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from officehub.core.errors import OfficeHubError
from officehub.core.logging import RequestLoggingMiddleware, configure_logging
from officehub.core.settings import settings
from officehub.db.base import Base
from officehub.db.session import engine, get_db, session_scope
from officehub.router_registry import include_all_routers
from officehub.seed import bootstrap

configure_logging(level=settings.log_level)
logger = logging.getLogger("officehub")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        Base.metadata.create_all(bind=engine)
    if settings.seed_on_startup:
        with session_scope() as db:
            bootstrap(db)
    yield


app = FastAPI(title=settings.project_name, version=settings.project_version, lifespan=lifespan)

# Always allow localhost during development.
allow_origin_regex = None
if not settings.is_production:
    allow_origin_regex = r"^http://(localhost|127\.0\.0\.1)(:\d+)?$"
else:
    if any(origin.strip() == "*" for origin in settings.allow_origins):
        raise RuntimeError("ALLOW_ORIGINS cannot include '*' in production")
    if settings.session_secret.startswith("change_me"):
        raise RuntimeError("SESSION_SECRET must be set in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-Id", "Accept"],
)
app.add_middleware(RequestLoggingMiddleware)

include_all_routers(app)


@app.exception_handler(OfficeHubError)
async def officehub_error_handler(request: Request, exc: OfficeHubError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    payload = {"message": "Invalid request"}
    if errors:
        first = errors[0]
        message = str(first.get("msg", payload["message"]))
        payload["message"] = message.removeprefix("Value error, ")
        loc = [part for part in first.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            payload["field"] = str(loc[-1])
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=jsonable_encoder(payload))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled error",
        exc_info=exc,
        extra={"request_id": getattr(request.state, "request_id", None), "path": request.url.path},
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"message": "Internal Server Error"})


@app.get("/healthz", tags=["health"])
def healthcheck(db: Session = Depends(get_db)) -> dict[str, str]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("healthcheck failed", exc_info=True)
        raise HTTPException(status_code=503, detail="Database unavailable") from exc
    return {"status": "ok", "database": "ok"}
