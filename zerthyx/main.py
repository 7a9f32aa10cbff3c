import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as SQLAlchemyTimeoutError

import zerthyx.models  # noqa: F401  registers every table on Base.metadata
from zerthyx.api.v1.routes import router as api_router
from zerthyx.core.config import get_settings, parse_cors_origins
from zerthyx.core.database import Base, SessionLocal, engine
from zerthyx.core.errors import PersistenceError
from zerthyx.core.logging import configure_logging
from zerthyx.middlewares.rate_limit import limiter

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
_started_at = time.time()


def _uptime() -> int:
    return int(max(0, time.time() - _started_at))


def _store_unavailable(message: str) -> JSONResponse:
    error = PersistenceError(message)
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.exception_handler(SQLAlchemyTimeoutError)
async def pool_timeout_handler(request: Request, exc: SQLAlchemyTimeoutError):
    logger.warning("Connection pool exhausted on %s %s: %s", request.method, request.url.path, exc)
    return _store_unavailable("The service is busy. Please retry in a moment.")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return _store_unavailable("The ledger store is unavailable.")


allow_origins = parse_cors_origins(settings.cors_origins or "")
logger.info("CORS allow_origins=%s", allow_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.on_event("startup")
def create_tables_for_local_runs():
    # Production schemas come from alembic; this is for throwaway databases.
    if not settings.auto_create_tables:
        return
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        logger.warning("Skipping table creation, database unavailable: %s", exc)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/healthz")
def healthz():
    return {"status": "ok", "service": settings.app_name, "uptime_seconds": _uptime()}


@app.get("/readyz")
def readyz():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Readiness check failed: %s", exc)
        return JSONResponse(status_code=503, content={"status": "not_ready", "detail": "database_unavailable"})
    finally:
        db.close()
    return {"status": "ready", "uptime_seconds": _uptime()}
