"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import app.models  # noqa: F401
from app.config import get_settings
from app.database import create_schema, engine
from app.errors import DeviceGraphError, MalformedEntityError
from app.routers.backup import router as backup_router
from app.routers.groups import router as groups_router
from app.routers.identity import router as identity_router
from app.routers.memberships import router as memberships_router
from app.routers.profiles import router as profiles_router
from app.routers.things import router as things_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize database schema on startup.

    Yields
    ------
    None
        Runs the application lifespan.
    """
    await create_schema(engine)
    logger.info("Application startup")
    yield
    await engine.dispose()
    logger.info("Application shutdown")


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.exception_handler(DeviceGraphError)
async def device_graph_error_handler(_: Request, exc: DeviceGraphError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _: Request, exc: RequestValidationError
) -> JSONResponse:
    error = MalformedEntityError()
    logger.debug("Rejected malformed request: %s", exc.errors())
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.message, "code": error.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    detail = str(exc) if settings.debug else "internal server error"
    return JSONResponse(
        status_code=500, content={"detail": detail, "code": "internal_error"}
    )


app.include_router(identity_router)
app.include_router(groups_router)
app.include_router(profiles_router)
app.include_router(things_router)
app.include_router(memberships_router)
app.include_router(backup_router)
