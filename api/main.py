"""FastAPI application for the Quotations API."""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import fastapi
from fastapi import Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    init_db,
)
from core.logger import configure_logging, get_logger
from core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from core.ratelimit import limiter, rate_limit_exceeded_handler
from routes import health_router, quotations_router

configure_logging()
logger = get_logger(__name__)

METHOD_NOT_ALLOWED_MESSAGE = (
    "This request method is not allowed on this endpoint. Please send a {} request"
)


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Keep loc/msg/type only; ctx may hold exception objects."""
    return [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        exc_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred. Please try again."},
    )


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Field validation errors are client errors: 400 with the error list."""
    if not isinstance(exc, RequestValidationError):
        return JSONResponse(status_code=500, content={"detail": "Unexpected error"})

    logger.warning(
        "request.validation_error",
        path=request.url.path,
        method=request.method,
        error_count=len(exc.errors()),
    )
    return JSONResponse(
        status_code=400,
        content={"detail": _jsonable_errors(exc)},
    )


async def starlette_http_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Render 405 with the method the endpoint accepts; defer the rest."""
    if not isinstance(exc, StarletteHTTPException):
        return JSONResponse(status_code=500, content={"detail": "Unexpected error"})

    if exc.status_code == 405:
        allowed = (exc.headers or {}).get("Allow", "")
        methods = [m.strip() for m in allowed.split(",") if m.strip()]
        # HEAD is implied by GET; name the method a client would actually send
        preferred = [m for m in methods if m != "HEAD"] or methods
        supported = preferred[0] if preferred else "different"
        logger.info(
            "request.method_not_allowed",
            path=request.url.path,
            method=request.method,
            allowed=allowed,
        )
        return JSONResponse(
            status_code=405,
            content={"detail": METHOD_NOT_ALLOWED_MESSAGE.format(supported)},
            headers=exc.headers,
        )
    return await http_exception_handler(request, exc)


async def _run_alembic_migrations() -> None:
    """Run Alembic migrations in a subprocess.

    Alembic's env.py uses a synchronous driver; a subprocess keeps it off the
    running event loop.
    """
    import subprocess
    import sys

    cmd = [
        sys.executable,
        "-c",
        (
            "from alembic import command; "
            "from alembic.config import Config; "
            "command.upgrade(Config('alembic.ini'), 'head')"
        ),
    ]
    cwd = Path(__file__).parent

    result = await asyncio.to_thread(
        lambda: subprocess.run(
            cmd, cwd=cwd, capture_output=True, text=True, timeout=120
        )
    )

    if result.returncode != 0:
        stderr = result.stderr.strip()
        logger.error("migrations.failed", stderr=stderr)
        raise RuntimeError(f"Alembic migration failed:\n{stderr}")

    logger.info("migrations.complete")


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Create DB engine at startup, dispose on shutdown."""
    settings = get_settings()
    app.state.engine = create_engine()
    app.state.session_maker = create_session_maker(app.state.engine)

    app.state.init_done = False
    app.state.init_error = None

    try:
        async with asyncio.timeout(60):
            await init_db(app.state.engine)

        if settings.run_migrations_on_startup:
            async with asyncio.timeout(120):
                await _run_alembic_migrations()

        app.state.init_done = True
        logger.info("init.complete")
    except TimeoutError:
        logger.error(
            "init.timeout",
            hint="Startup hung - check DB connectivity and migration state",
        )
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        app.state.init_error = str(e)
        logger.error("init.failed", error=str(e), exc_info=True)
        raise

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="Quotations API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(SecurityHeadersMiddleware)
# Outermost so every log line of the request carries request_id.
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(quotations_router)
