"""Liveness and readiness of the quotations service.

``/health`` answers whenever the process serves requests. ``/health/detailed``
and ``/ready`` read the quotations table itself, so a reachable database
without the migrated schema does not count as ready.
"""

import asyncio

from fastapi import APIRouter, HTTPException, Request
from starlette import status

from core.database import check_db_connection
from core.logger import get_logger
from core.ratelimit import HEALTH_LIMIT, limiter
from repositories.quotation_repository import QuotationRepository
from schemas import HealthResponse, StoreHealthResponse

logger = get_logger(__name__)

SERVICE_NAME = "quotations-api"
STORE_CHECK_TIMEOUT_SECONDS = 5

router = APIRouter(tags=["health"])


async def count_stored_quotations(request: Request) -> int:
    """Count quotations in a short-lived session of its own."""
    async with asyncio.timeout(STORE_CHECK_TIMEOUT_SECONDS):
        async with request.app.state.session_maker() as session:
            return await QuotationRepository(session).count()


async def _database_reachable(request: Request) -> bool:
    try:
        async with asyncio.timeout(STORE_CHECK_TIMEOUT_SECONDS):
            await check_db_connection(request.app.state.engine)
    except Exception:
        logger.warning("health.database.unreachable", exc_info=True)
        return False
    return True


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy", service=SERVICE_NAME)


@router.get("/health/detailed", response_model=StoreHealthResponse)
@limiter.limit(HEALTH_LIMIT)
async def health_detailed(request: Request) -> StoreHealthResponse:
    """Report startup, connectivity and quotations table state.

    Always 200. ``status`` is ``healthy`` only when every check passes and
    ``degraded`` when the database answers but the table does not.
    """
    database = await _database_reachable(request)
    quotation_count = None
    if database:
        try:
            quotation_count = await count_stored_quotations(request)
        except Exception:
            logger.warning("health.quotations_table.unavailable", exc_info=True)

    startup_complete = bool(getattr(request.app.state, "init_done", False))
    table_ok = quotation_count is not None
    if database and table_ok and startup_complete:
        overall = "healthy"
    elif database:
        overall = "degraded"
    else:
        overall = "unhealthy"

    return StoreHealthResponse(
        status=overall,
        service=SERVICE_NAME,
        startup_complete=startup_complete,
        database=database,
        quotations_table=table_ok,
        quotation_count=quotation_count,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={
        503: {
            "description": "Startup unfinished or quotation store unavailable",
            "content": {
                "application/json": {
                    "example": {"detail": "Quotation store unavailable"}
                }
            },
        }
    },
)
@limiter.limit(HEALTH_LIMIT)
async def ready(request: Request) -> HealthResponse:
    """200 once startup finished and the quotations table answers a count."""
    init_error = getattr(request.app.state, "init_error", None)
    if init_error:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Initialization failed: {init_error}",
        )
    if not getattr(request.app.state, "init_done", False):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Starting"
        )

    try:
        await count_stored_quotations(request)
    except Exception as e:
        logger.warning("ready.store_unavailable", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quotation store unavailable",
        ) from e

    return HealthResponse(status="ready", service=SERVICE_NAME)
