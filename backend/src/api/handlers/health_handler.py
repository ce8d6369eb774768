"""
Health Endpoints

    /health   process is up; name and version
    /ready    database answers and the background runner is accepting jobs
    /live     bare liveness probe, touches nothing
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from src.api.dependencies import DbSession
from src.config.settings import settings
from src.shared.schemas.common import HealthResponse, ReadinessResponse


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="healthy", service=settings.APP_NAME.lower(), version=settings.APP_VERSION)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request, db: DbSession):
    """
    503 until the lifespan has started the task runner.

    A failing ``SELECT 1`` surfaces through the error handler as a 500.
    """
    await db.execute(text("SELECT 1"))

    runner = getattr(request.app.state, "task_runner", None)
    if runner is None or not runner.running:
        return JSONResponse(status_code=503, content={"status": "starting", "pendingJobs": 0})
    return ReadinessResponse(status="ready", pending_jobs=runner.pending)


@router.get("/live")
async def liveness_check():
    return {"status": "alive"}
