"""
Anchor Feed API

Application factory and process lifecycle.

┌─────────────────────────────────────────────────────────────────────────────┐
│   request ─► CORS ─► request id ─► router ─► handler ─► service ─► repos    │
│                                                │                            │
│                                                └─ submit() ─┐               │
│                                                             ▼               │
│   app.state.task_runner   BackgroundTaskRunner ─► SideEffectProcessor       │
│                           (own DB sessions)         │              │        │
│                                                     ▼              ▼        │
│                                                 PostgreSQL        SQS       │
└─────────────────────────────────────────────────────────────────────────────┘

Startup verifies the database before the task runner starts, so a bad
DATABASE_URL fails fast. Shutdown stops the runner first (queued jobs get
BACKGROUND_SHUTDOWN_TIMEOUT_SECONDS to finish) and only then disposes of
the engine the jobs write through.

Run:
====
    uvicorn src.api.main:app --reload
    python -m src.api.main                 # HOST / PORT from settings
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.middleware import setup_exception_handlers
from src.api.routes import register_routes
from src.config.settings import settings
from src.shared.adapters.sqs_adapter import SQSAdapter
from src.shared.core.logging import bind_log_context, get_logger, setup_logging
from src.shared.db import AsyncSessionLocal, close_db, init_db
from src.worker.processors.side_effect_processor import SideEffectProcessor
from src.worker.task_runner import BackgroundTaskRunner

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def build_task_runner() -> BackgroundTaskRunner:
    """Runner wired to the shared session factory and the notification queue."""
    return BackgroundTaskRunner(SideEffectProcessor(AsyncSessionLocal, SQSAdapter()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("API starting", version=settings.APP_VERSION, env=settings.APP_ENV)

    await init_db()
    runner = build_task_runner()
    await runner.start()
    app.state.task_runner = runner

    try:
        yield
    finally:
        logger.info("API stopping")
        await runner.stop()
        app.state.task_runner = None
        await close_db()


async def bind_request_id(request: Request, call_next):
    """Tag every log line of a request with one id and echo it back."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    with bind_log_context(request_id=request_id):
        response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Following feed, discovery and anchor follow tracking",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    # Registered first so CORS wraps it and sees every response
    app.middleware("http")(bind_request_id)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )

    setup_exception_handlers(app)
    register_routes(app)
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.api.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
