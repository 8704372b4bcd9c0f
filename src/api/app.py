"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from src.api.error import ClientError, client_error_handler, validation_error_handler
from src.api.routes import subscriptions, subscription_orders
from src.depends import AsyncSessionLocal
from src.worker.scheduler import SubscriptionScheduler
from src.worker.subscription_orders import SubscriptionOrderWorker

logger = logging.getLogger(__name__)


def _init_sentry(config):
    import sentry_sdk

    sentry_sdk.init(
        dsn=config.DSN_SENTRY,
        environment=config.SENTRY_ENVIRONMENT,
    )
    logger.info(f"Sentry enabled for environment {config.SENTRY_ENVIRONMENT}")


def create_app(config) -> FastAPI:
    """
    Build the API application

    The subscription order worker and its scheduler are attached to
    app.state; the scheduler only runs when SUBSCRIPTION_SCHEDULER_ENABLED.
    """
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if config.ENABLE_SENTRY and config.DSN_SENTRY:
        _init_sentry(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = app.state.subscription_scheduler
        if config.SUBSCRIPTION_SCHEDULER_ENABLED:
            scheduler.start()
        yield
        scheduler.stop()
        await scheduler.wait_stopped()
        await app.state.subscription_worker.shutdown()

    app = FastAPI(
        title="Dairy Subscription Service",
        description="Recurring delivery subscriptions and order generation",
        openapi_url=f"{config.API_PREFIX}/openapi.json",
        docs_url=f"{config.API_PREFIX}/docs",
        lifespan=lifespan,
    )

    worker = SubscriptionOrderWorker(session_factory=AsyncSessionLocal)
    app.state.subscription_worker = worker
    app.state.subscription_scheduler = SubscriptionScheduler(
        worker, interval_seconds=config.SUBSCRIPTION_SCHEDULER_INTERVAL_SECONDS
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start_time = time.time()
            response = await call_next(request)
            duration_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"({duration_ms}ms)",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )
            return response

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(subscriptions.router)
    app.include_router(subscription_orders.router)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app
