"""
iam_reconciler.api.app

FastAPI app factory for the IAM reconciler service.

Responsibilities:
- Build the FastAPI application and register routers.
- Create and dispose shared infrastructure (HTTP client, lock registry, reconciler).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from iam_reconciler import __version__
from iam_reconciler.api.routers.health import router as health_router
from iam_reconciler.api.routers.iam import router as iam_router
from iam_reconciler.observability.logging import configure_logging, get_logger
from iam_reconciler.reconcile.locks import ProjectLockRegistry
from iam_reconciler.reconcile.orchestrator import PolicyReconciler
from iam_reconciler.settings import Settings
from iam_reconciler.store.base import PolicyStore
from iam_reconciler.store.resource_manager import ResourceManagerPolicyStore, create_http_client
from iam_reconciler.template_loader import template_loader

log = get_logger(__name__)

StoreFactory = Callable[[str], PolicyStore]


def create_app(*, settings: Settings, store_factory: StoreFactory | None = None) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, template=str(settings.iam_template_path))
        http = create_http_client(settings)
        app.state.settings = settings
        app.state.http = http
        # One registry per process: every reconciliation of a project shares its lock.
        app.state.reconciler = PolicyReconciler(
            locks=ProjectLockRegistry(),
            load_template=template_loader(settings.iam_template_path),
            max_attempts=settings.max_attempts,
            retry_delay=settings.retry_delay_seconds,
        )
        app.state.store_factory = store_factory or (
            lambda token: ResourceManagerPolicyStore(http=http, token=token)
        )
        try:
            yield
        finally:
            await http.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="IAM Policy Reconciler",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(iam_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Business logic stays in the reconcile/policy layers; this file only wires them.
