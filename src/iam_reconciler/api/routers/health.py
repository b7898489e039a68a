"""
iam_reconciler.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) that checks the binding template loads.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from iam_reconciler.api.deps import settings_from_app
from iam_reconciler.errors import TemplateLoadError
from iam_reconciler.settings import Settings
from iam_reconciler.template_loader import load_binding_template

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(settings: Settings = Depends(settings_from_app)) -> dict[str, str]:
    # Without a readable template every reconciliation would fail immediately.
    try:
        await asyncio.to_thread(load_binding_template, settings.iam_template_path)
    except TemplateLoadError as e:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return {"status": "ready"}
