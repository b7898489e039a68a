"""
iam_reconciler.api.routers.iam

IAM reconciliation endpoint.

Responsibilities:
- Accept an apply request (project, cluster, email, token, action).
- Run the reconciler against a store bound to the caller's token.
- Map reconciler errors onto HTTP status codes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR, HTTP_502_BAD_GATEWAY

from iam_reconciler.api.deps import reconciler_from_app, store_factory_from_app
from iam_reconciler.errors import PolicyStoreError, TemplateLoadError
from iam_reconciler.policy.models import PROJECT_ID_PATTERN, Action, ReconciliationRequest
from iam_reconciler.reconcile.orchestrator import PolicyReconciler
from iam_reconciler.store.base import PolicyStore

router = APIRouter(prefix="/v1/iam", tags=["iam"])


class ApplyIamRequest(BaseModel):
    project: str = Field(pattern=PROJECT_ID_PATTERN)
    cluster: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=1, max_length=256)
    token: str = Field(min_length=1, repr=False)
    action: Action


class ApplyIamResponse(BaseModel):
    status: str = "applied"
    project: str
    action: Action
    bindings: int


@router.post("/apply", response_model=ApplyIamResponse)
async def apply_iam_policy(
    body: ApplyIamRequest,
    reconciler: PolicyReconciler = Depends(reconciler_from_app),
    store_factory: Callable[[str], PolicyStore] = Depends(store_factory_from_app),
) -> ApplyIamResponse:
    request = ReconciliationRequest(
        project=body.project,
        cluster=body.cluster,
        email=body.email,
        action=body.action,
        token=body.token,
    )
    try:
        final = await reconciler.reconcile(request, store_factory(body.token))
    except TemplateLoadError as e:
        raise HTTPException(status_code=HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e
    except PolicyStoreError as e:
        detail: dict[str, Any] = {"error": str(e), "upstream_status": e.status_code}
        raise HTTPException(status_code=HTTP_502_BAD_GATEWAY, detail=detail) from e

    return ApplyIamResponse(project=body.project, action=body.action, bindings=len(final.bindings))


# --- Module Notes -----------------------------------------------------------
# The caller only learns success or the final store error, never the attempt count.
