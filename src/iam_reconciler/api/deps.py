"""
iam_reconciler.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Encapsulate app.state access patterns (settings, reconciler, store factory).
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request

from iam_reconciler.reconcile.orchestrator import PolicyReconciler
from iam_reconciler.settings import Settings
from iam_reconciler.store.base import PolicyStore


def settings_from_app(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def reconciler_from_app(request: Request) -> PolicyReconciler:
    # Created once in the lifespan of `iam_reconciler.api.app.create_app`.
    return request.app.state.reconciler  # type: ignore[attr-defined]


def store_factory_from_app(request: Request) -> Callable[[str], PolicyStore]:
    return request.app.state.store_factory  # type: ignore[attr-defined]
