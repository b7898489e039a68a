"""
tests.conftest

Shared fixtures: an in-memory policy store and a recording sleep.
"""

from __future__ import annotations

import asyncio

import pytest

from iam_reconciler.errors import StalePolicyError
from iam_reconciler.policy.models import (
    Action,
    BindingTemplate,
    Policy,
    ReconciliationRequest,
    TemplateBinding,
)


class FakePolicyStore:
    """
    In-memory store with etag checking.

    `fetch_errors` / `replace_errors` are consumed one per call; a `None` entry
    lets that call succeed.
    """

    def __init__(self, policy: Policy | None = None) -> None:
        self._generation = 0
        self.policy = (policy or Policy()).with_etag("etag-0")
        self.fetch_errors: list[Exception | None] = []
        self.replace_errors: list[Exception | None] = []
        self.fetch_calls = 0
        self.pushed: list[Policy] = []
        self.events: list[tuple[str, str]] = []

    async def fetch(self, project: str) -> Policy:
        self.fetch_calls += 1
        self.events.append(("fetch", project))
        await asyncio.sleep(0)
        if self.fetch_errors:
            err = self.fetch_errors.pop(0)
            if err is not None:
                raise err
        return self.policy

    async def replace(self, project: str, policy: Policy) -> Policy:
        self.events.append(("replace", project))
        await asyncio.sleep(0)
        if self.replace_errors:
            err = self.replace_errors.pop(0)
            if err is not None:
                raise err
        if policy.etag != self.policy.etag:
            raise StalePolicyError("etag mismatch", status_code=409)
        self._generation += 1
        self.pushed.append(policy)
        self.policy = policy.with_etag(f"etag-{self._generation}")
        return self.policy


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def request_add() -> ReconciliationRequest:
    return ReconciliationRequest(
        project="p1", cluster="c1", email="alice@example.com", action=Action.add, token="t"
    )


@pytest.fixture
def admin_editor_template() -> BindingTemplate:
    return BindingTemplate(
        bindings=(
            TemplateBinding(
                members=("set-kubeflow-admin-service-account",),
                roles=("roles/editor",),
            ),
        )
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def make_store():
    return FakePolicyStore
