"""
tests.test_resource_manager_store

Wire behavior of the Cloud Resource Manager policy store (httpx MockTransport).
"""

from __future__ import annotations

import json

import httpx
import pytest

from iam_reconciler.errors import PolicyStoreError, StalePolicyError
from iam_reconciler.policy.models import Policy
from iam_reconciler.store.resource_manager import ResourceManagerPolicyStore

BASE_URL = "https://cloudresourcemanager.googleapis.com"


def _store(handler) -> ResourceManagerPolicyStore:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return ResourceManagerPolicyStore(http=http, token="ya29.token")


@pytest.mark.asyncio
async def test_fetch_posts_get_iam_policy_with_bearer_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "version": 1,
                "etag": "BwAA",
                "bindings": [{"role": "roles/viewer", "members": ["user:a@example.com"]}],
            },
        )

    policy = await _store(handler).fetch("p1")

    assert policy.etag == "BwAA"
    assert policy.role_map() == {"roles/viewer": {"user:a@example.com"}}
    (req,) = seen
    assert req.method == "POST"
    assert req.url.path == "/v1/projects/p1:getIamPolicy"
    assert req.headers["authorization"] == "Bearer ya29.token"


@pytest.mark.asyncio
async def test_replace_sends_policy_with_etag() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        bodies.append(body)
        return httpx.Response(200, json={**body["policy"], "etag": "BwAB"})

    policy = Policy.from_role_map({"roles/editor": ["user:a@example.com"], "roles/empty": []}, etag="BwAA")
    stored = await _store(handler).replace("p1", policy)

    assert bodies == [
        {
            "policy": {
                "bindings": [
                    {"role": "roles/editor", "members": ["user:a@example.com"]},
                    {"role": "roles/empty", "members": []},
                ],
                "etag": "BwAA",
            }
        }
    ]
    assert stored.etag == "BwAB"


@pytest.mark.asyncio
async def test_conflict_maps_to_stale_policy_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"error": {"status": "ABORTED"}})

    with pytest.raises(StalePolicyError) as exc:
        await _store(handler).replace("p1", Policy())
    assert exc.value.status_code == 409


@pytest.mark.asyncio
async def test_error_status_maps_to_policy_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"status": "PERMISSION_DENIED"}})

    with pytest.raises(PolicyStoreError) as exc:
        await _store(handler).fetch("p1")
    assert exc.value.status_code == 403
    assert not isinstance(exc.value, StalePolicyError)


@pytest.mark.asyncio
async def test_transport_failure_maps_to_policy_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(PolicyStoreError) as exc:
        await _store(handler).fetch("p1")
    assert exc.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_body_maps_to_policy_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(PolicyStoreError):
        await _store(handler).fetch("p1")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("project", "raw_path"),
    [
        ("p2", b"/v1/projects/p2:getIamPolicy"),
        ("p1/../p2", b"/v1/projects/p1%2F..%2Fp2:getIamPolicy"),
        ("p2:setIamPolicy?x=", b"/v1/projects/p2%3AsetIamPolicy%3Fx%3D:getIamPolicy"),
    ],
)
async def test_project_id_is_encoded_as_one_path_segment(project: str, raw_path: bytes) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"etag": "BwAA", "bindings": []})

    await _store(handler).fetch(project)

    (req,) = seen
    assert req.url.raw_path == raw_path
    assert req.url.query == b""
