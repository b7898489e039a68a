"""
iam_reconciler.store.resource_manager

HTTP client boundary for the Cloud Resource Manager v1 IAM endpoints.

Responsibilities:
- Call `projects.getIamPolicy` / `projects.setIamPolicy` with the caller's bearer token.
- Translate wire payloads to and from `Policy`.
- Map transport failures and error responses onto `PolicyStoreError`.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from iam_reconciler.errors import PolicyStoreError, StalePolicyError
from iam_reconciler.policy.models import Policy
from iam_reconciler.settings import Settings


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.resource_manager_base_url,
        timeout=settings.http_timeout_seconds,
    )


class ResourceManagerPolicyStore:
    """
    One instance per request: the OAuth2 access token belongs to the caller.
    The underlying `httpx.AsyncClient` is shared and owned by the app.
    """

    def __init__(self, *, http: httpx.AsyncClient, token: str) -> None:
        self._http = http
        self._token = token

    def _authz(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    async def fetch(self, project: str) -> Policy:
        payload = await self._call(_project_url(project, "getIamPolicy"), {})
        return _decode_policy(payload)

    async def replace(self, project: str, policy: Policy) -> Policy:
        payload = await self._call(
            _project_url(project, "setIamPolicy"),
            {"policy": policy.to_api()},
        )
        return _decode_policy(payload)

    async def _call(self, url: str, body: dict[str, Any]) -> Any:
        try:
            r = await self._http.post(url, headers=self._authz(), json=body)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            # setIamPolicy answers 409 ABORTED when the etag no longer matches.
            if status == httpx.codes.CONFLICT:
                raise StalePolicyError(
                    f"{url}: policy changed concurrently", status_code=status
                ) from e
            raise PolicyStoreError(f"{url}: HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise PolicyStoreError(f"{url}: {e.__class__.__name__}: {e}") from e

        try:
            return r.json()
        except ValueError as e:
            raise PolicyStoreError(f"{url}: invalid JSON response", status_code=r.status_code) from e


def _project_url(project: str, method: str) -> str:
    # The id is one path segment: "/", ":", "?" and "#" must not change the target.
    return f"/v1/projects/{quote(project, safe='')}:{method}"


def _decode_policy(payload: Any) -> Policy:
    if not isinstance(payload, dict):
        raise PolicyStoreError("policy response is not a JSON object")
    try:
        return Policy.from_api(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise PolicyStoreError(f"malformed policy response: {e}") from e


# --- Module Notes -----------------------------------------------------------
# No client-side retries here: the orchestrator owns the retry loop so that a
# retried attempt always restarts from a fresh fetch.
