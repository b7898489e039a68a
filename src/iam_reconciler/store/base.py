"""
iam_reconciler.store.base

Interface of the remote policy store used by the orchestrator.
"""

from __future__ import annotations

from typing import Protocol

from iam_reconciler.policy.models import Policy


class PolicyStore(Protocol):
    """
    Remote, non-transactional holder of a project's IAM policy.

    Both calls raise `PolicyStoreError` on failure. `replace` sends the policy's
    etag; when it is stale the call raises `StalePolicyError` instead of
    overwriting. It returns the stored policy with its new etag.
    """

    async def fetch(self, project: str) -> Policy: ...

    async def replace(self, project: str, policy: Policy) -> Policy: ...
