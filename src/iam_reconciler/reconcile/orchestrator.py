"""
iam_reconciler.reconcile.orchestrator

Reconciliation orchestrator: the only component that talks to the policy store.

Responsibilities:
- Load the binding template before touching any lock or remote state.
- Serialize reconciliations per project through the lock registry.
- Run the bounded fetch -> scrub-push -> merge-push loop with a constant retry delay.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from iam_reconciler.errors import PolicyStoreError, TemplateLoadError
from iam_reconciler.observability.logging import get_logger
from iam_reconciler.policy.merge import merge_template
from iam_reconciler.policy.models import BindingTemplate, Policy, ReconciliationRequest
from iam_reconciler.policy.scrub import scrub_managed_accounts
from iam_reconciler.reconcile.locks import ProjectLockRegistry
from iam_reconciler.store.base import PolicyStore

log = get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_RETRY_DELAY_SECONDS = 3.0


class PolicyReconciler:
    def __init__(
        self,
        *,
        locks: ProjectLockRegistry,
        load_template: Callable[[], BindingTemplate],
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._locks = locks
        self._load_template = load_template
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep

    async def reconcile(self, request: ReconciliationRequest, store: PolicyStore) -> Policy:
        """
        Bring the project's policy in line with the template for `request`.

        Returns the policy accepted by the final push. Raises `TemplateLoadError`
        without retrying, or the last `PolicyStoreError` once every attempt failed.
        """

        with structlog.contextvars.bound_contextvars(
            project=request.project,
            cluster=request.cluster,
            action=request.action.value,
        ):
            try:
                # Disk read happens off the event loop.
                template = await asyncio.to_thread(self._load_template)
            except TemplateLoadError as e:
                log.error("iam_template_load_failed", error=str(e))
                raise

            # Held for the whole retry loop, not per attempt.
            async with self._locks.lock_for(request.project):
                return await self._run_attempts(request, template, store)

    async def _run_attempts(
        self,
        request: ReconciliationRequest,
        template: BindingTemplate,
        store: PolicyStore,
    ) -> Policy:
        attempt = 0
        while True:
            attempt += 1
            try:
                final = await self._attempt(request, template, store, attempt=attempt)
            except PolicyStoreError as e:
                if attempt >= self._max_attempts:
                    log.error("iam_policy_reconcile_exhausted", attempts=attempt, error=str(e))
                    raise
                await self._sleep(self._retry_delay)
                continue

            log.info("iam_policy_reconciled", attempts=attempt, bindings=len(final.bindings))
            return final

    async def _attempt(
        self,
        request: ReconciliationRequest,
        template: BindingTemplate,
        store: PolicyStore,
        *,
        attempt: int,
    ) -> Policy:
        # A failure in any step aborts the attempt; earlier pushes are not rolled back.
        try:
            snapshot = await store.fetch(request.project)
        except PolicyStoreError as e:
            log.warning("iam_policy_fetch_failed", attempt=attempt, error=str(e))
            raise

        scrubbed = scrub_managed_accounts(snapshot, request)
        try:
            pushed = await store.replace(request.project, scrubbed)
        except PolicyStoreError as e:
            log.warning("iam_policy_scrub_push_failed", attempt=attempt, error=str(e))
            raise

        # Merge from the pre-scrub snapshot, conditioned on the etag of the scrub push.
        desired = merge_template(snapshot, template, request).with_etag(pushed.etag)
        try:
            return await store.replace(request.project, desired)
        except PolicyStoreError as e:
            log.warning("iam_policy_merge_push_failed", attempt=attempt, error=str(e))
            raise


# --- Module Notes -----------------------------------------------------------
# The lock registry only guards against this process. Writers outside it are
# detected through the etag: a stale push raises StalePolicyError and the attempt
# is retried from a fresh fetch.
