"""
iam_reconciler.policy.scrub

Stale-binding scrubber.

Responsibilities:
- Drop the cluster's managed service accounts from every role of a policy,
  whichever role they currently hold.
"""

from __future__ import annotations

from iam_reconciler.policy.identity import managed_service_accounts
from iam_reconciler.policy.models import Binding, Policy, ReconciliationRequest


def scrub_managed_accounts(policy: Policy, request: ReconciliationRequest) -> Policy:
    managed = managed_service_accounts(request.cluster, request.project)
    # Roles left without members are kept as empty bindings.
    bindings = tuple(Binding(b.role, b.members - managed) for b in policy.bindings)
    return Policy(bindings=bindings, etag=policy.etag, version=policy.version)


# --- Module Notes -----------------------------------------------------------
# The scrubbed policy keeps the snapshot's etag so that its push only succeeds
# against the policy it was derived from.
