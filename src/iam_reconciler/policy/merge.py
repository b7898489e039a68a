"""
iam_reconciler.policy.merge

Policy merge engine.

Responsibilities:
- Layer the binding template onto a pre-scrub policy snapshot.
- Resolve placeholder tokens using the request's cluster, project and email.
- Add or remove the resolved members for every templated role.
"""

from __future__ import annotations

from iam_reconciler.policy.identity import (
    managed_service_accounts,
    placeholder_mapping,
    resolve_member,
)
from iam_reconciler.policy.models import Action, BindingTemplate, Policy, ReconciliationRequest


def merge_template(
    snapshot: Policy,
    template: BindingTemplate,
    request: ReconciliationRequest,
) -> Policy:
    """
    Compute the desired policy for `request`.

    `snapshot` is the policy as fetched, before scrubbing. Members unrelated to
    the cluster's managed service accounts keep their roles untouched; the
    managed accounts start from no roles and receive exactly what the template
    grants them. Roles named by the template but absent from the snapshot are
    created, even when `remove` leaves them empty.
    """

    managed = managed_service_accounts(request.cluster, request.project)
    role_map = {role: members - managed for role, members in snapshot.role_map().items()}
    mapping = placeholder_mapping(request)

    for entry in template.bindings:
        members = [resolve_member(m, mapping) for m in entry.members]
        for role in entry.roles:
            current = role_map.setdefault(role, set())
            if request.action is Action.add:
                current.update(members)
            else:
                current.difference_update(members)

    return Policy.from_role_map(role_map, etag=snapshot.etag, version=snapshot.version)


# --- Module Notes -----------------------------------------------------------
# Callers replace the etag with the one returned by the scrub push before sending
# the merged policy; see `iam_reconciler.reconcile.orchestrator`.
