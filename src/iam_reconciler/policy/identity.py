"""
iam_reconciler.policy.identity

Identity resolution for IAM members.

Responsibilities:
- Classify a bare address as service account, group or user.
- Compute the cluster's managed service accounts.
- Resolve template placeholder tokens into concrete principals.
"""

from __future__ import annotations

from iam_reconciler.policy.models import PrincipalKind, ReconciliationRequest

SERVICE_ACCOUNT_DOMAIN = "iam.gserviceaccount.com"
SUPPORT_GROUP_MARKER = "google-kubeflow-support"

ADMIN_SA_PLACEHOLDER = "set-kubeflow-admin-service-account"
USER_SA_PLACEHOLDER = "set-kubeflow-user-service-account"
VM_SA_PLACEHOLDER = "set-kubeflow-vm-service-account"
IAP_ACCOUNT_PLACEHOLDER = "set-kubeflow-iap-account"

# Account name suffix per service-account placeholder, in a stable order.
_MANAGED_SA_SUFFIXES = {
    ADMIN_SA_PLACEHOLDER: "admin",
    USER_SA_PLACEHOLDER: "user",
    VM_SA_PLACEHOLDER: "vm",
}

_PUBLIC_MEMBERS = frozenset({"allUsers", "allAuthenticatedUsers"})


def classify(address: str) -> PrincipalKind:
    # Order matters: the service-account marker wins over the group marker.
    if SERVICE_ACCOUNT_DOMAIN in address:
        return PrincipalKind.service_account
    if SUPPORT_GROUP_MARKER in address:
        return PrincipalKind.group
    return PrincipalKind.user


def resolve_principal(address: str) -> str:
    """
    Return `address` with its canonical member prefix.

    Total over all strings; validation of the address itself is left to the caller.
    """

    return classify(address).render(address)


def service_account_email(cluster: str, project: str, suffix: str) -> str:
    return f"{cluster}-{suffix}@{project}.{SERVICE_ACCOUNT_DOMAIN}"


def managed_service_accounts(cluster: str, project: str) -> frozenset[str]:
    """
    Principals of the service accounts generated for `cluster` in `project`.
    Their role memberships are recomputed from the template on every run.
    """

    return frozenset(
        resolve_principal(service_account_email(cluster, project, suffix))
        for suffix in _MANAGED_SA_SUFFIXES.values()
    )


def placeholder_mapping(request: ReconciliationRequest) -> dict[str, str]:
    mapping = {
        token: resolve_principal(service_account_email(request.cluster, request.project, suffix))
        for token, suffix in _MANAGED_SA_SUFFIXES.items()
    }
    mapping[IAP_ACCOUNT_PLACEHOLDER] = resolve_principal(request.email)
    return mapping


def resolve_member(member: str, mapping: dict[str, str]) -> str:
    if member in mapping:
        return mapping[member]
    # Literal members that already are principals ("kind:...", allUsers) are used as written.
    if ":" in member or member in _PUBLIC_MEMBERS:
        return member
    return resolve_principal(member)
