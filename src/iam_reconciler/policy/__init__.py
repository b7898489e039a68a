"""
iam_reconciler.policy

Pure policy transformations (no I/O).

Responsibilities:
- Policy/template/request value types.
- Identity resolution, stale-binding scrubbing and template merging.
"""

from iam_reconciler.policy.identity import managed_service_accounts, resolve_principal
from iam_reconciler.policy.merge import merge_template
from iam_reconciler.policy.models import (
    Action,
    Binding,
    BindingTemplate,
    Policy,
    PrincipalKind,
    ReconciliationRequest,
    TemplateBinding,
)
from iam_reconciler.policy.scrub import scrub_managed_accounts

__all__ = [
    "Action",
    "Binding",
    "BindingTemplate",
    "Policy",
    "PrincipalKind",
    "ReconciliationRequest",
    "TemplateBinding",
    "managed_service_accounts",
    "merge_template",
    "resolve_principal",
    "scrub_managed_accounts",
]
