"""
iam_reconciler.reconcile

Stateful side of the service: lock registry and reconciliation loop.
"""

from iam_reconciler.reconcile.locks import ProjectLockRegistry
from iam_reconciler.reconcile.orchestrator import PolicyReconciler

__all__ = ["PolicyReconciler", "ProjectLockRegistry"]
