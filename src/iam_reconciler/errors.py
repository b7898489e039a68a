"""
iam_reconciler.errors

Exception hierarchy shared by the loader, the policy store and the orchestrator.
"""

from __future__ import annotations

from pathlib import Path


class ReconcilerError(Exception):
    pass


class TemplateLoadError(ReconcilerError):
    """
    The binding template could not be read or parsed.
    Fatal for a reconciliation: raised before any lock or network call.
    """

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(f"cannot load IAM binding template {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class PolicyStoreError(ReconcilerError):
    """
    A fetch or replace call against the remote policy store failed.
    The orchestrator retries these up to its attempt ceiling.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StalePolicyError(PolicyStoreError):
    # The etag sent with a replace no longer matches the stored policy.
    pass
