"""
iam_reconciler.reconcile.locks

Per-project lock registry.

Responsibilities:
- Hand out one exclusive lock per project id, created on first use.
- Keep every lock for the registry's lifetime (locks are never destroyed).
"""

from __future__ import annotations

import asyncio


class ProjectLockRegistry:
    """
    Owned by the application (one per process) and injected into the orchestrator.
    Locks for distinct projects are independent.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, project: str) -> asyncio.Lock:
        # Runs on the event loop thread only; setdefault needs no extra guard.
        return self._locks.setdefault(project, asyncio.Lock())

    def __contains__(self, project: object) -> bool:
        return project in self._locks

    def __len__(self) -> int:
        return len(self._locks)
