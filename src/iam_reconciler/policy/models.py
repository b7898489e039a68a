"""
iam_reconciler.policy.models

Immutable value types for IAM policies, binding templates and reconciliation requests.

Responsibilities:
- Represent a project policy as a snapshot (bindings + etag + version).
- Convert between the Resource Manager wire format and the internal types.
- Define the template and request shapes consumed by the merge engine.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any


# Project ids: lowercase letter first, then letters/digits/hyphens, no trailing hyphen.
# Excludes "/", ":", "?", "#" and "." so an id is always a single URL path segment.
PROJECT_ID_PATTERN = r"^[a-z][a-z0-9-]{0,28}[a-z0-9]$"


class PrincipalKind(enum.StrEnum):
    # Values are the member prefixes used on the wire.
    user = "user"
    group = "group"
    service_account = "serviceAccount"

    def render(self, address: str) -> str:
        return f"{self.value}:{address}"


class Action(enum.StrEnum):
    add = "add"
    remove = "remove"


@dataclass(frozen=True, slots=True)
class Binding:
    role: str
    members: frozenset[str] = frozenset()

    def to_api(self) -> dict[str, Any]:
        return {"role": self.role, "members": sorted(self.members)}


@dataclass(frozen=True, slots=True)
class Policy:
    """
    Snapshot of a project's IAM policy.

    `bindings` holds at most one entry per role. `etag` is the store's
    optimistic-concurrency token for this snapshot (None when unknown).
    """

    bindings: tuple[Binding, ...] = ()
    etag: str | None = None
    version: int | None = None

    def __post_init__(self) -> None:
        roles = [b.role for b in self.bindings]
        if len(roles) != len(set(roles)):
            raise ValueError("a role may appear at most once per policy")

    @classmethod
    def from_role_map(
        cls,
        role_map: Mapping[str, Iterable[str]],
        *,
        etag: str | None = None,
        version: int | None = None,
    ) -> Policy:
        bindings = tuple(Binding(role, frozenset(members)) for role, members in role_map.items())
        return cls(bindings=bindings, etag=etag, version=version)

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Policy:
        # Duplicate roles (e.g. conditional bindings) are folded into one flat binding.
        role_map: dict[str, set[str]] = {}
        for raw in payload.get("bindings") or []:
            role = str(raw["role"])
            role_map.setdefault(role, set()).update(str(m) for m in raw.get("members") or [])
        version = payload.get("version")
        return cls.from_role_map(
            role_map,
            etag=payload.get("etag"),
            version=int(version) if version is not None else None,
        )

    def to_api(self) -> dict[str, Any]:
        body: dict[str, Any] = {"bindings": [b.to_api() for b in self.bindings]}
        if self.etag is not None:
            body["etag"] = self.etag
        if self.version is not None:
            body["version"] = self.version
        return body

    def role_map(self) -> dict[str, set[str]]:
        """Mutable role -> members copy, in binding order."""
        return {b.role: set(b.members) for b in self.bindings}

    def members_of(self, role: str) -> frozenset[str]:
        for b in self.bindings:
            if b.role == role:
                return b.members
        return frozenset()

    @property
    def roles(self) -> tuple[str, ...]:
        return tuple(b.role for b in self.bindings)

    def with_etag(self, etag: str | None) -> Policy:
        return replace(self, etag=etag)


@dataclass(frozen=True, slots=True)
class TemplateBinding:
    # Members may be literal addresses/principals or placeholder tokens.
    members: tuple[str, ...]
    roles: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BindingTemplate:
    bindings: tuple[TemplateBinding, ...] = ()


@dataclass(frozen=True, slots=True)
class ReconciliationRequest:
    project: str
    cluster: str
    email: str
    action: Action
    # Opaque; forwarded to the transport, never interpreted here.
    token: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        # Coerce plain strings; rejects anything other than add/remove.
        object.__setattr__(self, "action", Action(self.action))


# --- Module Notes -----------------------------------------------------------
# Member sets are frozensets: their enumeration order is not meaningful. `to_api`
# sorts members only to keep request bodies stable for logging and tests.
