from __future__ import annotations

import pytest

from iam_reconciler.policy.models import Binding, Policy


def test_policy_from_api_folds_duplicate_roles() -> None:
    payload = {
        "version": 1,
        "etag": "BwXyz=",
        "bindings": [
            {"role": "roles/viewer", "members": ["user:a@example.com"]},
            {"role": "roles/viewer", "members": ["user:b@example.com"]},
            {"role": "roles/owner"},
        ],
    }

    policy = Policy.from_api(payload)

    assert policy.etag == "BwXyz="
    assert policy.version == 1
    assert policy.role_map() == {
        "roles/viewer": {"user:a@example.com", "user:b@example.com"},
        "roles/owner": set(),
    }


def test_policy_to_api_keeps_etag_and_empty_bindings() -> None:
    policy = Policy.from_role_map({"roles/a": ["user:z", "user:y"], "roles/b": []}, etag="e", version=3)
    assert policy.to_api() == {
        "bindings": [
            {"role": "roles/a", "members": ["user:y", "user:z"]},
            {"role": "roles/b", "members": []},
        ],
        "etag": "e",
        "version": 3,
    }


def test_policy_rejects_duplicate_roles() -> None:
    with pytest.raises(ValueError):
        Policy(bindings=(Binding("roles/a"), Binding("roles/a")))
