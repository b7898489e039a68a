"""
iam_reconciler.template_loader

Loading of the IAM binding template from disk.

Responsibilities:
- Parse the YAML (or JSON) template document.
- Validate its shape and convert it into an immutable `BindingTemplate`.
- Report every failure as `TemplateLoadError`.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from iam_reconciler.errors import TemplateLoadError
from iam_reconciler.policy.models import BindingTemplate, TemplateBinding


class _TemplateEntry(BaseModel):
    members: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)


class _TemplateDocument(BaseModel):
    # Required: an empty template would silently strip every managed account grant.
    bindings: list[_TemplateEntry]


def parse_binding_template(text: str, *, source: Path | str = "<string>") -> BindingTemplate:
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise TemplateLoadError(source, f"invalid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise TemplateLoadError(source, "expected a mapping with a 'bindings' key")

    try:
        doc = _TemplateDocument.model_validate(raw)
    except ValidationError as e:
        raise TemplateLoadError(source, str(e)) from e

    return BindingTemplate(
        bindings=tuple(
            TemplateBinding(members=tuple(entry.members), roles=tuple(entry.roles))
            for entry in doc.bindings
        )
    )


def load_binding_template(path: Path | str) -> BindingTemplate:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateLoadError(path, e.strerror or str(e)) from e
    return parse_binding_template(text, source=path)


def template_loader(path: Path | str) -> Callable[[], BindingTemplate]:
    """
    Loader bound to `path` for the orchestrator.
    The file is re-read on every call so template edits apply without a restart.
    """

    def _load() -> BindingTemplate:
        return load_binding_template(path)

    return _load
