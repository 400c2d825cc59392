"""Helpers for reading and redacting subject instances.

Instances handed to the engine are treated as property bags: mappings,
pydantic models, dataclasses or plain objects are all accepted.
"""

from __future__ import annotations

import copy
import dataclasses
from typing import Any, Iterable, List, Mapping

from pydantic import BaseModel

MISSING = object()


def subject_name(subject: Any) -> str:
    """Return the subject type name for a string or a model class."""
    if isinstance(subject, str):
        return subject
    if isinstance(subject, type):
        return getattr(subject, "model_name", None) or subject.__name__
    raise TypeError(f"Unknown subject type: {subject!r}")


def get_path(instance: Any, path: str) -> Any:
    """Resolve a dotted ``path`` against ``instance``.

    Returns :data:`MISSING` when any segment of the path does not exist.
    """
    current = instance
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, MISSING)
        else:
            current = getattr(current, part, MISSING)
        if current is MISSING:
            return MISSING
    return current


def field_names(instance: Any) -> List[str]:
    """Return the top-level field names exposed by ``instance``."""
    if isinstance(instance, Mapping):
        return list(instance.keys())
    if isinstance(instance, BaseModel):
        return list(type(instance).model_fields)
    if dataclasses.is_dataclass(instance):
        return [f.name for f in dataclasses.fields(instance)]
    return [name for name in vars(instance) if not name.startswith("_")]


def redact(instance: Any, fields: Iterable[str]) -> Any:
    """Return a copy of ``instance`` with ``fields`` set to ``None``.

    Fields the instance does not have (e.g. relations resolved separately)
    are left out, so the copy keeps the shape of the original.
    """
    present = set(field_names(instance))
    cleared = {name: None for name in fields if name in present}
    if not cleared:
        return instance
    if isinstance(instance, Mapping):
        return {**instance, **cleared}
    if isinstance(instance, BaseModel):
        return instance.model_copy(update=cleared)
    if dataclasses.is_dataclass(instance):
        return dataclasses.replace(instance, **cleared)
    duplicate = copy.copy(instance)
    for name in cleared:
        setattr(duplicate, name, None)
    return duplicate
