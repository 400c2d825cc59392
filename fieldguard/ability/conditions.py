"""Condition language attached to grants.

Conditions are a small tree of tagged variants evaluated against a subject
instance. Paths are dotted (``"author.id"``) and resolved with
:func:`~fieldguard.ability.subject.get_path`. A path that does not exist on
the instance never matches.

Stored permissions use a mapping form which :func:`parse_conditions`
compiles into the tree::

    {"ownerId": "$id"}                       # Equals
    {"status": {"in": ["draft", "review"]}}  # In
    {"views": {"gte": 10}}                   # Compare
    {"author": {"id": 5}}                    # Equals on "author.id"
    {"OR": [{"public": True}, {"ownerId": 1}]}
    {"creatorId": {"$field": "ownerId"}}     # Equals against another field
"""

from __future__ import annotations

import abc
import operator
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..constants import ACTOR_ID_VARIABLE, ESCAPED_ACTOR_ID_VARIABLE
from ..errors import ConditionVariableError
from .subject import MISSING, get_path

_COLLECTIONS = (list, tuple, set, frozenset)


class Condition(abc.ABC):
    """A predicate over a subject instance."""

    @abc.abstractmethod
    def evaluate(self, instance: Any) -> bool:
        """Return ``True`` when ``instance`` satisfies the condition."""
        raise NotImplementedError


@dataclass(frozen=True)
class FieldRef:
    """Operand referring to another field of the same instance."""

    path: str

    def resolve(self, instance: Any) -> Any:
        return get_path(instance, self.path)


def _operand(value: Any, instance: Any) -> Any:
    if isinstance(value, FieldRef):
        return value.resolve(instance)
    return value


@dataclass(frozen=True)
class Equals(Condition):
    path: str
    value: Any

    def evaluate(self, instance: Any) -> bool:
        actual = get_path(instance, self.path)
        expected = _operand(self.value, instance)
        if actual is MISSING or expected is MISSING:
            return False
        # Array-valued fields match when any element matches.
        if isinstance(actual, _COLLECTIONS) and not isinstance(expected, _COLLECTIONS):
            return expected in actual
        return actual == expected


@dataclass(frozen=True)
class In(Condition):
    path: str
    values: Tuple[Any, ...]

    def evaluate(self, instance: Any) -> bool:
        actual = get_path(instance, self.path)
        if actual is MISSING:
            return False
        candidates = [_operand(v, instance) for v in self.values]
        if isinstance(actual, _COLLECTIONS):
            return any(item in candidates for item in actual)
        return actual in candidates


_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "not": operator.ne,
}


@dataclass(frozen=True)
class Compare(Condition):
    path: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _COMPARATORS:
            raise ConditionVariableError(f"Unknown comparison operator: {self.op}")

    def evaluate(self, instance: Any) -> bool:
        actual = get_path(instance, self.path)
        expected = _operand(self.value, instance)
        if actual is MISSING or expected is MISSING:
            return False
        try:
            return bool(_COMPARATORS[self.op](actual, expected))
        except TypeError:
            # Incomparable values (e.g. None < 3) never match.
            return False


@dataclass(frozen=True)
class And(Condition):
    conditions: Tuple[Condition, ...]

    def evaluate(self, instance: Any) -> bool:
        return all(c.evaluate(instance) for c in self.conditions)


@dataclass(frozen=True)
class Or(Condition):
    conditions: Tuple[Condition, ...]

    def evaluate(self, instance: Any) -> bool:
        return any(c.evaluate(instance) for c in self.conditions)


@dataclass(frozen=True)
class Not(Condition):
    condition: Condition

    def evaluate(self, instance: Any) -> bool:
        return not self.condition.evaluate(instance)


_COMPARISON_KEYS = frozenset({"equals", "in", "notIn", *_COMPARATORS})
_FIELD_REF_KEY = "$field"


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _parse_value(value: Any) -> Any:
    if isinstance(value, Mapping) and set(value) == {_FIELD_REF_KEY}:
        return FieldRef(value[_FIELD_REF_KEY])
    return value


def _parse_comparison(path: str, raw: Mapping[str, Any]) -> Condition:
    parts = []
    for key, value in raw.items():
        if key == "equals":
            parts.append(Equals(path, _parse_value(value)))
        elif key == "in":
            parts.append(In(path, tuple(_parse_value(v) for v in _as_list(value))))
        elif key == "notIn":
            parts.append(Not(In(path, tuple(_parse_value(v) for v in _as_list(value)))))
        else:
            parts.append(Compare(path, key, _parse_value(value)))
    return parts[0] if len(parts) == 1 else And(tuple(parts))


def parse_conditions(raw: Mapping[str, Any], prefix: str = "") -> Condition:
    """Compile the stored mapping form of a condition into a :class:`Condition`."""
    if not isinstance(raw, Mapping):
        raise ConditionVariableError(f"Conditions must be a mapping, got {type(raw).__name__}")

    parts = []
    for key, value in raw.items():
        if key == "AND":
            parts.append(And(tuple(parse_conditions(v, prefix) for v in _as_list(value))))
        elif key == "OR":
            parts.append(Or(tuple(parse_conditions(v, prefix) for v in _as_list(value))))
        elif key == "NOT":
            nested = [parse_conditions(v, prefix) for v in _as_list(value)]
            parts.append(Not(nested[0] if len(nested) == 1 else And(tuple(nested))))
        else:
            path = f"{prefix}.{key}" if prefix else key
            if isinstance(value, Mapping) and set(value) != {_FIELD_REF_KEY}:
                keys = set(value)
                if keys and keys <= _COMPARISON_KEYS:
                    parts.append(_parse_comparison(path, value))
                elif keys & _COMPARISON_KEYS:
                    unknown = sorted(keys - _COMPARISON_KEYS)
                    raise ConditionVariableError(
                        f"Unknown condition operator(s) {unknown} for field {path}"
                    )
                else:
                    parts.append(parse_conditions(value, path))
            else:
                parts.append(Equals(path, _parse_value(value)))

    return parts[0] if len(parts) == 1 else And(tuple(parts))


def substitute_variables(raw: Any, actor_id: Optional[Any]) -> Any:
    """Return a copy of ``raw`` with ``$id`` replaced by ``actor_id``.

    ``\\$id`` is unescaped to a literal ``$id``. Using ``$id`` when no actor
    is logged in raises :class:`ConditionVariableError`.
    """
    if isinstance(raw, Mapping):
        return {key: substitute_variables(value, actor_id) for key, value in raw.items()}
    if isinstance(raw, (list, tuple)):
        return [substitute_variables(value, actor_id) for value in raw]
    if raw == ACTOR_ID_VARIABLE:
        if actor_id is None:
            raise ConditionVariableError(
                "Cannot replace $id variable in conditions because no actor is logged in."
            )
        return actor_id
    if raw == ESCAPED_ACTOR_ID_VARIABLE:
        return ACTOR_ID_VARIABLE
    return raw
