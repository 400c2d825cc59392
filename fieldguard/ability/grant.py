"""Grant model: one declarative permission rule."""

from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..constants import ALL_SUBJECTS
from .conditions import Condition, parse_conditions
from .subject import subject_name


class Action(str, Enum):
    """Actions a grant can allow or deny. ``MANAGE`` matches every action."""

    MANAGE = "manage"
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    SORT = "sort"
    FILTER = "filter"


class Grant(BaseModel):
    """A single (possibly inverted) permission rule.

    ``fields`` of ``None`` covers every field. ``conditions`` of ``None``
    covers every instance.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    action: Action
    subject: str = ALL_SUBJECTS
    fields: Optional[FrozenSet[str]] = None
    conditions: Optional[Condition] = None
    inverted: bool = False
    reason: Optional[str] = None

    @field_validator("subject", mode="before")
    @classmethod
    def _coerce_subject(cls, v: Any) -> Any:
        return v if isinstance(v, str) else subject_name(v)

    @field_validator("fields", mode="before")
    @classmethod
    def _coerce_fields(cls, v: Any) -> Any:
        if v is None:
            return None
        if isinstance(v, str):
            v = [v]
        # Stored rows frequently hold an empty array instead of null.
        return frozenset(v) or None

    @field_validator("conditions", mode="before")
    @classmethod
    def _coerce_conditions(cls, v: Any) -> Any:
        if v is None or isinstance(v, Condition):
            return v
        if isinstance(v, dict):
            return parse_conditions(v) if v else None
        raise ValueError("conditions must be a Condition or a mapping")

    def matches_action(self, action: Action) -> bool:
        return self.action is Action.MANAGE or self.action is action

    def matches_subject(self, subject_type: str) -> bool:
        return self.subject == ALL_SUBJECTS or self.subject == subject_type

    def matches_field(self, field: Optional[str]) -> bool:
        if self.fields is None:
            return True
        if field is None:
            # A field-restricted allow still permits the type as a whole; a
            # field-restricted deny does not forbid it.
            return not self.inverted
        return field in self.fields

    def matches_conditions(self, instance: Any = None) -> bool:
        if self.conditions is None:
            return True
        if instance is None:
            return not self.inverted
        return self.conditions.evaluate(instance)

    def describe(self) -> str:
        """Human readable one-line summary used by the CLI."""
        verb = "cannot" if self.inverted else "can"
        target = self.subject
        if self.fields is not None:
            target += "." + "{" + ",".join(sorted(self.fields)) + "}"
        text = f"{verb} {self.action.value} {target}"
        if self.conditions is not None:
            text += f" if {self.conditions!r}"
        if self.reason:
            text += f" ({self.reason})"
        return text
