"""Rule descriptors attached to each authorized call site."""

from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..ability.subject import subject_name
from ..config import RulesConfig


class RuleType(str, Enum):
    """Operation types with a built-in rule handler, plus ``CUSTOM``."""

    READ_ONE = "ReadOne"
    READ_MANY = "ReadMany"
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    COUNT = "Count"
    CUSTOM = "Custom"


class RuleOptions(BaseModel):
    """Per call-site options. ``None`` means "use the configured default"."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    strict: Optional[bool] = None
    defer: bool = False
    exclude_fields: FrozenSet[str] = frozenset()
    order_input_name: Optional[str] = None
    filter_input_name: Optional[str] = None
    pagination_input_name: Optional[str] = None
    input_name: Optional[str] = None

    def resolve(self, defaults: RulesConfig) -> "RuleOptions":
        """Return a copy with unset options filled from ``defaults``."""
        return self.model_copy(
            update={
                "strict": self.strict if self.strict is not None else defaults.strict,
                "order_input_name": self.order_input_name or defaults.order_input_name,
                "filter_input_name": self.filter_input_name or defaults.filter_input_name,
                "pagination_input_name": self.pagination_input_name
                or defaults.pagination_input_name,
                "input_name": self.input_name or defaults.input_name,
            }
        )


class RuleDescriptor(BaseModel):
    """Which rule to apply, to which subject type, with which options."""

    model_config = ConfigDict(frozen=True)

    type: RuleType
    subject: str
    options: RuleOptions = Field(default_factory=RuleOptions)

    @field_validator("subject", mode="before")
    @classmethod
    def _coerce_subject(cls, v: Any) -> Any:
        return v if isinstance(v, str) else subject_name(v)

    @property
    def label(self) -> str:
        return self.options.name or f"{self.type.value}:{self.subject}"
