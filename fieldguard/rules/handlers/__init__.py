"""Built-in rule handlers, one per rule type."""

from __future__ import annotations

from typing import Dict

from ..descriptor import RuleType
from .base import Producer, RuleHandler, WriteRuleHandler, invoke_producer
from .read import CountRuleHandler, ReadManyRuleHandler, ReadOneRuleHandler
from .write import CreateRuleHandler, DeleteRuleHandler, UpdateRuleHandler


def default_handlers() -> Dict[RuleType, RuleHandler]:
    """Return a fresh mapping of every built-in rule type to its handler."""
    return {
        RuleType.READ_ONE: ReadOneRuleHandler(),
        RuleType.READ_MANY: ReadManyRuleHandler(),
        RuleType.CREATE: CreateRuleHandler(),
        RuleType.UPDATE: UpdateRuleHandler(),
        RuleType.DELETE: DeleteRuleHandler(),
        RuleType.COUNT: CountRuleHandler(),
    }


__all__ = [
    "CountRuleHandler",
    "CreateRuleHandler",
    "DeleteRuleHandler",
    "Producer",
    "ReadManyRuleHandler",
    "ReadOneRuleHandler",
    "RuleHandler",
    "UpdateRuleHandler",
    "WriteRuleHandler",
    "default_handlers",
    "invoke_producer",
]
