"""Per-operation rule handlers and their dispatcher."""

from __future__ import annotations

from .context import OperationContext, Outcome
from .descriptor import RuleDescriptor, RuleOptions, RuleType
from .dispatch import RuleDispatcher
from .fields import (
    FieldRequirementResolver,
    ResultKeyFieldResolver,
    SelectionFieldResolver,
)
from .query import OrderBy, Pagination, SortFilterPaginationValidator

__all__ = [
    "FieldRequirementResolver",
    "OperationContext",
    "OrderBy",
    "Outcome",
    "Pagination",
    "ResultKeyFieldResolver",
    "RuleDescriptor",
    "RuleDispatcher",
    "RuleOptions",
    "RuleType",
    "SelectionFieldResolver",
    "SortFilterPaginationValidator",
]
