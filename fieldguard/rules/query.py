"""Authorization of sorting, filtering and pagination arguments.

Sorting requires ``sort`` on every sorted field and filtering requires
``filter`` on every filtered field. Cursor pagination implicitly sorts by
``id`` and therefore requires ``sort`` on it; skip/take pagination needs
nothing beyond the read check.

Conditions on sort and filter grants are not evaluated against instances,
and readability of the sorted or filtered field is not required. A caller
allowed to sort or filter by a field it cannot read may infer its values.
"""

from __future__ import annotations

import logging
from typing import Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from ..ability.engine import AbilitySet
from ..ability.grant import Action
from ..constants import CURSOR_FIELD, FILTER_LOGICAL_KEYS
from ..errors import InvalidQueryArguments

logger = logging.getLogger(__name__)


class OrderBy(BaseModel):
    """One entry of a normalized ordering argument."""

    field: str
    direction: Literal["asc", "desc"] = "asc"


class Pagination(BaseModel):
    take: Optional[int] = None
    skip: Optional[int] = None
    cursor: Optional[Union[int, str]] = None


def normalize_order(order: Any) -> List[OrderBy]:
    if order is None:
        return []
    if not isinstance(order, (list, tuple)):
        raise InvalidQueryArguments("Ordering value must be an array")
    try:
        return [o if isinstance(o, OrderBy) else OrderBy.model_validate(o) for o in order]
    except ValidationError as exc:
        raise InvalidQueryArguments(f"Invalid ordering argument: {exc}") from exc


def normalize_pagination(pagination: Any) -> Optional[Pagination]:
    if pagination is None or isinstance(pagination, Pagination):
        return pagination
    try:
        return Pagination.model_validate(pagination)
    except ValidationError as exc:
        raise InvalidQueryArguments(f"Invalid pagination argument: {exc}") from exc


def filtering_fields(filter_tree: Any) -> List[str]:
    """Return every field compared anywhere in ``filter_tree``, in order of appearance."""
    fields: List[str] = []

    def visit(node: Any) -> None:
        if node is None:
            return
        if isinstance(node, BaseModel):
            node = node.model_dump(exclude_none=True)
        if not isinstance(node, Mapping):
            raise InvalidQueryArguments("Filter nodes must be objects")
        for key, value in node.items():
            if key in FILTER_LOGICAL_KEYS:
                for child in value if isinstance(value, (list, tuple)) else [value]:
                    visit(child)
            elif key not in fields:
                fields.append(key)

    visit(filter_tree)
    return fields


class SortFilterPaginationValidator:
    """Checks list-query arguments against an actor's sort and filter grants."""

    def __init__(self, ability: AbilitySet, subject_type: str) -> None:
        self.ability = ability
        self.subject_type = subject_type

    def can_sort_by_fields(self, order: Any) -> bool:
        for entry in normalize_order(order):
            if not self.ability.can(Action.SORT, self.subject_type, field=entry.field):
                logger.debug(f"Sorting by {self.subject_type}.{entry.field} is not permitted")
                return False
        return True

    def can_filter_by_fields(self, filter_tree: Any) -> bool:
        for field in filtering_fields(filter_tree):
            if not self.ability.can(Action.FILTER, self.subject_type, field=field):
                logger.debug(f"Filtering by {self.subject_type}.{field} is not permitted")
                return False
        return True

    def can_paginate(self, pagination: Any) -> bool:
        args = normalize_pagination(pagination)
        if args is None or args.cursor is None:
            return True
        if not self.ability.can(Action.SORT, self.subject_type, field=CURSOR_FIELD):
            logger.debug(
                f"Cursor pagination on {self.subject_type} requires sorting by {CURSOR_FIELD}"
            )
            return False
        return True
