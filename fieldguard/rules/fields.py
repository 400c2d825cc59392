"""Strategies for deciding which fields of a subject must be authorized.

A transport that knows the requested selection up front (e.g. a structured
query) uses :class:`SelectionFieldResolver`, which allows field checks
before the producer runs. Otherwise :class:`ResultKeyFieldResolver` derives
the fields from the produced value's own keys, so field checks can only run
afterwards.
"""

from __future__ import annotations

import abc
from typing import AbstractSet, Any, Iterable, Optional, Tuple

from ..ability.subject import field_names


class FieldRequirementResolver(abc.ABC):
    @abc.abstractmethod
    def pre_fields(self, exclude: AbstractSet[str]) -> Optional[Tuple[str, ...]]:
        """Fields known before the producer runs, or ``None`` if unknown."""
        raise NotImplementedError

    @abc.abstractmethod
    def post_fields(self, value: Any, exclude: AbstractSet[str]) -> Tuple[str, ...]:
        """Fields to authorize on a produced ``value``."""
        raise NotImplementedError


class SelectionFieldResolver(FieldRequirementResolver):
    """Fields come from a selection known before the producer runs."""

    def __init__(self, selection: Iterable[str]) -> None:
        self.selection: Tuple[str, ...] = tuple(dict.fromkeys(selection))

    def pre_fields(self, exclude: AbstractSet[str]) -> Optional[Tuple[str, ...]]:
        return tuple(f for f in self.selection if f not in exclude)

    def post_fields(self, value: Any, exclude: AbstractSet[str]) -> Tuple[str, ...]:
        return tuple(f for f in self.selection if f not in exclude)


class ResultKeyFieldResolver(FieldRequirementResolver):
    """Fields are the produced value's own keys.

    For a list each element is checked against its own keys rather than the
    union of keys across the list, so an element is never checked for a
    field it does not have.
    """

    def pre_fields(self, exclude: AbstractSet[str]) -> Optional[Tuple[str, ...]]:
        return None

    def post_fields(self, value: Any, exclude: AbstractSet[str]) -> Tuple[str, ...]:
        return tuple(f for f in field_names(value) if f not in exclude)


def resolver_for(requested_fields: Optional[Iterable[str]]) -> FieldRequirementResolver:
    if requested_fields is None:
        return ResultKeyFieldResolver()
    return SelectionFieldResolver(requested_fields)
