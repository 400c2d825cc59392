"""Evaluation of grants for a single actor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

from .grant import Action, Grant
from .subject import subject_name


# Conditions on these grants are never evaluated against instances.
CONDITIONLESS_ACTIONS = frozenset({Action.SORT, Action.FILTER})


@dataclass(frozen=True)
class Decision:
    """Outcome of a single ``can`` query."""

    allowed: bool
    grant: Optional[Grant] = None

    @property
    def reason(self) -> Optional[str]:
        """Reason attached to the inverted grant that denied, if any."""
        if self.allowed or self.grant is None:
            return None
        return self.grant.reason

    def __bool__(self) -> bool:
        return self.allowed


class AbilitySet:
    """Ordered, immutable collection of grants effective for one actor.

    For a given action, subject and field the last matching grant in
    declaration order decides. An inverted match denies. No match denies.
    """

    def __init__(self, grants: Iterable[Grant] = ()) -> None:
        self._grants: Tuple[Grant, ...] = tuple(grants)

    @property
    def grants(self) -> Tuple[Grant, ...]:
        return self._grants

    def __iter__(self) -> Iterator[Grant]:
        return iter(self._grants)

    def __len__(self) -> int:
        return len(self._grants)

    def __repr__(self) -> str:
        return f"AbilitySet({len(self._grants)} grants)"

    def rules_for(
        self,
        action: Union[Action, str],
        subject_type: Any,
        field: Optional[str] = None,
    ) -> List[Grant]:
        """Return grants relevant to the query, highest priority first."""
        action = Action(action)
        subject_type = subject_name(subject_type)
        return [
            grant
            for grant in reversed(self._grants)
            if grant.matches_action(action)
            and grant.matches_subject(subject_type)
            and grant.matches_field(field)
        ]

    def decide(
        self,
        action: Union[Action, str],
        subject_type: Any,
        instance: Any = None,
        field: Optional[str] = None,
    ) -> Decision:
        """Evaluate the query and return the deciding grant along with the result."""
        action = Action(action)
        if action in CONDITIONLESS_ACTIONS:
            instance = None
        for grant in self.rules_for(action, subject_type, field):
            if grant.matches_conditions(instance):
                return Decision(allowed=not grant.inverted, grant=grant)
        return Decision(allowed=False)

    def can(
        self,
        action: Union[Action, str],
        subject_type: Any,
        instance: Any = None,
        field: Optional[str] = None,
    ) -> bool:
        """Return ``True`` if ``action`` is allowed on the subject (and field)."""
        return self.decide(action, subject_type, instance, field).allowed

    def cannot(
        self,
        action: Union[Action, str],
        subject_type: Any,
        instance: Any = None,
        field: Optional[str] = None,
    ) -> bool:
        return not self.can(action, subject_type, instance, field)
