"""Per-operation authorization state shared across nested handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from ..ability.engine import AbilitySet
from ..errors import ForbiddenError
from .fields import FieldRequirementResolver, resolver_for

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    UNKNOWN = "unknown"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass
class OperationContext:
    """Authorization state for one operation call tree.

    The same instance is passed by reference to every nested handler so a
    denial anywhere propagates outward. ``DENIED`` is sticky.

    Attributes:
        ability: Compiled grants of the current actor.
        actor: The current actor, for the caller's own bookkeeping.
        requested_fields: Field names the caller already knows will be
            returned, or ``None`` when they are only known from the result.
        outcome: Current authorization outcome.
        reason: Reason of the first inverted grant that caused a denial.
        rollback_required: Set when a write was denied after its producer ran.
    """

    ability: AbilitySet
    actor: Any = None
    requested_fields: Optional[Iterable[str]] = None
    outcome: Outcome = Outcome.UNKNOWN
    reason: Optional[str] = None
    rollback_required: bool = False

    def __post_init__(self) -> None:
        if self.requested_fields is not None:
            self.requested_fields = tuple(dict.fromkeys(self.requested_fields))

    @property
    def denied(self) -> bool:
        return self.outcome is Outcome.DENIED

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOWED

    @property
    def field_resolver(self) -> FieldRequirementResolver:
        return resolver_for(self.requested_fields)

    def deny(self, reason: Optional[str] = None) -> None:
        """Mark the operation as denied. Only the first reason is kept."""
        self.outcome = Outcome.DENIED
        if reason and self.reason is None:
            self.reason = reason

    def allow(self) -> None:
        """Mark the operation as allowed unless it was already denied."""
        if self.outcome is not Outcome.DENIED:
            self.outcome = Outcome.ALLOWED

    def require_rollback(self) -> None:
        if not self.rollback_required:
            logger.debug("Write denied after the producer ran; rollback required")
        self.rollback_required = True

    def raise_for_outcome(self) -> None:
        """Raise :class:`ForbiddenError` if the operation was denied."""
        if self.denied:
            raise ForbiddenError(self.reason)
