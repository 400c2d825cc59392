"""Exception types raised by fieldguard.

Authorization denials are never raised from inside rule handlers; they are
recorded on the :class:`~fieldguard.rules.context.OperationContext`. The
exceptions here cover programming errors, malformed caller input and the
optional translation of a denial into an error.
"""

from __future__ import annotations

from typing import Optional


class FieldguardError(Exception):
    """Base class for all fieldguard errors."""


class RuleConfigurationError(FieldguardError):
    """A rule descriptor cannot be handled (custom type, missing handler)."""


class ConditionVariableError(FieldguardError, ValueError):
    """A stored condition could not be compiled for the current actor."""


class InvalidQueryArguments(FieldguardError, ValueError):
    """Ordering, filtering or pagination arguments are malformed."""


class ForbiddenError(FieldguardError):
    """The current actor is not allowed to perform the operation.

    The message is deliberately uniform. Only a ``reason`` attached to an
    inverted grant is surfaced to the caller.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason
        super().__init__(reason or "Forbidden")
