"""fieldguard: capability-based authorization for read and write operations."""

from .ability import AbilitySet, Action, Decision, Grant
from .errors import (
    ConditionVariableError,
    FieldguardError,
    ForbiddenError,
    InvalidQueryArguments,
    RuleConfigurationError,
)
from .grants import AbilityFactory, get_grant_source
from .rules import (
    OperationContext,
    Outcome,
    RuleDescriptor,
    RuleDispatcher,
    RuleOptions,
    RuleType,
)

__version__ = "0.1.0"
__all__ = [
    "AbilityFactory",
    "AbilitySet",
    "Action",
    "ConditionVariableError",
    "Decision",
    "FieldguardError",
    "ForbiddenError",
    "Grant",
    "InvalidQueryArguments",
    "OperationContext",
    "Outcome",
    "RuleConfigurationError",
    "RuleDescriptor",
    "RuleDispatcher",
    "RuleOptions",
    "RuleType",
    "get_grant_source",
]
