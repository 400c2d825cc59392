"""Grants, their condition language and the engine evaluating them."""

from __future__ import annotations

from .conditions import (
    And,
    Compare,
    Condition,
    Equals,
    FieldRef,
    In,
    Not,
    Or,
    parse_conditions,
    substitute_variables,
)
from .engine import AbilitySet, Decision
from .grant import Action, Grant

__all__ = [
    "AbilitySet",
    "Action",
    "And",
    "Compare",
    "Condition",
    "Decision",
    "Equals",
    "FieldRef",
    "Grant",
    "In",
    "Not",
    "Or",
    "parse_conditions",
    "substitute_variables",
]
