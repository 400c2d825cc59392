"""Shared machinery for rule handlers.

Every handler follows the same sequence: pre-checks, producer, post-checks.
A failed check marks the shared :class:`OperationContext` as denied and the
handler returns ``None``. Once denied, later stages do nothing.
"""

from __future__ import annotations

import abc
import inspect
import logging
from typing import Any, Awaitable, Callable, ClassVar, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from ...ability.engine import Decision
from ...ability.grant import Action
from ...ability.subject import field_names, redact
from ..context import OperationContext
from ..descriptor import RuleDescriptor, RuleType

logger = logging.getLogger(__name__)

Producer = Callable[[], Union[Awaitable[Any], Any]]


async def invoke_producer(producer: Producer) -> Any:
    """Call ``producer`` and await its result if needed."""
    result = producer()
    if inspect.isawaitable(result):
        result = await result
    return result


def input_fields(arguments: Mapping[str, Any], input_name: str) -> Tuple[str, ...]:
    """Return the top-level fields present in a write payload."""
    payload = arguments.get(input_name)
    if payload is None:
        return ()
    if isinstance(payload, BaseModel):
        return tuple(payload.model_dump(exclude_unset=True))
    return tuple(field_names(payload))


class RuleHandler(abc.ABC):
    """Strategy for one rule type."""

    rule_type: ClassVar[RuleType]
    # Whether a post-producer field failure denies (True) or redacts (False)
    # when neither the descriptor nor the configuration decide.
    default_strict: ClassVar[bool] = True

    @abc.abstractmethod
    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Any:
        """Authorize and run ``producer``; return its (possibly redacted) value or ``None``."""
        raise NotImplementedError

    # ------------------------------------------------------------------
    def is_strict(self, descriptor: RuleDescriptor) -> bool:
        strict = descriptor.options.strict
        return self.default_strict if strict is None else strict

    def deny(
        self,
        context: OperationContext,
        message: str,
        decision: Optional[Decision] = None,
    ) -> None:
        logger.debug(f"{self.rule_type.value}: {message}")
        context.deny(decision.reason if decision is not None else None)
        return None

    def precheck_type(
        self, context: OperationContext, descriptor: RuleDescriptor, action: Action
    ) -> bool:
        decision = context.ability.decide(action, descriptor.subject)
        if not decision.allowed:
            self.deny(context, f"failed basic {action.value} test on {descriptor.subject}", decision)
            return False
        return True

    def precheck_fields(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        action: Action,
        fields: Tuple[str, ...],
        instance: Any = None,
    ) -> bool:
        for field in fields:
            decision = context.ability.decide(action, descriptor.subject, instance, field)
            if not decision.allowed:
                self.deny(
                    context,
                    f"failed {action.value} test on {descriptor.subject}.{field}",
                    decision,
                )
                return False
        return True

    def precheck_selection(self, context: OperationContext, descriptor: RuleDescriptor) -> bool:
        """Read-check the caller's selection, when it is known up front."""
        fields = context.field_resolver.pre_fields(descriptor.options.exclude_fields)
        if fields is None:
            return True
        return self.precheck_fields(context, descriptor, Action.READ, fields)

    def authorize_read(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        value: Any,
        strict: bool,
    ) -> Any:
        """Read-check one produced instance and its fields.

        Returns the value, a redacted copy of it, or ``None`` after denying.
        Does not mark the context as allowed.
        """
        subject = descriptor.subject
        decision = context.ability.decide(Action.READ, subject, value)
        if not decision.allowed:
            return self.deny(context, f"failed basic read test on a {subject} value", decision)

        hidden: List[str] = []
        for field in context.field_resolver.post_fields(value, descriptor.options.exclude_fields):
            decision = context.ability.decide(Action.READ, subject, value, field)
            if decision.allowed:
                continue
            if strict:
                return self.deny(
                    context, f"failed read test on {subject}.{field} with value", decision
                )
            logger.debug(f"{self.rule_type.value}: redacting {subject}.{field} on one value")
            hidden.append(field)
        return redact(value, hidden)


class WriteRuleHandler(RuleHandler):
    """Handler for operations whose producer commits a change.

    Any denial after the producer ran flags the context for rollback.
    """

    def finish_write(
        self, context: OperationContext, descriptor: RuleDescriptor, value: Any
    ) -> Any:
        """Apply the read post-checks to the written value."""
        result = self.authorize_read(context, descriptor, value, self.is_strict(descriptor))
        if context.denied:
            context.require_rollback()
            return None
        context.allow()
        return result

    def denied_after_producer(self, context: OperationContext) -> bool:
        if context.denied:
            logger.debug(f"{self.rule_type.value}: already denied by a nested handler")
            context.require_rollback()
            return True
        return False
