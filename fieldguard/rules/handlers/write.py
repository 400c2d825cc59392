"""Handlers for operations that change data: Create, Update and Delete.

Their producers commit before the post-checks run. A post-check failure
therefore sets ``rollback_required`` on the context, and the caller owning
the transaction must roll it back.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ...ability.grant import Action
from ...errors import RuleConfigurationError
from ..context import OperationContext
from ..descriptor import RuleDescriptor, RuleType
from .base import Producer, WriteRuleHandler, input_fields, invoke_producer

logger = logging.getLogger(__name__)


class CreateRuleHandler(WriteRuleHandler):
    rule_type = RuleType.CREATE

    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Any:
        logger.debug(f"Handling Create rule for {descriptor.label}")
        if context.denied:
            return None

        fields = input_fields(arguments, descriptor.options.input_name)
        if not self.precheck_type(context, descriptor, Action.CREATE):
            return None
        if not self.precheck_fields(context, descriptor, Action.CREATE, fields):
            return None

        value = await invoke_producer(producer)

        if self.denied_after_producer(context):
            return None
        if value is None:
            context.allow()
            return None

        # The created instance must itself be creatable (conditions apply now).
        decision = context.ability.decide(Action.CREATE, descriptor.subject, value)
        if not decision.allowed:
            self.deny(context, "failed basic create test with value", decision)
            context.require_rollback()
            return None
        if not self.precheck_fields(context, descriptor, Action.CREATE, fields, value):
            context.require_rollback()
            return None

        return self.finish_write(context, descriptor, value)


class UpdateRuleHandler(WriteRuleHandler):
    """Authorize an update.

    The caller must fetch the current instance and pass it as ``current``.
    Each input field must be updatable on it before the mutation, and on
    the new state after it. Only writability is checked before the
    mutation; readability is checked on the result.
    """

    rule_type = RuleType.UPDATE

    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Any:
        logger.debug(f"Handling Update rule for {descriptor.label}")
        if context.denied:
            return None

        if current is None:
            raise RuleConfigurationError(
                f"{descriptor.label}: Update rules require the current instance"
            )
        fields = input_fields(arguments, descriptor.options.input_name)
        if not self.precheck_type(context, descriptor, Action.UPDATE):
            return None
        if not self.precheck_fields(context, descriptor, Action.UPDATE, fields, current):
            return None

        value = await invoke_producer(producer)

        if self.denied_after_producer(context):
            return None
        if value is None:
            context.allow()
            return None

        if not self.precheck_fields(context, descriptor, Action.UPDATE, fields, value):
            context.require_rollback()
            return None

        return self.finish_write(context, descriptor, value)


class DeleteRuleHandler(WriteRuleHandler):
    """Authorize a deletion.

    Only the type is checked up front. After the producer deletes, the
    deleted instance must be deletable and readable, since the caller still
    receives its fields.
    """

    rule_type = RuleType.DELETE

    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Any:
        logger.debug(f"Handling Delete rule for {descriptor.label}")
        if context.denied:
            return None
        if not self.precheck_type(context, descriptor, Action.DELETE):
            return None

        value = await invoke_producer(producer)

        if self.denied_after_producer(context):
            return None
        if value is None:
            context.allow()
            return None

        decision = context.ability.decide(Action.DELETE, descriptor.subject, value)
        if not decision.allowed:
            self.deny(context, "failed basic delete test with value", decision)
            context.require_rollback()
            return None

        return self.finish_write(context, descriptor, value)
