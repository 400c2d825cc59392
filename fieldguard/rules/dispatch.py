"""Rule dispatcher for fieldguard."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..config import FieldguardConfig, load_config
from ..errors import RuleConfigurationError
from .context import OperationContext
from .descriptor import RuleDescriptor, RuleType
from .handlers import Producer, RuleHandler, default_handlers

logger = logging.getLogger(__name__)


class RuleDispatcher:
    """Routes an operation to the handler registered for its rule type."""

    def __init__(
        self,
        config: Optional[FieldguardConfig] = None,
        handlers: Optional[Mapping[RuleType, RuleHandler]] = None,
    ) -> None:
        self._config = config or load_config()
        self._handlers: Dict[RuleType, RuleHandler] = default_handlers()
        for rule_type, handler in (handlers or {}).items():
            self.register_handler(rule_type, handler)

    def register_handler(self, rule_type: RuleType, handler: RuleHandler) -> None:
        """Replace the handler used for ``rule_type``."""
        rule_type = RuleType(rule_type)
        if rule_type is RuleType.CUSTOM:
            raise RuleConfigurationError("Custom rules cannot be dispatched by rule type")
        self._handlers[rule_type] = handler

    def handler_for(self, rule_type: RuleType) -> RuleHandler:
        rule_type = RuleType(rule_type)
        if rule_type is RuleType.CUSTOM:
            raise RuleConfigurationError("Custom rules are not supported by the dispatcher")
        handler = self._handlers.get(rule_type)
        if handler is None:
            raise RuleConfigurationError(f"No handler registered for rule type {rule_type.value}")
        return handler

    async def dispatch(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Optional[Mapping[str, Any]] = None,
        current: Any = None,
    ) -> Any:
        """Run ``producer`` under the rule described by ``descriptor``.

        Args:
            context: Shared authorization state. Nested calls must reuse it.
            descriptor: Rule type, subject type and options for this call site.
            producer: Callable performing the actual data operation.
            arguments: The call's arguments; ordering, filter, pagination and
                write payload are read from it under the configured names.
            current: The instance as it is before an update. Required for
                Update rules.

        Returns:
            The produced value (possibly with redacted fields), or ``None``
            when denied. Inspect ``context.outcome`` to tell the two apart.
        """
        handler = self.handler_for(descriptor.type)
        resolved = descriptor.model_copy(
            update={"options": descriptor.options.resolve(self._config.rules)}
        )
        result = await handler.handle(context, resolved, producer, arguments or {}, current)

        if context.denied:
            logger.info(f"Denied {resolved.label} for actor {context.actor!r}")
        if context.rollback_required:
            logger.info(f"{resolved.label} must be rolled back")
        return result

    async def authorize(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Optional[Mapping[str, Any]] = None,
        current: Any = None,
    ) -> Any:
        """Like :meth:`dispatch` but raise :class:`ForbiddenError` when denied."""
        result = await self.dispatch(context, descriptor, producer, arguments, current)
        context.raise_for_outcome()
        return result
