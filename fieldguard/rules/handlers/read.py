"""Handlers for operations that only read: ReadOne, ReadMany and Count."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from ...ability.grant import Action
from ..context import OperationContext
from ..descriptor import RuleDescriptor, RuleType
from ..query import SortFilterPaginationValidator
from .base import Producer, RuleHandler, invoke_producer

logger = logging.getLogger(__name__)


class ReadOneRuleHandler(RuleHandler):
    """Authorize reading a single instance.

    Type-level and selection checks run before the producer unless the
    descriptor defers them. The produced instance is then checked itself,
    along with every field that will be returned. Field failures deny
    unless ``strict`` is explicitly disabled, in which case the field is
    set to ``None``.
    """

    rule_type = RuleType.READ_ONE
    default_strict = True

    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Any:
        logger.debug(f"Handling ReadOne rule for {descriptor.label}")
        if context.denied:
            return None

        if not descriptor.options.defer:
            if not self.precheck_type(context, descriptor, Action.READ):
                return None
            if not self.precheck_selection(context, descriptor):
                return None

        value = await invoke_producer(producer)

        if context.denied:
            logger.debug("ReadOne: already denied by a nested handler")
            return None
        if value is None:
            context.allow()
            return None

        result = self.authorize_read(context, descriptor, value, self.is_strict(descriptor))
        if context.denied:
            return None
        context.allow()
        return result


class ReadManyRuleHandler(RuleHandler):
    """Authorize reading a list of instances.

    Besides the read checks, the caller must be allowed to sort, filter and
    paginate the way it asked to, all before the producer runs. After it
    runs, any instance the caller cannot read denies the whole list. Field
    failures redact the field on that instance only, or deny the whole list
    in strict mode.

    ``defer`` does not apply to lists: the type and selection checks always
    run before the producer.
    """

    rule_type = RuleType.READ_MANY
    default_strict = False

    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Optional[List[Any]]:
        logger.debug(f"Handling ReadMany rule for {descriptor.label}")
        if context.denied:
            return None

        options = descriptor.options
        if not self.precheck_type(context, descriptor, Action.READ):
            return None

        validator = SortFilterPaginationValidator(context.ability, descriptor.subject)
        if not validator.can_sort_by_fields(arguments.get(options.order_input_name)):
            return self.deny(context, "caller may not sort by one or more of its sort fields")
        if not validator.can_filter_by_fields(arguments.get(options.filter_input_name)):
            return self.deny(context, "caller may not filter by one or more of its filter fields")
        if not validator.can_paginate(arguments.get(options.pagination_input_name)):
            return self.deny(context, "caller used a cursor without permission to sort by id")

        if not self.precheck_selection(context, descriptor):
            return None

        values = await invoke_producer(producer)

        if context.denied:
            logger.debug("ReadMany: already denied by a nested handler")
            return None
        if values is None:
            context.allow()
            return None

        strict = self.is_strict(descriptor)
        results: List[Any] = []
        for value in values:
            results.append(self.authorize_read(context, descriptor, value, strict))
            if context.denied:
                return None

        context.allow()
        return results


class CountRuleHandler(RuleHandler):
    """Authorize counting instances.

    Counts expose no field data, but a filtered count reveals whether any
    instance matches, so the caller must be allowed to filter by every
    field it filters on.
    """

    rule_type = RuleType.COUNT

    async def handle(
        self,
        context: OperationContext,
        descriptor: RuleDescriptor,
        producer: Producer,
        arguments: Mapping[str, Any],
        current: Any = None,
    ) -> Any:
        logger.debug(f"Handling Count rule for {descriptor.label}")
        if context.denied:
            return None
        if not self.precheck_type(context, descriptor, Action.READ):
            return None
        validator = SortFilterPaginationValidator(context.ability, descriptor.subject)
        if not validator.can_filter_by_fields(arguments.get(descriptor.options.filter_input_name)):
            return self.deny(context, "caller may not filter by one or more of its filter fields")

        count = await invoke_producer(producer)

        if context.denied:
            return None
        context.allow()
        return count
