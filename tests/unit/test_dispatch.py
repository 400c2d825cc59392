"""Tests for routing operations through the rule dispatcher."""

import logging

import pytest

from fieldguard.ability import AbilitySet, Action, Grant
from fieldguard.config import FieldguardConfig, RulesConfig
from fieldguard.errors import ForbiddenError, RuleConfigurationError
from fieldguard.rules import (
    OperationContext,
    RuleDescriptor,
    RuleDispatcher,
    RuleOptions,
    RuleType,
)
from fieldguard.rules.handlers import ReadOneRuleHandler, RuleHandler


async def _produce_video():
    return {"id": 1, "title": "a", "secret": "s"}


VIDEO_ABILITY = AbilitySet(
    [
        Grant(action=Action.READ, subject="Video"),
        Grant(action=Action.READ, subject="Video", fields=["secret"], inverted=True),
        Grant(action=Action.SORT, subject="Video", fields=["title"]),
        Grant(action=Action.DELETE, subject="Video", inverted=True, reason="Videos are archived"),
    ]
)


def test_custom_rules_cannot_be_dispatched():
    dispatcher = RuleDispatcher(FieldguardConfig())
    with pytest.raises(RuleConfigurationError):
        dispatcher.handler_for(RuleType.CUSTOM)
    with pytest.raises(RuleConfigurationError):
        dispatcher.register_handler(RuleType.CUSTOM, ReadOneRuleHandler())


@pytest.mark.asyncio
async def test_dispatching_custom_rule_raises_before_producer():
    dispatcher = RuleDispatcher(FieldguardConfig())
    calls = []

    with pytest.raises(RuleConfigurationError):
        await dispatcher.dispatch(
            OperationContext(ability=VIDEO_ABILITY),
            RuleDescriptor(type=RuleType.CUSTOM, subject="Video"),
            lambda: calls.append(1),
        )
    assert calls == []


def test_every_built_in_type_has_a_handler():
    dispatcher = RuleDispatcher(FieldguardConfig())
    for rule_type in RuleType:
        if rule_type is RuleType.CUSTOM:
            continue
        assert dispatcher.handler_for(rule_type).rule_type is rule_type


@pytest.mark.asyncio
async def test_registered_handler_replaces_built_in():
    class AllowEverything(RuleHandler):
        rule_type = RuleType.COUNT

        async def handle(self, context, descriptor, producer, arguments, current=None):
            context.allow()
            return await producer()

    async def count():
        return 3

    dispatcher = RuleDispatcher(
        FieldguardConfig(), handlers={RuleType.COUNT: AllowEverything()}
    )
    context = OperationContext(ability=AbilitySet())

    assert await dispatcher.dispatch(context, RuleDescriptor(type="Count", subject="Video"), count) == 3
    assert context.allowed


@pytest.mark.asyncio
async def test_authorize_raises_forbidden_with_reason():
    dispatcher = RuleDispatcher(FieldguardConfig())
    context = OperationContext(ability=VIDEO_ABILITY)

    with pytest.raises(ForbiddenError) as exc_info:
        await dispatcher.authorize(
            context, RuleDescriptor(type=RuleType.DELETE, subject="Video"), _produce_video
        )
    assert exc_info.value.reason == "Videos are archived"
    assert str(exc_info.value) == "Videos are archived"


@pytest.mark.asyncio
async def test_authorize_without_reason_uses_generic_message():
    dispatcher = RuleDispatcher(FieldguardConfig())
    context = OperationContext(ability=AbilitySet())

    with pytest.raises(ForbiddenError, match="Forbidden"):
        await dispatcher.authorize(
            context, RuleDescriptor(type=RuleType.READ_ONE, subject="Video"), _produce_video
        )


@pytest.mark.asyncio
async def test_authorize_returns_value_when_allowed():
    dispatcher = RuleDispatcher(FieldguardConfig())
    context = OperationContext(ability=VIDEO_ABILITY, requested_fields=["id", "title"])

    result = await dispatcher.authorize(
        context, RuleDescriptor(type=RuleType.READ_ONE, subject="Video"), _produce_video
    )
    assert result["title"] == "a"


@pytest.mark.asyncio
async def test_configured_defaults_apply_to_descriptors():
    config = FieldguardConfig(rules=RulesConfig(strict=True, order_input_name="orderBy"))
    dispatcher = RuleDispatcher(config)

    async def produce_list():
        return [await _produce_video()]

    strict = OperationContext(ability=VIDEO_ABILITY)
    assert (
        await dispatcher.dispatch(
            strict, RuleDescriptor(type=RuleType.READ_MANY, subject="Video"), produce_list
        )
        is None
    )
    assert strict.denied

    # An explicit option wins over the configured default.
    lenient = OperationContext(ability=VIDEO_ABILITY)
    result = await dispatcher.dispatch(
        lenient,
        RuleDescriptor(
            type=RuleType.READ_MANY, subject="Video", options=RuleOptions(strict=False)
        ),
        produce_list,
        {"orderBy": [{"field": "title"}]},
    )
    assert result == [{"id": 1, "title": "a", "secret": None}]

    sorted_by_id = OperationContext(ability=VIDEO_ABILITY)
    await dispatcher.dispatch(
        sorted_by_id,
        RuleDescriptor(
            type=RuleType.READ_MANY, subject="Video", options=RuleOptions(strict=False)
        ),
        produce_list,
        {"orderBy": [{"field": "id"}]},
    )
    assert sorted_by_id.denied


@pytest.mark.asyncio
async def test_denials_are_logged(caplog):
    dispatcher = RuleDispatcher(FieldguardConfig())
    context = OperationContext(ability=AbilitySet(), actor="user-1")

    with caplog.at_level(logging.INFO, logger="fieldguard.rules.dispatch"):
        await dispatcher.dispatch(
            context,
            RuleDescriptor(
                type=RuleType.READ_ONE, subject="Video", options=RuleOptions(name="video")
            ),
            _produce_video,
        )

    assert "Denied video for actor 'user-1'" in caplog.text
