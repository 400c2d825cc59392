"""Tests for operation contexts, field resolvers and rule descriptors."""

from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel

from fieldguard.ability import AbilitySet
from fieldguard.ability.subject import field_names, redact, subject_name
from fieldguard.config import RulesConfig
from fieldguard.errors import ForbiddenError
from fieldguard.rules import (
    OperationContext,
    Outcome,
    ResultKeyFieldResolver,
    RuleDescriptor,
    RuleOptions,
    RuleType,
    SelectionFieldResolver,
)


class Production(BaseModel):
    id: int
    name: str
    budget: Optional[int] = None


@dataclass
class Episode:
    id: int
    title: str


class Plain:
    def __init__(self):
        self.id = 1
        self.secret = "x"
        self._cache = None


def test_context_denial_is_sticky_and_keeps_first_reason():
    context = OperationContext(ability=AbilitySet())
    assert context.outcome is Outcome.UNKNOWN

    context.deny("first")
    context.deny("second")
    context.allow()

    assert context.denied
    assert context.reason == "first"
    with pytest.raises(ForbiddenError, match="first"):
        context.raise_for_outcome()


def test_context_allow_and_rollback():
    context = OperationContext(ability=AbilitySet())
    context.allow()
    context.raise_for_outcome()
    assert context.allowed

    context.require_rollback()
    context.require_rollback()
    assert context.rollback_required


def test_requested_fields_are_deduplicated():
    context = OperationContext(ability=AbilitySet(), requested_fields=["id", "name", "id"])
    assert context.requested_fields == ("id", "name")
    assert isinstance(context.field_resolver, SelectionFieldResolver)
    assert isinstance(OperationContext(ability=AbilitySet()).field_resolver, ResultKeyFieldResolver)


def test_selection_resolver_is_known_before_the_producer():
    resolver = SelectionFieldResolver(["id", "name", "budget"])
    assert resolver.pre_fields(frozenset({"budget"})) == ("id", "name")
    assert resolver.post_fields({"id": 1, "extra": 2}, frozenset()) == ("id", "name", "budget")


def test_result_key_resolver_reads_the_value():
    resolver = ResultKeyFieldResolver()
    assert resolver.pre_fields(frozenset()) is None
    assert resolver.post_fields({"id": 1, "name": "n"}, frozenset({"name"})) == ("id",)
    assert resolver.post_fields(Production(id=1, name="n"), frozenset()) == ("id", "name", "budget")
    assert resolver.post_fields(Episode(id=1, title="t"), frozenset()) == ("id", "title")
    assert resolver.post_fields(Plain(), frozenset()) == ("id", "secret")


def test_redact_returns_copies():
    production = Production(id=1, name="n", budget=10)
    assert redact(production, ["budget"]).budget is None
    assert production.budget == 10

    episode = Episode(id=1, title="t")
    assert redact(episode, ["title"]) == Episode(id=1, title=None)
    assert episode.title == "t"

    plain = Plain()
    hidden = redact(plain, ["secret"])
    assert hidden is not plain
    assert hidden.secret is None
    assert plain.secret == "x"

    data = {"id": 1}
    assert redact(data, []) is data


def test_subject_names():
    assert subject_name("Video") == "Video"
    assert subject_name(Episode) == "Episode"
    with pytest.raises(TypeError):
        subject_name(3)
    assert field_names({"a": 1}) == ["a"]


def test_descriptor_label_and_option_resolution():
    descriptor = RuleDescriptor(type="ReadMany", subject=Production)
    assert descriptor.type is RuleType.READ_MANY
    assert descriptor.label == "ReadMany:Production"

    options = RuleOptions(name="productions", order_input_name="sort").resolve(
        RulesConfig(strict=True)
    )
    assert options.strict is True
    assert options.order_input_name == "sort"
    assert options.filter_input_name == "filter"
    assert options.pagination_input_name == "pagination"
    assert options.input_name == "input"
    assert RuleOptions(strict=False).resolve(RulesConfig(strict=True)).strict is False
    assert RuleDescriptor(type=RuleType.COUNT, subject="X", options=options).label == "productions"


def test_redact_skips_fields_the_instance_does_not_have():
    episode = Episode(id=1, title="t")
    assert redact(episode, ["author"]) is episode
    assert redact(episode, ["author", "title"]) == Episode(id=1, title=None)

    data = {"id": 1, "name": "n"}
    assert redact(data, ["author", "name"]) == {"id": 1, "name": None}
    assert "author" not in redact(Production(id=1, name="n"), ["author", "name"]).model_dump()
