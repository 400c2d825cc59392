"""Tests for grant matching and the ability engine."""

from __future__ import annotations

import pytest

from fieldguard.ability import AbilitySet, Action, Equals, Grant


def test_no_grants_denies_everything():
    ability = AbilitySet()
    for action in Action:
        assert not ability.can(action, "Production")
        assert not ability.can(action, "Production", {"id": 1})
        assert not ability.can(action, "Production", {"id": 1}, "name")
        assert not ability.can(action, "Production", field="name")


def test_plain_grant_allows_type_instance_and_fields():
    ability = AbilitySet([Grant(action=Action.READ, subject="Production")])
    assert ability.can("read", "Production")
    assert ability.can(Action.READ, "Production", {"id": 1}, "name")
    assert not ability.can(Action.UPDATE, "Production")
    assert not ability.can(Action.READ, "User")


def test_manage_and_all_are_wildcards():
    ability = AbilitySet([Grant(action=Action.MANAGE, subject="all")])
    assert ability.can(Action.DELETE, "User", {"id": 3}, "email")
    assert ability.can(Action.SORT, "Production", field="id")


def test_inverted_grant_overrides_earlier_allows():
    ability = AbilitySet(
        [
            Grant(action=Action.READ, subject="User"),
            Grant(action=Action.MANAGE, subject="all"),
            Grant(action=Action.READ, subject="User", fields=["password"], inverted=True),
        ]
    )
    assert not ability.can(Action.READ, "User", field="password")
    assert not ability.can(Action.READ, "User", {"id": 1}, "password")
    assert ability.can(Action.READ, "User", field="email")
    # A field-restricted deny does not forbid the type as a whole.
    assert ability.can(Action.READ, "User")


def test_later_allow_wins_over_earlier_inverted_grant():
    ability = AbilitySet(
        [
            Grant(action=Action.READ, subject="User", inverted=True),
            Grant(action=Action.READ, subject="User", fields=["username"]),
        ]
    )
    assert ability.can(Action.READ, "User", field="username")
    assert not ability.can(Action.READ, "User", field="email")


def test_field_restricted_grant():
    ability = AbilitySet([Grant(action=Action.READ, subject="User", fields=["id", "username"])])
    assert ability.can(Action.READ, "User")
    assert ability.can(Action.READ, "User", field="username")
    assert not ability.can(Action.READ, "User", field="email")


def test_empty_field_list_covers_every_field():
    grant = Grant(action=Action.READ, subject="User", fields=[])
    assert grant.fields is None
    assert AbilitySet([grant]).can(Action.READ, "User", field="email")


def test_conditional_grant_on_instances():
    ability = AbilitySet(
        [Grant(action=Action.UPDATE, subject="User", conditions={"id": 7})]
    )
    # Without an instance a conditional allow counts as "possibly allowed".
    assert ability.can(Action.UPDATE, "User")
    assert ability.can(Action.UPDATE, "User", {"id": 7, "name": "a"})
    assert not ability.can(Action.UPDATE, "User", {"id": 8, "name": "b"})
    assert not ability.can(Action.UPDATE, "User", {"name": "no id"})


def test_conditional_inverted_grant_is_ignored_without_instance():
    ability = AbilitySet(
        [
            Grant(action=Action.READ, subject="Video"),
            Grant(action=Action.READ, subject="Video", conditions=Equals("hidden", True), inverted=True),
        ]
    )
    assert ability.can(Action.READ, "Video")
    assert ability.can(Action.READ, "Video", {"hidden": False})
    assert not ability.can(Action.READ, "Video", {"hidden": True})


def test_sort_and_filter_conditions_are_not_evaluated_against_instances():
    ability = AbilitySet(
        [
            Grant(action=Action.SORT, subject="User", conditions={"id": 1}),
            Grant(action=Action.FILTER, subject="User", conditions={"id": 1}),
        ]
    )
    assert ability.can(Action.SORT, "User", {"id": 2}, "email")
    assert ability.can(Action.FILTER, "User", {"id": 2}, "email")


def test_decision_carries_reason_of_inverted_grant():
    ability = AbilitySet(
        [
            Grant(action=Action.DELETE, subject="BlogPost"),
            Grant(action=Action.DELETE, subject="BlogPost", inverted=True, reason="Archive instead"),
        ]
    )
    decision = ability.decide(Action.DELETE, "BlogPost")
    assert not decision.allowed
    assert decision.reason == "Archive instead"
    assert decision.grant is ability.grants[1]


def test_allowed_decision_has_no_reason():
    ability = AbilitySet([Grant(action=Action.READ, subject="BlogPost", reason="unused")])
    decision = ability.decide(Action.READ, "BlogPost")
    assert decision
    assert decision.reason is None


def test_rules_for_returns_highest_priority_first():
    first = Grant(action=Action.READ, subject="all")
    second = Grant(action=Action.MANAGE, subject="User")
    third = Grant(action=Action.UPDATE, subject="User")
    ability = AbilitySet([first, second, third])
    assert ability.rules_for(Action.READ, "User") == [second, first]


def test_subject_may_be_given_as_a_class():
    class Production:
        pass

    ability = AbilitySet([Grant(action=Action.READ, subject=Production)])
    assert ability.grants[0].subject == "Production"
    assert ability.can(Action.READ, Production)


def test_repeated_queries_are_idempotent():
    instance = {"id": 7, "secret": "x"}
    ability = AbilitySet(
        [
            Grant(action=Action.READ, subject="User", conditions={"id": 7}),
            Grant(action=Action.READ, subject="User", fields=["secret"], inverted=True),
        ]
    )
    results = [
        (
            ability.can(Action.READ, "User", instance),
            ability.can(Action.READ, "User", instance, "secret"),
            ability.can(Action.READ, "User", instance, "id"),
        )
        for _ in range(5)
    ]
    assert results == [(True, False, True)] * 5
    assert instance == {"id": 7, "secret": "x"}
    assert len(ability) == 2


def test_unknown_action_is_rejected():
    with pytest.raises(ValueError):
        AbilitySet().can("publish", "Production")
