"""
Tests for the default rulesets and Lancelot variants.
"""

import json
import pytest
from dataclasses import replace

from avalon.core import (
    InvalidConfigError, LancelotVariant, RoleKey, Ruleset, TeamLimitMode, TeamRule,
    lookup_ruleset, supported_player_counts, visibility_rules_for,
)
from avalon.core.roles import get_character, Alignment
from avalon.core.rules import (
    DEFAULT_VISIBILITY_RULES, LANCELOT_VISIBILITY_RULE, parse_lancelot_variant,
    random_lancelot_switch,
)
from conftest import ScriptedRandom


EXPECTED_SIZES = {
    5: [2, 3, 2, 3, 3],
    6: [2, 3, 4, 3, 4],
    7: [2, 3, 3, 4, 4],
    8: [3, 4, 4, 5, 5],
    9: [3, 4, 4, 5, 5],
    10: [3, 4, 4, 5, 5],
}
EXPECTED_EVIL = {5: 2, 6: 2, 7: 3, 8: 3, 9: 3, 10: 4}


def test_supported_player_counts():
    assert supported_player_counts() == [5, 6, 7, 8, 9, 10]


@pytest.mark.parametrize("count", [5, 6, 7, 8, 9, 10])
def test_default_ruleset(count):
    rule = lookup_ruleset(count)
    assert rule.number_of_players == count
    assert len(rule.roles) == count
    assert [q.number_of_members for q in rule.quests] == EXPECTED_SIZES[count]
    assert rule.team == TeamRule(max_proposals=5, mode=TeamLimitMode.PER_QUEST)
    assert rule.recognizer == RoleKey.MERLIN
    assert rule.assassin in rule.roles
    assert RoleKey.MERLIN in rule.roles
    assert rule.lancelot is None
    assert not rule.has_lady_of_the_lake
    assert not rule.enable_excalibur
    assert rule.visibility_rules == DEFAULT_VISIBILITY_RULES
    evil = [key for key in rule.roles if get_character(key).alignment == Alignment.EVIL]
    assert len(evil) == EXPECTED_EVIL[count]


@pytest.mark.parametrize("count", [5, 6, 7, 8, 9, 10])
def test_two_failures_only_on_fourth_quest_with_seven_or_more(count):
    flags = [q.need_two_failures for q in lookup_ruleset(count).quests]
    if count >= 7:
        assert flags == [False, False, False, True, False]
    else:
        assert not any(flags)


@pytest.mark.parametrize("count", [4, 11, 0])
def test_unsupported_player_count(count):
    assert lookup_ruleset(count) is None


@pytest.mark.parametrize("count", [7, 8, 9, 10])
@pytest.mark.parametrize("variant", ["rule1", "rule2", "rule3"])
def test_lancelot_doubles_roles(count, variant):
    plain = lookup_ruleset(count)
    rule = lookup_ruleset(count, variant)
    assert rule.lancelot == LancelotVariant(variant)
    assert len(rule.roles) == count
    assert rule.roles.count(RoleKey.LANCELOT_GOOD) == 1
    assert rule.roles.count(RoleKey.LANCELOT_EVIL) == 1
    assert rule.roles.count(RoleKey.LOYAL_SERVANT) == plain.roles.count(RoleKey.LOYAL_SERVANT) - 1
    assert RoleKey.MERLIN in rule.roles
    assert RoleKey.ASSASSIN in rule.roles
    # Sides keep their size
    evil = [k for k in rule.roles if get_character(k).alignment == Alignment.EVIL]
    assert len(evil) == EXPECTED_EVIL[count]


def test_lancelot_replaces_minion_first():
    rule = lookup_ruleset(8, LancelotVariant.RULE1)
    assert RoleKey.MINION not in rule.roles
    assert RoleKey.MORGANA in rule.roles


@pytest.mark.parametrize("count", [5, 6])
def test_lancelot_needs_seven_players(count):
    with pytest.raises(InvalidConfigError):
        lookup_ruleset(count, "rule1")


def test_unknown_lancelot_variant():
    with pytest.raises(InvalidConfigError):
        lookup_ruleset(7, "rule4")
    with pytest.raises(InvalidConfigError):
        parse_lancelot_variant("lancelot")


def test_parse_lancelot_variant():
    assert parse_lancelot_variant(None) is None
    assert parse_lancelot_variant("rule2") == LancelotVariant.RULE2
    assert parse_lancelot_variant(LancelotVariant.RULE3) == LancelotVariant.RULE3


def test_visibility_rules_for_variant():
    assert visibility_rules_for(None) == DEFAULT_VISIBILITY_RULES
    assert visibility_rules_for(LancelotVariant.RULE1) == DEFAULT_VISIBILITY_RULES
    rule3 = visibility_rules_for(LancelotVariant.RULE3)
    assert rule3 == DEFAULT_VISIBILITY_RULES + (LANCELOT_VISIBILITY_RULE,)
    # Computing it again from its own output does not add the rule twice
    assert visibility_rules_for(LancelotVariant.RULE3, rule3) == rule3


def test_rule3_ruleset_has_lancelot_visibility():
    assert LANCELOT_VISIBILITY_RULE in lookup_ruleset(7, "rule3").visibility_rules
    assert LANCELOT_VISIBILITY_RULE not in lookup_ruleset(7, "rule1").visibility_rules


def test_random_lancelot_switch_rule1():
    schedule = random_lancelot_switch(LancelotVariant.RULE1, ScriptedRandom())
    assert len(schedule) == 5
    assert schedule.count(True) == 2


def test_random_lancelot_switch_rule2_keeps_five_of_seven():
    rng = ScriptedRandom(shuffles=[[False, False, False, False, False, True, True]])
    assert random_lancelot_switch(LancelotVariant.RULE2, rng) == [False] * 5
    schedule = random_lancelot_switch(LancelotVariant.RULE2, ScriptedRandom())
    assert len(schedule) == 5
    assert schedule.count(True) == 2


def test_random_lancelot_switch_without_schedule():
    assert random_lancelot_switch(LancelotVariant.RULE3, ScriptedRandom()) is None
    assert random_lancelot_switch(None, ScriptedRandom()) is None


def test_ruleset_dict_round_trip():
    rule = replace(
        lookup_ruleset(8, "rule3"),
        has_lady_of_the_lake=True,
        enable_excalibur=True,
        team=TeamRule(7, TeamLimitMode.WHOLE_GAME),
    )
    data = json.loads(json.dumps(rule.to_dict()))
    assert data["team"] == {"max_proposals": 7, "mode": "whole"}
    assert data["lancelot"] == "rule3"
    assert Ruleset.from_dict(data) == rule
