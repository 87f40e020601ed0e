"""
Rulesets: roster composition, quest sizes, team-proposal limits and variants.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from .exceptions import InvalidConfigError
from .roles import RoleKey

QUEST_COUNT = 5
MIN_PLAYERS_FOR_LANCELOT = 7


class TeamLimitMode(Enum):
    """Scope of the team-proposal limit."""
    PER_QUEST = "each"
    WHOLE_GAME = "whole"


class LancelotVariant(Enum):
    """Lancelot variants.

    RULE1 and RULE2 flip the Lancelots' alignment from a random schedule;
    RULE3 never flips, the two Lancelots only know each other.
    """
    RULE1 = "rule1"
    RULE2 = "rule2"
    RULE3 = "rule3"

    @property
    def uses_schedule(self) -> bool:
        return self in (LancelotVariant.RULE1, LancelotVariant.RULE2)


@dataclass(frozen=True)
class VisibilityRule:
    """Who can see whom at the start of the game. Never interpreted by the engine."""
    title: str
    characters: Tuple[RoleKey, ...]
    can_see: Tuple[RoleKey, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "characters": [r.value for r in self.characters],
            "can_see": [r.value for r in self.can_see],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VisibilityRule":
        return cls(
            title=data["title"],
            characters=tuple(RoleKey(r) for r in data["characters"]),
            can_see=tuple(RoleKey(r) for r in data["can_see"]),
        )


@dataclass(frozen=True)
class QuestRule:
    """Team size of one quest and whether it takes two fail votes to fail it."""
    number_of_members: int
    need_two_failures: bool = False


@dataclass(frozen=True)
class TeamRule:
    """How many teams may be proposed before evil wins by rejection."""
    max_proposals: int = 5
    mode: TeamLimitMode = TeamLimitMode.PER_QUEST


DEFAULT_VISIBILITY_RULES: Tuple[VisibilityRule, ...] = (
    VisibilityRule(
        title="Visible evil",
        characters=(RoleKey.MERLIN,),
        can_see=(RoleKey.MORGANA, RoleKey.MINION, RoleKey.ASSASSIN,
                 RoleKey.OBERON, RoleKey.LANCELOT_EVIL),
    ),
    VisibilityRule(
        title="Merlin or Morgana",
        characters=(RoleKey.PERCIVAL,),
        can_see=(RoleKey.MERLIN, RoleKey.MORGANA),
    ),
    VisibilityRule(
        title="Visible teammates",
        characters=(RoleKey.MORGANA, RoleKey.ASSASSIN, RoleKey.MORDRED, RoleKey.MINION),
        can_see=(RoleKey.MORGANA, RoleKey.ASSASSIN, RoleKey.MORDRED,
                 RoleKey.MINION, RoleKey.LANCELOT_EVIL),
    ),
)

LANCELOT_VISIBILITY_RULE = VisibilityRule(
    title="Each other",
    characters=(RoleKey.LANCELOT_GOOD, RoleKey.LANCELOT_EVIL),
    can_see=(RoleKey.LANCELOT_GOOD, RoleKey.LANCELOT_EVIL),
)


@dataclass(frozen=True)
class Ruleset:
    """Everything that stays fixed for the length of one game."""
    number_of_players: int
    roles: Tuple[RoleKey, ...]
    quests: Tuple[QuestRule, ...]
    team: TeamRule = field(default_factory=TeamRule)
    recognizer: RoleKey = RoleKey.MERLIN
    assassin: RoleKey = RoleKey.ASSASSIN
    has_lady_of_the_lake: bool = False
    enable_excalibur: bool = False
    lancelot: Optional[LancelotVariant] = None
    visibility_rules: Tuple[VisibilityRule, ...] = DEFAULT_VISIBILITY_RULES

    def quest_rule(self, index: int) -> QuestRule:
        return self.quests[index]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number_of_players": self.number_of_players,
            "roles": [r.value for r in self.roles],
            "quests": [
                {"number_of_members": q.number_of_members, "need_two_failures": q.need_two_failures}
                for q in self.quests
            ],
            "team": {"max_proposals": self.team.max_proposals, "mode": self.team.mode.value},
            "recognizer": self.recognizer.value,
            "assassin": self.assassin.value,
            "has_lady_of_the_lake": self.has_lady_of_the_lake,
            "enable_excalibur": self.enable_excalibur,
            "lancelot": self.lancelot.value if self.lancelot else None,
            "visibility_rules": [v.to_dict() for v in self.visibility_rules],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ruleset":
        return cls(
            number_of_players=data["number_of_players"],
            roles=tuple(RoleKey(r) for r in data["roles"]),
            quests=tuple(
                QuestRule(q["number_of_members"], q.get("need_two_failures", False))
                for q in data["quests"]
            ),
            team=TeamRule(data["team"]["max_proposals"], TeamLimitMode(data["team"]["mode"])),
            recognizer=RoleKey(data.get("recognizer", RoleKey.MERLIN.value)),
            assassin=RoleKey(data.get("assassin", RoleKey.ASSASSIN.value)),
            has_lady_of_the_lake=data.get("has_lady_of_the_lake", False),
            enable_excalibur=data.get("enable_excalibur", False),
            lancelot=parse_lancelot_variant(data.get("lancelot")),
            visibility_rules=tuple(VisibilityRule.from_dict(v) for v in data["visibility_rules"]),
        )


def parse_lancelot_variant(value: Any) -> Optional[LancelotVariant]:
    """Turn a variant name (or enum, or None) into a LancelotVariant."""
    if value is None or isinstance(value, LancelotVariant):
        return value
    try:
        return LancelotVariant(value)
    except ValueError:
        raise InvalidConfigError(f"Invalid lancelot config: {value!r}")


def visibility_rules_for(variant: Optional[LancelotVariant],
                         base: Tuple[VisibilityRule, ...] = DEFAULT_VISIBILITY_RULES
                         ) -> Tuple[VisibilityRule, ...]:
    """Visibility rules for a Lancelot variant (RULE3 lets the Lancelots see each other)."""
    if variant == LancelotVariant.RULE3 and LANCELOT_VISIBILITY_RULE not in base:
        return tuple(base) + (LANCELOT_VISIBILITY_RULE,)
    return tuple(base)


def random_lancelot_switch(variant: Optional[LancelotVariant], rng) -> Optional[List[bool]]:
    """
    Draw the per-game Lancelot flip schedule.

    RULE1 shuffles two switch cards among five; RULE2 shuffles two among
    seven and keeps the first five. Other variants have no schedule.
    """
    if variant == LancelotVariant.RULE1:
        return list(rng.shuffle([True, True, False, False, False]))
    if variant == LancelotVariant.RULE2:
        return list(rng.shuffle([True, True, False, False, False, False, False]))[:QUEST_COUNT]
    return None


def _q(*sizes: int, two_fail_on: Optional[int] = None) -> Tuple[QuestRule, ...]:
    return tuple(
        QuestRule(size, need_two_failures=(idx == two_fail_on))
        for idx, size in enumerate(sizes)
    )


M, P, LS, MG, A, O, MD, MN = (
    RoleKey.MERLIN, RoleKey.PERCIVAL, RoleKey.LOYAL_SERVANT, RoleKey.MORGANA,
    RoleKey.ASSASSIN, RoleKey.OBERON, RoleKey.MORDRED, RoleKey.MINION,
)

# {number_of_players: (roles, quests)}
DEFAULT_TABLES: Dict[int, Tuple[Tuple[RoleKey, ...], Tuple[QuestRule, ...]]] = {
    5: ((M, P, LS, MG, A), _q(2, 3, 2, 3, 3)),
    6: ((M, P, LS, LS, MG, A), _q(2, 3, 4, 3, 4)),
    7: ((M, P, LS, LS, MG, A, O), _q(2, 3, 3, 4, 4, two_fail_on=3)),
    8: ((M, P, LS, LS, LS, MG, A, MN), _q(3, 4, 4, 5, 5, two_fail_on=3)),
    9: ((M, P, LS, LS, LS, LS, MD, MG, A), _q(3, 4, 4, 5, 5, two_fail_on=3)),
    10: ((M, P, LS, LS, LS, LS, MD, MG, A, O), _q(3, 4, 4, 5, 5, two_fail_on=3)),
}

# Evil roles a Lancelot may stand in for, in order of preference
_REPLACEABLE_EVIL = (RoleKey.MINION, RoleKey.OBERON, RoleKey.MORDRED)


def supported_player_counts() -> List[int]:
    return sorted(DEFAULT_TABLES)


def _with_lancelots(roles: Tuple[RoleKey, ...]) -> Tuple[RoleKey, ...]:
    """Swap one loyal servant and one ordinary evil role for the two Lancelots."""
    swapped = list(roles)
    good_idx = len(swapped) - 1 - swapped[::-1].index(RoleKey.LOYAL_SERVANT)
    swapped[good_idx] = RoleKey.LANCELOT_GOOD
    for evil in _REPLACEABLE_EVIL:
        if evil in swapped:
            swapped[swapped.index(evil)] = RoleKey.LANCELOT_EVIL
            break
    return tuple(swapped)


def lookup_ruleset(number_of_players: int, lancelot: Any = None) -> Optional[Ruleset]:
    """
    Get the default ruleset for a number of players.

    Args:
        number_of_players: Seats at the table (5-10 are supported)
        lancelot: Optional Lancelot variant; adds the two Lancelots to the roster

    Returns:
        The Ruleset, or None when the player count is not supported

    Raises:
        InvalidConfigError: If the variant is unknown or needs more players
    """
    table = DEFAULT_TABLES.get(number_of_players)
    if table is None:
        return None
    variant = parse_lancelot_variant(lancelot)
    roles, quests = table
    if variant is not None:
        if number_of_players < MIN_PLAYERS_FOR_LANCELOT:
            raise InvalidConfigError(
                f"Lancelot needs at least {MIN_PLAYERS_FOR_LANCELOT} players, got {number_of_players}"
            )
        roles = _with_lancelots(roles)
    return Ruleset(
        number_of_players=number_of_players,
        roles=roles,
        quests=quests,
        lancelot=variant,
        visibility_rules=visibility_rules_for(variant),
    )
