"""
Role definitions and alignments for the Avalon game.
"""

from enum import Enum
from typing import Iterable, List
from dataclasses import dataclass


class Alignment(Enum):
    """Player alignment."""
    GOOD = "good"
    EVIL = "evil"

    def flipped(self) -> "Alignment":
        return Alignment.EVIL if self == Alignment.GOOD else Alignment.GOOD


class RoleKey(Enum):
    """Role identifiers."""
    MERLIN = "merlin"
    PERCIVAL = "percival"
    LOYAL_SERVANT = "loyalServant"
    LANCELOT_GOOD = "lancelot_good"
    MORGANA = "morgana"
    ASSASSIN = "assassin"
    OBERON = "oberon"
    MORDRED = "mordred"
    MINION = "minion"
    LANCELOT_EVIL = "lancelot_evil"


@dataclass(frozen=True)
class Character:
    """A role together with the alignment it starts the game with."""
    key: RoleKey
    alignment: Alignment

    def __str__(self) -> str:
        return f"{self.key.value} ({self.alignment.value})"

    @property
    def is_lancelot(self) -> bool:
        return self.key in LANCELOT_ROLES


CHARACTERS = {
    RoleKey.MERLIN: Character(RoleKey.MERLIN, Alignment.GOOD),
    RoleKey.PERCIVAL: Character(RoleKey.PERCIVAL, Alignment.GOOD),
    RoleKey.LOYAL_SERVANT: Character(RoleKey.LOYAL_SERVANT, Alignment.GOOD),
    RoleKey.LANCELOT_GOOD: Character(RoleKey.LANCELOT_GOOD, Alignment.GOOD),
    RoleKey.MORGANA: Character(RoleKey.MORGANA, Alignment.EVIL),
    RoleKey.ASSASSIN: Character(RoleKey.ASSASSIN, Alignment.EVIL),
    RoleKey.OBERON: Character(RoleKey.OBERON, Alignment.EVIL),
    RoleKey.MORDRED: Character(RoleKey.MORDRED, Alignment.EVIL),
    RoleKey.MINION: Character(RoleKey.MINION, Alignment.EVIL),
    RoleKey.LANCELOT_EVIL: Character(RoleKey.LANCELOT_EVIL, Alignment.EVIL),
}

# Roles whose alignment can switch during the game
LANCELOT_ROLES = (RoleKey.LANCELOT_GOOD, RoleKey.LANCELOT_EVIL)


def get_character(key: RoleKey) -> Character:
    """Get the catalog entry for a role key."""
    return CHARACTERS[RoleKey(key)]


def roles_for(keys: Iterable[RoleKey]) -> List[Character]:
    """Resolve role keys to their catalog entries, preserving order."""
    return [get_character(key) for key in keys]


def get_evil_roles() -> List[RoleKey]:
    """Get all roles that start on the evil side."""
    return [c.key for c in CHARACTERS.values() if c.alignment == Alignment.EVIL]
