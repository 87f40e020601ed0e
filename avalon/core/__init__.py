"""
Core game engine components: rulesets, roles, the quest ledger and the game state machine.
"""

from .exceptions import AvalonError, InvalidConfigError, IllegalStateError, InvalidInputError
from .roles import Alignment, RoleKey, Character, CHARACTERS, roles_for, get_character
from .player import Player
from .rules import (
    Ruleset, QuestRule, TeamRule, TeamLimitMode, LancelotVariant, VisibilityRule,
    lookup_ruleset, supported_player_counts, visibility_rules_for,
)
from .randomness import GameRandom
from .quest import Quest, QuestState, QuestResult, Team, TeamVote
from .game_engine import Game, GamePhase, GameResult, create_game

__all__ = [
    'AvalonError',
    'InvalidConfigError',
    'IllegalStateError',
    'InvalidInputError',
    'Alignment',
    'RoleKey',
    'Character',
    'CHARACTERS',
    'roles_for',
    'get_character',
    'Player',
    'Ruleset',
    'QuestRule',
    'TeamRule',
    'TeamLimitMode',
    'LancelotVariant',
    'VisibilityRule',
    'lookup_ruleset',
    'supported_player_counts',
    'visibility_rules_for',
    'GameRandom',
    'Quest',
    'QuestState',
    'QuestResult',
    'Team',
    'TeamVote',
    'Game',
    'GamePhase',
    'GameResult',
    'create_game',
]
