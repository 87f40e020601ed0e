"""
Pytest fixtures for Avalon engine tests.
"""

import pytest
from dataclasses import replace
from typing import List, Optional, Sequence

from avalon.core import (
    Game, GamePhase, lookup_ruleset, create_game,
)
from avalon.config.game_config import GameConfig


class ScriptedRandom:
    """
    Deterministic stand-in for GameRandom.

    ``shuffle`` hands out the scripted orders in turn and then returns its input
    unchanged; ``uniform_int`` always returns ``leader``.
    """

    def __init__(self, leader: int = 0, shuffles: Optional[List[Sequence]] = None):
        self.leader = leader
        self.shuffles = list(shuffles or [])

    def shuffle(self, items):
        if self.shuffles:
            return list(self.shuffles.pop(0))
        return list(items)

    def uniform_int(self, low, high):
        assert low <= self.leader <= high
        return self.leader


def team_votes(number_of_players: int, approvals: int) -> List[bool]:
    """Seat-ordered team votes where the first ``approvals`` seats approve."""
    return [seat < approvals for seat in range(number_of_players)]


def play_quest(game: Game, success: bool = True, fails: Optional[int] = None) -> None:
    """Propose the first seats, approve unanimously and resolve the quest."""
    quest = game.in_progress_quest()
    size = quest.number_of_members
    game.propose_team(list(range(size)))
    game.vote_team([True] * game.number_of_players)
    if fails is None:
        fails = 0 if success else 1
    game.vote_quest([False] * fails + [True] * (size - fails))


def reject_team(game: Game) -> None:
    """Propose the first seats and reject them unanimously."""
    quest = game.in_progress_quest()
    game.propose_team(list(range(quest.number_of_members)))
    game.vote_team([False] * game.number_of_players)


@pytest.fixture
def rule5():
    """Default five-player ruleset."""
    return lookup_ruleset(5)


@pytest.fixture
def rule7():
    """Default seven-player ruleset."""
    return lookup_ruleset(7)


@pytest.fixture
def game5(rule5) -> Game:
    """
    Five-player game, first leader seat 0, roster in table order:
    0 merlin, 1 percival, 2 loyalServant, 3 morgana, 4 assassin.
    """
    return create_game(rule5, ScriptedRandom(leader=0))


@pytest.fixture
def game7(rule7) -> Game:
    """Seven-player game, first leader seat 0, roster in table order."""
    return create_game(rule7, ScriptedRandom(leader=0))


@pytest.fixture
def lady_game(rule5) -> Game:
    """Five-player game with Lady of the Lake; seat 4 holds it first."""
    return create_game(replace(rule5, has_lady_of_the_lake=True), ScriptedRandom(leader=0))


@pytest.fixture
def game_config(tmp_path):
    """Test game configuration."""
    return GameConfig(
        number_of_players=5,
        random_seed=1234,
        runs_dir=str(tmp_path / "runs"),
        use_announcements=False,  # Disable for cleaner test output
    )
