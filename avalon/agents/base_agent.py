"""
Base agent interface for Avalon players.
"""

from typing import Any, Dict, List, Optional
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..core import Game, GamePhase, Player
from ..config.game_config import GameConfig, default_config


@dataclass
class AgentContext:
    """Context information provided to an agent."""
    player: Player
    game: Game
    public_history: List[Dict[str, Any]]
    current_stage: GamePhase
    available_actions: List[str]


class BaseAgent(ABC):
    """
    Abstract base class for all player agents.

    This defines the decisions a seat has to make during a game; the
    controller turns them into engine actions.
    """

    def __init__(self, player: Player, config: GameConfig = default_config):
        """
        Initialize the agent.

        Args:
            player: The player this agent represents
            config: Game configuration
        """
        self.player = player
        self.config = config

    @abstractmethod
    def propose_team(self, context: AgentContext, size: int) -> List[int]:
        """
        Pick the members of a team while leading.

        Args:
            context: Current game context
            size: Number of members the quest needs

        Returns:
            Seats of the proposed members
        """
        pass

    @abstractmethod
    def vote_team(self, context: AgentContext, members: List[int]) -> bool:
        """Approve (True) or reject (False) the proposed team."""
        pass

    @abstractmethod
    def vote_quest(self, context: AgentContext) -> bool:
        """Play success (True) or fail (False) while on a quest."""
        pass

    @abstractmethod
    def choose_lady_of_the_lake(self, context: AgentContext, candidates: List[int]) -> int:
        """Pick the next holder of Lady of the Lake among ``candidates``."""
        pass

    @abstractmethod
    def choose_assassination_target(self, context: AgentContext) -> int:
        """Name the seat believed to be Merlin."""
        pass

    def choose_excalibur(self, context: AgentContext, members: List[int]) -> Optional[int]:
        """Hand Excalibur to one of the members, or keep it out of play."""
        return None

    def choose_excalibur_target(self, context: AgentContext, members: List[int]) -> Optional[int]:
        """Name the member whose quest vote is switched, if any."""
        return None

    def build_context(self, game: Game) -> AgentContext:
        """
        Build context for the agent.

        Args:
            game: Current game

        Returns:
            AgentContext with all relevant information
        """
        return AgentContext(
            player=self.player,
            game=game,
            public_history=list(game.action_log),
            current_stage=game.stage,
            available_actions=self._get_available_actions(game),
        )

    def _get_available_actions(self, game: Game) -> List[str]:
        """Actions this seat may take in the current stage."""
        team = game.recent_team()
        is_leader = team is not None and team.leader == self.player.seat
        if game.stage == GamePhase.TEAM:
            actions = ["vote_team"]
            if is_leader:
                actions.insert(0, "propose_team")
                if game.rule.enable_excalibur:
                    actions.append("set_excalibur")
            return actions
        if game.stage == GamePhase.QUEST:
            return ["vote_quest"] if team and self.player.seat in team.members else []
        if game.stage == GamePhase.LADY_OF_THE_LAKE:
            finished = [q for q in game.quests if q.is_finished]
            holder = finished[-1].lady_of_the_lake if finished else None
            return ["set_next_lady_of_the_lake"] if holder == self.player.seat else []
        if game.stage == GamePhase.ASSASSINATE:
            return ["assassinate"] if self.player.role == game.rule.assassin else []
        return []
