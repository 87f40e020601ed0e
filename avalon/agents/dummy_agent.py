"""
Dummy Agent implementation with seeded random behavior.
"""

import random
from typing import List, Optional

from .base_agent import BaseAgent, AgentContext
from ..core import Player
from ..config.game_config import GameConfig, default_config


class DummyAgent(BaseAgent):
    """
    Simple dummy agent with random but reproducible behavior:
    - Leader: Put itself on the team and fill it with random seats
    - Team vote: Approve teams it is on, otherwise approve at random
    - Quest vote: Good always plays success, evil fails half of the time
    - Lady of the Lake / Assassin: Random eligible seat
    """

    def __init__(self, player: Player, config: GameConfig = default_config):
        super().__init__(player, config)
        seed = config.random_seed
        if seed is not None:
            # Combine seed with seat so every seat is different but reproducible
            self.random = random.Random(seed + player.seat)
        else:
            self.random = random.Random()

    def propose_team(self, context: AgentContext, size: int) -> List[int]:
        others = [p.seat for p in context.game.players if p.seat != self.player.seat]
        return [self.player.seat] + self.random.sample(others, size - 1)

    def vote_team(self, context: AgentContext, members: List[int]) -> bool:
        if self.player.seat in members:
            return True
        return self.random.random() < 0.5

    def vote_quest(self, context: AgentContext) -> bool:
        if self.player.is_good:
            return True
        return self.random.random() < 0.5

    def choose_lady_of_the_lake(self, context: AgentContext, candidates: List[int]) -> int:
        return self.random.choice(candidates)

    def choose_excalibur(self, context: AgentContext, members: List[int]) -> Optional[int]:
        others = [seat for seat in members if seat != self.player.seat]
        return self.random.choice(others) if others else None

    def choose_excalibur_target(self, context: AgentContext, members: List[int]) -> Optional[int]:
        others = [seat for seat in members if seat != self.player.seat]
        if not others or self.random.random() < 0.5:
            return None
        return self.random.choice(others)

    def choose_assassination_target(self, context: AgentContext) -> int:
        targets = [p.seat for p in context.game.players if p.seat != self.player.seat]
        return self.random.choice(targets)
