"""
Game configuration and constants.
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..core.exceptions import InvalidConfigError
from ..core.roles import RoleKey
from ..core.rules import Ruleset, TeamLimitMode, TeamRule, lookup_ruleset


@dataclass
class GameConfig:
    """Configuration for game parameters."""

    # Table
    number_of_players: int = 5
    lady_of_the_lake: bool = False
    excalibur: bool = False
    lancelot: Optional[str] = None  # "rule1", "rule2", "rule3" or None

    # Team proposals
    max_team_proposals: int = 5
    team_limit_mode: str = "each"  # "each" (per quest) or "whole" (whole game)

    # Role whose assassination hands the game to evil
    recognizer: str = "merlin"

    # Runtime
    random_seed: Optional[int] = None  # Seed for roster, first leader, flip schedule and dummy agents
    log_level: str = "INFO"
    runs_dir: str = "runs"
    agent_type: str = "dummy_agent"
    use_announcements: bool = True

    def to_ruleset(self) -> Ruleset:
        """
        Build the ruleset this configuration describes.

        Raises:
            InvalidConfigError: Unsupported player count, unknown mode, variant or role
        """
        rule = lookup_ruleset(self.number_of_players, self.lancelot)
        if rule is None:
            raise InvalidConfigError(f"No ruleset for {self.number_of_players} players")
        try:
            mode = TeamLimitMode(self.team_limit_mode)
            recognizer = RoleKey(self.recognizer)
        except ValueError as e:
            raise InvalidConfigError(str(e))
        if self.max_team_proposals < 1:
            raise InvalidConfigError(
                f"max_team_proposals must be at least 1, got {self.max_team_proposals}"
            )
        return replace(
            rule,
            team=TeamRule(max_proposals=self.max_team_proposals, mode=mode),
            recognizer=recognizer,
            has_lady_of_the_lake=self.lady_of_the_lake,
            enable_excalibur=self.excalibur,
        )


# Default configuration instance
default_config = GameConfig()
