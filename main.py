"""
Main game loop for Avalon simulation.
"""

import argparse
import logging
import random
import sys
from dataclasses import asdict, replace
from typing import Dict, List, Optional

from avalon.core import (
    AvalonError, Game, GamePhase, GameRandom, GameResult, Player, create_game,
)
from avalon.agents import AgentContext, BaseAgent, DummyAgent
from avalon.config.game_config import GameConfig, default_config
from avalon.config.config_loader import load_config
from avalon.recording import EventEmitter, RunRecorder

logger = logging.getLogger(__name__)


class AvalonGame:
    """Main game controller: asks each seat's agent for decisions and applies them."""

    def __init__(self, config: Optional[GameConfig] = None, event_emitter: Optional[EventEmitter] = None,
                 run_name: Optional[str] = None, record: bool = True):
        config = config or default_config
        # Generate seed if not provided, without touching the caller's config
        if config.random_seed is None:
            config = replace(config, random_seed=random.randint(0, 2**31 - 1))
        self.config = config

        # Build everything that can fail before a run directory is created
        self.rule = config.to_ruleset()
        self.game: Game = create_game(self.rule, GameRandom(config.random_seed))
        self.agents: Dict[int, BaseAgent] = {}
        self._emitted_actions = 0
        self._initialize_agents()

        self.run_recorder: Optional[RunRecorder] = None
        self.event_emitter: Optional[EventEmitter] = event_emitter
        if event_emitter is None and record:
            run_recorder = RunRecorder(runs_dir=config.runs_dir)
            run_name = run_recorder.create_run(run_name)
            self.event_emitter = EventEmitter(run_recorder)
            self.run_recorder = run_recorder
            print(f"Recording game to: {config.runs_dir}/{run_name}/")
        elif event_emitter is not None:
            self.run_recorder = event_emitter.run_recorder

    def _initialize_agents(self) -> None:
        """Initialize one agent per seat."""
        agent_type = self.config.agent_type.lower()
        for player in self.game.players:
            self.agents[player.seat] = self._create_agent(player, agent_type)

    def _create_agent(self, player: Player, agent_type: str) -> BaseAgent:
        """Create an agent of the specified type for a player."""
        if agent_type == "dummy_agent":
            return DummyAgent(player, self.config)
        raise ValueError(f"Unknown agent_type: {agent_type}. Must be 'dummy_agent'")

    def announce(self, message: str) -> None:
        """Make a moderator announcement."""
        if self.config.use_announcements:
            print(f"[MODERATOR] {message}")
        if self.event_emitter:
            self.event_emitter.emit_announcement(message, self.game.stage.value)

    def _context(self, seat: int) -> AgentContext:
        return self.agents[seat].build_context(self.game)

    def _flush_actions(self) -> None:
        """Emit the action-log entries recorded since the last flush."""
        if self.event_emitter:
            for action in self.game.action_log[self._emitted_actions:]:
                self.event_emitter.emit_action(action)
        self._emitted_actions = len(self.game.action_log)

    def _quest_number(self) -> Optional[int]:
        quest = self.game.in_progress_quest()
        return self.game.quests.index(quest) + 1 if quest else None

    # ------------------------------------------------------------------
    # Stage handlers
    # ------------------------------------------------------------------

    def _run_team_stage(self) -> None:
        quest = self.game.in_progress_quest()
        team = self.game.recent_team()
        leader = self.agents[team.leader]
        members = leader.propose_team(self._context(team.leader), quest.number_of_members)
        self.game.propose_team(members)
        self.announce(f"Seat {team.leader} proposes {members}.")

        if self.rule.enable_excalibur:
            holder = leader.choose_excalibur(self._context(team.leader), members)
            if holder is not None:
                self.game.set_excalibur(holder)
                self.announce(f"Seat {holder} receives Excalibur.")

        votes = [self.agents[seat].vote_team(self._context(seat), members)
                 for seat in range(self.rule.number_of_players)]
        self.game.vote_team(votes)
        approvals = [seat for seat, vote in enumerate(votes) if vote]
        self.announce(f"Approved by {approvals} ({len(approvals)}/{len(votes)}).")

    def _run_quest_stage(self) -> None:
        team = self.game.recent_team()
        votes = [self.agents[seat].vote_quest(self._context(seat)) for seat in team.members]
        target = None
        if team.excalibur is not None:
            target = self.agents[team.excalibur].choose_excalibur_target(
                self._context(team.excalibur), team.members)
        quest_number = self._quest_number()
        self.game.vote_quest(votes, excalibur_target=target)
        result = self.game.quests[quest_number - 1].result
        self.announce(
            f"Quest {quest_number} {'succeeds' if result.success else 'fails'} "
            f"with {result.failures} fail vote(s)."
        )

    def _run_lady_stage(self) -> None:
        holders = self.game.lady_of_the_lake_holders()
        holder = holders[-1]
        candidates = [seat for seat in range(self.rule.number_of_players) if seat not in holders]
        target = self.agents[holder].choose_lady_of_the_lake(self._context(holder), candidates)
        self.game.set_next_lady_of_the_lake(target)
        self.announce(f"Seat {holder} hands the Lady of the Lake to seat {target}.")

    def _run_assassinate_stage(self) -> None:
        assassin = self._assassin_seat()
        target = self.agents[assassin].choose_assassination_target(self._context(assassin))
        self.game.assassinate(target)
        self.announce(f"Seat {assassin} assassinates seat {target}.")

    def _assassin_seat(self) -> int:
        for player in self.game.players:
            if player.role == self.rule.assassin:
                return player.seat
        evil = [p.seat for p in self.game.players if p.is_evil]
        return evil[0]

    # ------------------------------------------------------------------
    # Game loop
    # ------------------------------------------------------------------

    def run_game(self) -> str:
        """
        Run the complete game until it ends.
        Returns the result name ("goodWin", "evilWin" or "Failed").
        """
        if self.event_emitter:
            self.event_emitter.emit_game_start(self.game, seed=self.config.random_seed)
            if self.run_recorder:
                self.run_recorder.save_metadata(self.game, asdict(self.config))

        print("=" * 60)
        print("AVALON - Starting")
        print("=" * 60)
        for player in self.game.players:
            print(f"  • {player}")
        print("=" * 60)

        handlers = {
            GamePhase.TEAM: self._run_team_stage,
            GamePhase.QUEST: self._run_quest_stage,
            GamePhase.LADY_OF_THE_LAKE: self._run_lady_stage,
            GamePhase.ASSASSINATE: self._run_assassinate_stage,
        }
        try:
            while not self.game.is_over:
                stage = self.game.stage
                handlers[stage]()
                self._flush_actions()
                if self.game.stage != stage and self.event_emitter:
                    self.event_emitter.emit_phase_change(self.game.stage.value, self._quest_number())
        except AvalonError as e:
            print(f"\n❌ FATAL ERROR: {e.message}")
            logger.error("Game aborted in stage %s: %s", self.game.stage.value, e.message)
            if self.event_emitter:
                self.event_emitter.emit_fatal_error(e.message, self.game.stage.value)
            return "Failed"

        if self.event_emitter:
            self.event_emitter.emit_game_over(
                self.game.result.value if self.game.result else None,
                self.game.kill,
                self.game.success_count(),
                self.game.failure_count(),
            )

        winner_name = "Good" if self.game.result == GameResult.GOOD_WIN else "Evil"
        print("\n" + "=" * 60)
        print(f"GAME OVER - {winner_name} WINS!")
        print("=" * 60)
        self._print_game_summary()
        return self.game.result.value

    def _print_game_summary(self) -> None:
        """Print a nicely formatted game summary."""
        print("\n📊 GAME SUMMARY")
        print("-" * 60)
        print(f"Result: {self.game.result.value if self.game.result else 'None'}")
        print(f"Random Seed: {self.config.random_seed}")
        print(f"Quests: {self.game.success_count()} succeeded, {self.game.failure_count()} failed")

        for number, quest in enumerate(self.game.quests, start=1):
            if not quest.is_finished:
                continue
            outcome = "success" if quest.result.success else "fail"
            print(f"  • Quest {number}: {outcome} - team {quest.teams[-1].members}, "
                  f"{len(quest.teams)} proposal(s)")

        if self.game.kill is not None:
            print(f"\nAssassinated: {self.game.players[self.game.kill]}")

        print("\nRoles:")
        for player in self.game.players:
            print(f"  • {player}")

    def get_game_summary(self) -> Dict:
        """Get final game summary as dictionary."""
        return {
            "result": self.game.result.value if self.game.result else None,
            "final_state": self.game.get_game_summary(),
            "action_log": self.game.action_log[-10:],  # Last 10 actions
        }


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for running a game."""
    parser = argparse.ArgumentParser(
        description="Run an Avalon game simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                   # Five players, default rules
  python main.py --config configs/lancelot_7.yaml  # Use a YAML config
  python main.py --players 8 --lady --excalibur    # Eight players with both items
  python main.py --players 7 --lancelot rule2 -s 42
        """
    )
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to YAML configuration file (default: use default config)")
    parser.add_argument("--seed", "-s", type=int, default=None,
                        help="Random seed for a reproducible game (generated and shown if omitted)")
    parser.add_argument("--players", "-p", type=int, default=None,
                        help="Number of players (5-10). Overrides config file setting.")
    parser.add_argument("--lancelot", choices=["rule1", "rule2", "rule3"], default=None,
                        help="Lancelot variant. Overrides config file setting.")
    parser.add_argument("--lady", action="store_true", help="Play with the Lady of the Lake")
    parser.add_argument("--excalibur", action="store_true", help="Play with Excalibur")
    parser.add_argument("--run-name", "-r", type=str, default=None,
                        help="Custom name for this run (default: auto-generated timestamp)")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config, overrides={
            "random_seed": args.seed,
            "number_of_players": args.players,
            "lancelot": args.lancelot,
            "lady_of_the_lake": args.lady or None,
            "excalibur": args.excalibur or None,
        })
    except AvalonError as e:
        print(f"Invalid configuration: {e.message}", file=sys.stderr)
        return 2

    logging.basicConfig(level=config.log_level.upper(),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    print("Avalon Game Simulation")
    print("=" * 60)
    if args.config:
        print(f"Using config: {args.config}")
    print(f"Players: {config.number_of_players}")
    print("=" * 60)

    try:
        game = AvalonGame(config=config, run_name=args.run_name)
    except AvalonError as e:
        print(f"Invalid configuration: {e.message}", file=sys.stderr)
        return 2

    result = game.run_game()

    if game.run_recorder:
        run_path = game.run_recorder.get_run_path()
        if run_path:
            print(f"\nGame events saved to: {run_path}")

    return 1 if result == "Failed" else 0


if __name__ == "__main__":
    sys.exit(main())
