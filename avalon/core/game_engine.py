"""
Core game engine managing game state and phase transitions.
"""

import copy
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from .exceptions import IllegalStateError, InvalidConfigError, InvalidInputError
from . import lancelot
from .player import Player
from .quest import (
    Quest, QuestResult, QuestState, Team, TeamVote, create_next_team, create_quests,
    can_create_new_team, in_progress_quest, last_finished_quest, recent_team,
)
from .randomness import GameRandom
from .rules import (
    MIN_PLAYERS_FOR_LANCELOT, QUEST_COUNT, Ruleset, parse_lancelot_variant,
    random_lancelot_switch, visibility_rules_for,
)

logger = logging.getLogger(__name__)

WINS_NEEDED = 3


class GamePhase(Enum):
    """Current game stage."""
    TEAM = "team"
    QUEST = "quest"
    LADY_OF_THE_LAKE = "ladyOfTheLake"
    ASSASSINATE = "assassinate"
    END = "end"


class GameResult(Enum):
    """Final outcome."""
    GOOD_WIN = "goodWin"
    EVIL_WIN = "evilWin"


@dataclass
class Game:
    """Complete state of one game."""
    rule: Ruleset
    quests: List[Quest]
    players: List[Player]
    stage: GamePhase = GamePhase.TEAM
    result: Optional[GameResult] = None
    lancelot_switch: Optional[List[bool]] = None
    lancelot_applied: Optional[int] = None
    kill: Optional[int] = None

    # Operations applied so far, in order: [{"type", "stage", "data"}]
    action_log: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def number_of_players(self) -> int:
        return self.rule.number_of_players

    @property
    def is_over(self) -> bool:
        return self.stage == GamePhase.END

    def player(self, seat: int) -> Player:
        """Get player by seat."""
        self._check_seat(seat, "seat")
        return self.players[seat]

    def in_progress_quest(self) -> Optional[Quest]:
        return in_progress_quest(self.quests)

    def recent_team(self) -> Optional[Team]:
        return recent_team(self.quests)

    def success_count(self) -> int:
        return sum(1 for q in self.quests if q.result is not None and q.result.success)

    def failure_count(self) -> int:
        return sum(1 for q in self.quests if q.result is not None and not q.result.success)

    def lady_of_the_lake_holders(self) -> List[int]:
        """Every seat that has held Lady of the Lake, in quest order."""
        return [q.lady_of_the_lake for q in self.quests if q.lady_of_the_lake is not None]

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def propose_team(self, members: Sequence[int]) -> None:
        """
        Set the members of the current team.

        Raises:
            IllegalStateError: Outside the team stage or with no current team
            InvalidInputError: Wrong team size, unknown or repeated seat
        """
        self._require_stage(GamePhase.TEAM)
        quest, team = self._current_quest_and_team()
        members = list(members)
        if len(members) != quest.number_of_members:
            raise InvalidInputError(
                f"Team needs {quest.number_of_members} members, got {len(members)}"
            )
        for seat in members:
            self._check_seat(seat, "team member")
        if len(set(members)) != len(members):
            raise InvalidInputError(f"Duplicate team member in {members}")

        team.members = members
        if team.excalibur is not None and team.excalibur not in members:
            team.excalibur = None
        self._log_action("propose_team", {"members": list(members)})

    def vote_team(self, votes: Sequence[Union[TeamVote, bool]]) -> None:
        """
        Record the approval votes on the current team.

        ``votes`` holds one TeamVote per seat; plain booleans are taken in seat
        order. The team is approved when strictly more than half approve.

        Raises:
            IllegalStateError: Outside the team stage, or before members are proposed
            InvalidInputError: Non-bool votes, or not exactly one vote per seat
        """
        self._require_stage(GamePhase.TEAM)
        quest, team = self._current_quest_and_team()
        # Members must be proposed before anyone votes
        if not team.members:
            raise IllegalStateError("Cannot vote on a team whose members have not been proposed")
        votes = self._coerce_team_votes(votes)
        if len(votes) != self.number_of_players:
            raise InvalidInputError(
                f"Invalid vote count: expected {self.number_of_players}, got {len(votes)}"
            )
        if sorted(v.player for v in votes) != list(range(self.number_of_players)):
            raise InvalidInputError("Every seat must vote exactly once")

        team.votes = votes
        approved = team.approvals * 2 > self.number_of_players
        if approved:
            self.stage = GamePhase.QUEST
        elif not can_create_new_team(self.quests, self.rule):
            self._end(GameResult.EVIL_WIN, "team proposals exhausted")
        else:
            create_next_team(self.quests, self.rule)
            self._refresh_alignment()
        self._log_action("vote_team", {
            "votes": [v.to_dict() for v in votes],
            "approved": approved,
        })
        logger.debug("Team %s %s (%d/%d)", team.members,
                     "approved" if approved else "rejected",
                     team.approvals, self.number_of_players)

    def vote_quest(self, votes: Sequence[bool], excalibur_target: Optional[int] = None) -> None:
        """
        Record the mission votes of the approved team and resolve the quest.

        Args:
            votes: One vote per team member, in member order (True = success)
            excalibur_target: Seat whose vote was switched with Excalibur, if any
        """
        self._require_stage(GamePhase.QUEST)
        quest = self.in_progress_quest()
        if quest is None:
            raise IllegalStateError("No in progress quest")
        votes = list(votes)
        if len(votes) != quest.number_of_members:
            raise InvalidInputError(
                f"Invalid vote count: expected {quest.number_of_members}, got {len(votes)}"
            )
        if any(not isinstance(vote, bool) for vote in votes):
            raise InvalidInputError(f"Quest votes must be booleans, got {votes!r}")
        if excalibur_target is not None:
            if not self.rule.enable_excalibur:
                raise IllegalStateError("Excalibur is not enabled for this game")
            if quest.teams[-1].excalibur is None:
                raise InvalidInputError("Nobody on the team holds Excalibur")
            self._check_seat(excalibur_target, "excalibur target")

        idx = self.quests.index(quest)
        failures = sum(1 for vote in votes if not vote)
        failed = failures >= (2 if quest.need_two_failures else 1)
        if excalibur_target is not None:
            quest.excalibur_target = excalibur_target
        quest.result = QuestResult(success=not failed, votes=votes)
        quest.state = QuestState.FINISHED
        logger.info("Quest %d %s (%d fail votes)", idx + 1,
                    "failed" if failed else "succeeded", failures)

        if self.success_count() >= WINS_NEEDED:
            self.stage = GamePhase.ASSASSINATE
        elif self.failure_count() >= WINS_NEEDED:
            self._end(GameResult.EVIL_WIN, "three quests failed")
        elif (self.rule.has_lady_of_the_lake and idx >= 1
              and quest.next_lady_of_the_lake is None):
            self.stage = GamePhase.LADY_OF_THE_LAKE
        else:
            self._start_quest(idx + 1)
        self._log_action("vote_quest", {
            "votes": list(votes),
            "excalibur_target": excalibur_target,
            "success": not failed,
        })

    def set_next_lady_of_the_lake(self, seat: int) -> None:
        """
        Hand Lady of the Lake to ``seat`` and start the next quest.

        Raises:
            IllegalStateError: Outside the hand-off stage or before any quest finished
            InvalidInputError: Unknown seat, or a seat that already held it
        """
        self._require_stage(GamePhase.LADY_OF_THE_LAKE)
        finished = last_finished_quest(self.quests)
        if finished is None:
            raise IllegalStateError("No last finished quest")
        self._check_seat(seat, "lady of the lake")
        if seat in self.lady_of_the_lake_holders():
            raise InvalidInputError(f"Seat {seat} already held the lady of the lake")
        idx = self.quests.index(finished)
        if idx + 1 >= QUEST_COUNT:
            raise IllegalStateError("No quest left to hand the lady of the lake to")

        finished.next_lady_of_the_lake = seat
        self.quests[idx + 1].lady_of_the_lake = seat
        self._start_quest(idx + 1)
        self._log_action("set_next_lady_of_the_lake", {"seat": seat})

    def set_excalibur(self, seat: int) -> None:
        """Give Excalibur to ``seat`` on the current team."""
        self._require_stage(GamePhase.TEAM)
        if not self.rule.enable_excalibur:
            raise IllegalStateError("Excalibur is not enabled for this game")
        team = self.recent_team()
        if team is None:
            raise IllegalStateError("No recent team")
        self._check_seat(seat, "excalibur")

        team.excalibur = seat
        self._log_action("set_excalibur", {"seat": seat})

    def force_assassinate(self) -> None:
        """Jump straight to the assassination stage."""
        self.stage = GamePhase.ASSASSINATE
        self._log_action("force_assassinate", {})

    def assassinate(self, seat: int) -> None:
        """Name the assassination target and end the game."""
        self._require_stage(GamePhase.ASSASSINATE)
        self._check_seat(seat, "assassination target")

        self.kill = seat
        hit = self.players[seat].role == self.rule.recognizer
        self._end(GameResult.EVIL_WIN if hit else GameResult.GOOD_WIN,
                  "recognizer assassinated" if hit else "assassination missed")
        self._log_action("assassinate", {"seat": seat})

    def recalculate_alignment(self) -> None:
        """
        Re-derive the Lancelots' alignment from the flip schedule.

        Raises:
            IllegalStateError: If the game has no flip schedule
        """
        alignments, applied = lancelot.recalculate_alignment(
            self.players, self.quests, self.rule.lancelot,
            self.lancelot_switch, self.lancelot_applied or 0,
        )
        for player, alignment in zip(self.players, alignments):
            if player.alignment != alignment:
                logger.info("Seat %d switches to %s", player.seat, alignment.value)
                player.alignment = alignment
        self.lancelot_applied = applied

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_stage(self, stage: GamePhase) -> None:
        if self.stage != stage:
            raise IllegalStateError(
                f"Invalid stage: expected {stage.value}, game is in {self.stage.value}"
            )

    def _check_seat(self, seat: Any, what: str) -> None:
        if isinstance(seat, bool) or not isinstance(seat, int) \
                or not 0 <= seat < self.number_of_players:
            raise InvalidInputError(f"Invalid {what}: {seat!r}")

    def _current_quest_and_team(self):
        quest = self.in_progress_quest()
        if quest is None or not quest.teams:
            raise IllegalStateError("No in progress quest or team")
        return quest, quest.teams[-1]

    def _coerce_team_votes(self, votes: Sequence[Union[TeamVote, bool]]) -> List[TeamVote]:
        coerced = []
        for seat, vote in enumerate(votes):
            if isinstance(vote, TeamVote):
                if not isinstance(vote.vote, bool) or isinstance(vote.player, bool) \
                        or not isinstance(vote.player, int):
                    raise InvalidInputError(f"Invalid team vote: {vote!r}")
                coerced.append(TeamVote(player=vote.player, vote=vote.vote))
            elif isinstance(vote, bool):
                coerced.append(TeamVote(player=seat, vote=vote))
            else:
                raise InvalidInputError(f"Invalid team vote: {vote!r}")
        return coerced

    def _start_quest(self, idx: int) -> None:
        self.quests[idx].state = QuestState.IN_PROGRESS
        create_next_team(self.quests, self.rule)
        self._refresh_alignment()
        self.stage = GamePhase.TEAM
        logger.debug("Quest %d started, leader is seat %d", idx + 1, self.quests[idx].teams[-1].leader)

    def _refresh_alignment(self) -> None:
        if self.lancelot_switch is not None:
            self.recalculate_alignment()

    def _end(self, result: GameResult, reason: str) -> None:
        self.stage = GamePhase.END
        self.result = result
        logger.info("Game over: %s (%s)", result.value, reason)

    def _log_action(self, action_type: str, data: Dict[str, Any]) -> None:
        """Log a game action."""
        self.action_log.append({
            "type": action_type,
            "stage": self.stage.value,
            "data": data,
        })

    # ------------------------------------------------------------------
    # Summaries and serialization
    # ------------------------------------------------------------------

    def get_game_summary(self) -> Dict[str, Any]:
        """Get a summary of the current game state."""
        quest = self.in_progress_quest()
        team = self.recent_team()
        return {
            "stage": self.stage.value,
            "quest": self.quests.index(quest) + 1 if quest else None,
            "leader": team.leader if team else None,
            "successes": self.success_count(),
            "failures": self.failure_count(),
            "result": self.result.value if self.result else None,
            "kill": self.kill,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": self.rule.to_dict(),
            "quests": [q.to_dict() for q in self.quests],
            "players": [p.to_dict() for p in self.players],
            "stage": self.stage.value,
            "result": self.result.value if self.result else None,
            "lancelot_switch": list(self.lancelot_switch) if self.lancelot_switch is not None else None,
            "lancelot_applied": self.lancelot_applied,
            "kill": self.kill,
            "action_log": copy.deepcopy(self.action_log),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        switch = data.get("lancelot_switch")
        return cls(
            rule=Ruleset.from_dict(data["rule"]),
            quests=[Quest.from_dict(q) for q in data["quests"]],
            players=[Player.from_dict(p) for p in data["players"]],
            stage=GamePhase(data["stage"]),
            result=GameResult(data["result"]) if data.get("result") else None,
            lancelot_switch=list(switch) if switch is not None else None,
            lancelot_applied=data.get("lancelot_applied"),
            kill=data.get("kill"),
            action_log=copy.deepcopy(data.get("action_log", [])),
        )


def create_game(rule: Ruleset, rng: Optional[GameRandom] = None,
                roster: Optional[Sequence] = None) -> Game:
    """
    Create a new game from a ruleset.

    Args:
        rule: The ruleset to play
        rng: Random source (``shuffle`` and ``uniform_int``); a fresh GameRandom if None
        roster: Role keys by seat, used verbatim instead of shuffling ``rule.roles``

    Returns:
        A game in the team stage with the first team of quest 1 waiting for members

    Raises:
        InvalidConfigError: Bad Lancelot variant, too few players for Lancelot,
            or a roster / quest table that does not match the ruleset
    """
    variant = parse_lancelot_variant(rule.lancelot)
    if variant is not None and rule.number_of_players < MIN_PLAYERS_FOR_LANCELOT:
        raise InvalidConfigError(
            f"Invalid lancelot config: needs {MIN_PLAYERS_FOR_LANCELOT} players, "
            f"got {rule.number_of_players}"
        )
    if len(rule.quests) != QUEST_COUNT:
        raise InvalidConfigError(f"A ruleset needs {QUEST_COUNT} quests, got {len(rule.quests)}")
    if len(rule.roles) != rule.number_of_players:
        raise InvalidConfigError(
            f"Ruleset lists {len(rule.roles)} roles for {rule.number_of_players} players"
        )
    if roster is not None and len(roster) != rule.number_of_players:
        raise InvalidConfigError(
            f"Roster has {len(roster)} seats for {rule.number_of_players} players"
        )

    rng = rng or GameRandom()
    rule = replace(rule, lancelot=variant,
                   visibility_rules=visibility_rules_for(variant, rule.visibility_rules))
    roles = list(roster) if roster is not None else rng.shuffle(rule.roles)
    try:
        players = [Player.for_role(seat, role) for seat, role in enumerate(roles)]
    except (KeyError, ValueError):
        raise InvalidConfigError(f"Unknown role in roster: {roles}")
    first_leader = rng.uniform_int(0, rule.number_of_players - 1)
    switch = random_lancelot_switch(variant, rng)

    game = Game(
        rule=rule,
        quests=create_quests(rule, first_leader),
        players=players,
        lancelot_switch=switch,
        lancelot_applied=0 if switch is not None else None,
    )
    game._refresh_alignment()
    logger.info("Created %d-player game, first leader seat %d", rule.number_of_players, first_leader)
    return game
