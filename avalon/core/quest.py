"""
Quest and team ledger: the five quests and every team proposed for them.
"""

from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .exceptions import IllegalStateError, InvalidInputError
from .rules import QUEST_COUNT, Ruleset, TeamLimitMode


class QuestState(Enum):
    """Lifecycle of a quest."""
    NOT_STARTED = "notStarted"
    IN_PROGRESS = "inProgress"
    FINISHED = "finished"


@dataclass
class TeamVote:
    """One player's approval vote on a proposed team."""
    player: int
    vote: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"player": self.player, "vote": self.vote}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TeamVote":
        return cls(player=data["player"], vote=data["vote"])


@dataclass
class Team:
    """A proposed team: its leader, members, votes and Excalibur holder."""
    leader: int
    members: List[int] = field(default_factory=list)
    votes: List[TeamVote] = field(default_factory=list)
    excalibur: Optional[int] = None

    @property
    def approvals(self) -> int:
        return sum(1 for v in self.votes if v.vote)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leader": self.leader,
            "members": list(self.members),
            "votes": [v.to_dict() for v in self.votes],
            "excalibur": self.excalibur,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        return cls(
            leader=data["leader"],
            members=list(data.get("members", [])),
            votes=[TeamVote.from_dict(v) for v in data.get("votes", [])],
            excalibur=data.get("excalibur"),
        )


@dataclass
class QuestResult:
    """Outcome of a quest; votes are ordered by team member, not by seat."""
    success: bool
    votes: List[bool]

    @property
    def failures(self) -> int:
        return sum(1 for v in self.votes if not v)


@dataclass
class Quest:
    """One of the five quests."""
    number_of_members: int
    need_two_failures: bool = False
    state: QuestState = QuestState.NOT_STARTED
    teams: List[Team] = field(default_factory=list)
    result: Optional[QuestResult] = None
    lady_of_the_lake: Optional[int] = None
    next_lady_of_the_lake: Optional[int] = None
    excalibur_target: Optional[int] = None

    @property
    def is_finished(self) -> bool:
        return self.state == QuestState.FINISHED

    @property
    def has_started(self) -> bool:
        return self.state != QuestState.NOT_STARTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "number_of_members": self.number_of_members,
            "need_two_failures": self.need_two_failures,
            "state": self.state.value,
            "teams": [t.to_dict() for t in self.teams],
            "result": (
                {"success": self.result.success, "votes": list(self.result.votes)}
                if self.result else None
            ),
            "lady_of_the_lake": self.lady_of_the_lake,
            "next_lady_of_the_lake": self.next_lady_of_the_lake,
            "excalibur_target": self.excalibur_target,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quest":
        result = data.get("result")
        return cls(
            number_of_members=data["number_of_members"],
            need_two_failures=data.get("need_two_failures", False),
            state=QuestState(data["state"]),
            teams=[Team.from_dict(t) for t in data.get("teams", [])],
            result=QuestResult(result["success"], list(result["votes"])) if result else None,
            lady_of_the_lake=data.get("lady_of_the_lake"),
            next_lady_of_the_lake=data.get("next_lady_of_the_lake"),
            excalibur_target=data.get("excalibur_target"),
        )


def previous_seat(seat: int, number_of_players: int) -> int:
    """Seat counter-clockwise of ``seat``."""
    return (seat + number_of_players - 1) % number_of_players


def next_seat(seat: int, number_of_players: int) -> int:
    """Seat clockwise of ``seat``."""
    return (seat + 1) % number_of_players


def create_quests(rule: Ruleset, leader: int) -> List[Quest]:
    """
    Create the five quests of a new game.

    The first quest starts in progress with one (empty) team led by ``leader``.
    With Lady of the Lake the seat counter-clockwise of the leader holds it first.
    """
    if leader < 0 or leader >= rule.number_of_players:
        raise InvalidInputError(f"Invalid leader parameter: {leader}")
    quests = []
    for idx in range(QUEST_COUNT):
        quest_rule = rule.quest_rule(idx)
        quests.append(Quest(
            number_of_members=quest_rule.number_of_members,
            need_two_failures=quest_rule.need_two_failures,
            state=QuestState.IN_PROGRESS if idx == 0 else QuestState.NOT_STARTED,
            teams=[Team(leader=leader)] if idx == 0 else [],
        ))
    if rule.has_lady_of_the_lake:
        quests[0].lady_of_the_lake = previous_seat(leader, rule.number_of_players)
    return quests


def in_progress_quest(quests: List[Quest]) -> Optional[Quest]:
    """The quest currently in progress, if any."""
    for quest in quests:
        if quest.state == QuestState.IN_PROGRESS:
            return quest
    return None


def last_finished_quest(quests: List[Quest]) -> Optional[Quest]:
    """The highest-index finished quest, if any."""
    for quest in reversed(quests):
        if quest.state == QuestState.FINISHED:
            return quest
    return None


def first_unstarted_quest(quests: List[Quest]) -> Optional[Quest]:
    """The lowest-index quest that has not started, if any."""
    for quest in quests:
        if quest.state == QuestState.NOT_STARTED:
            return quest
    return None


def recent_team(quests: List[Quest]) -> Optional[Team]:
    """
    The most recent team.

    That is the last team of the quest in progress, or, while the next quest
    has no team yet, the last team of the most recently finished quest.
    """
    quest = in_progress_quest(quests)
    if quest and quest.teams:
        return quest.teams[-1]
    finished = last_finished_quest(quests)
    if finished and finished.teams:
        return finished.teams[-1]
    return None


def rejected_team_count(quests: List[Quest]) -> int:
    """Teams rejected so far, counting the in-progress quest's teams in full."""
    count = 0
    for quest in quests:
        if quest.state == QuestState.FINISHED:
            count += len(quest.teams) - 1
        elif quest.state == QuestState.IN_PROGRESS:
            count += len(quest.teams)
    return count


def can_create_new_team(quests: List[Quest], rule: Ruleset) -> bool:
    """Whether the team-proposal limit still allows another team."""
    limit = rule.team.max_proposals
    if rule.team.mode == TeamLimitMode.PER_QUEST:
        quest = in_progress_quest(quests)
        if quest is None:
            return first_unstarted_quest(quests) is not None
        return len(quest.teams) < limit
    return rejected_team_count(quests) < limit


def create_next_team(quests: List[Quest], rule: Ruleset) -> Team:
    """Append a team to the quest in progress, led by the next seat clockwise."""
    if not can_create_new_team(quests, rule):
        raise IllegalStateError("Cannot create new team")
    quest = in_progress_quest(quests)
    if quest is None:
        raise IllegalStateError("No quest in progress")
    team = recent_team(quests)
    if team is None:
        raise IllegalStateError("No team in progress")
    new_team = Team(leader=next_seat(team.leader, rule.number_of_players))
    quest.teams.append(new_team)
    return new_team
