"""
Lancelot alignment switching.

The schedule is drawn once per game and consumed positionally. After every
change to the set of teams or started quests the number of switches that
should have happened so far is recomputed; when its parity differs from the
switches already applied, both Lancelots change sides.
"""

from typing import List, Optional, Sequence, Tuple

from .exceptions import IllegalStateError
from .player import Player
from .quest import Quest
from .roles import Alignment
from .rules import LancelotVariant

# RULE1 starts drawing from the third quest
RULE1_FIRST_QUEST = 2


def consumed_slots(quests: Sequence[Quest], variant: Optional[LancelotVariant]) -> int:
    """How many schedule slots the game has reached."""
    if variant == LancelotVariant.RULE1:
        return sum(len(q.teams) for q in quests[RULE1_FIRST_QUEST:])
    if variant == LancelotVariant.RULE2:
        return sum(1 for q in quests if q.has_started)
    return 0


def desired_flip_count(quests: Sequence[Quest], variant: Optional[LancelotVariant],
                       schedule: Sequence[bool]) -> int:
    """Number of switch cards revealed so far."""
    return sum(1 for flip in schedule[:consumed_slots(quests, variant)] if flip)


def recalculate_alignment(players: Sequence[Player], quests: Sequence[Quest],
                          variant: Optional[LancelotVariant],
                          schedule: Optional[Sequence[bool]],
                          applied: int) -> Tuple[List[Alignment], int]:
    """
    Recompute every player's alignment.

    Args:
        players: The roster (read only)
        quests: The quest ledger (read only)
        variant: The game's Lancelot variant
        schedule: The game's flip schedule
        applied: Switches already applied to ``players``

    Returns:
        (alignments by seat, switches applied after this call)

    Raises:
        IllegalStateError: If the game has no flip schedule
    """
    if schedule is None:
        raise IllegalStateError("No lancelot switch schedule")
    desired = desired_flip_count(quests, variant, schedule)
    toggle = desired % 2 != applied % 2
    alignments = [
        p.alignment.flipped() if toggle and p.is_lancelot else p.alignment
        for p in players
    ]
    return alignments, desired if toggle else applied
