"""
Player class representing a seat at the table.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .roles import Alignment, RoleKey, get_character


@dataclass
class Player:
    """A seated player: a fixed role and a current alignment."""
    seat: int
    role: RoleKey
    alignment: Alignment

    def __str__(self) -> str:
        return f"Seat {self.seat} ({self.role.value}, {self.alignment.value})"

    @classmethod
    def for_role(cls, seat: int, role: RoleKey) -> "Player":
        """Seat a player with the role's starting alignment."""
        role = RoleKey(role)
        return cls(seat=seat, role=role, alignment=get_character(role).alignment)

    @property
    def is_evil(self) -> bool:
        return self.alignment == Alignment.EVIL

    @property
    def is_good(self) -> bool:
        return self.alignment == Alignment.GOOD

    @property
    def is_lancelot(self) -> bool:
        return get_character(self.role).is_lancelot

    @property
    def original_alignment(self) -> Alignment:
        """Alignment the role started the game with."""
        return get_character(self.role).alignment

    def to_dict(self) -> Dict[str, Any]:
        return {"seat": self.seat, "role": self.role.value, "alignment": self.alignment.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            seat=data["seat"],
            role=RoleKey(data["role"]),
            alignment=Alignment(data["alignment"]),
        )
