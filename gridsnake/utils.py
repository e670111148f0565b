"""Utility primitives used by the authoritative game server."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Dict, Optional

from . import constants


@dataclass(frozen=True)
class Position:
    """An integer grid cell.

    Instances are immutable and hashable so they can be compared against
    snake segments and item positions and stored in sets when the world
    needs an occupancy lookup.
    """

    x: int
    y: int

    def __add__(self, other: "Position") -> "Position":
        return Position(self.x + other.x, self.y + other.y)

    def in_bounds(self, size: int = constants.GRID_SIZE) -> bool:
        """Return ``True`` if the cell lies inside a ``size`` x ``size`` grid."""

        return 0 <= self.x < size and 0 <= self.y < size

    def to_dict(self) -> Dict[str, int]:
        return {"x": self.x, "y": self.y}


DIRECTIONS: Dict[str, Position] = {
    "UP": Position(0, -1),
    "DOWN": Position(0, 1),
    "LEFT": Position(-1, 0),
    "RIGHT": Position(1, 0),
}


def is_direction(value: object) -> bool:
    return isinstance(value, str) and value in DIRECTIONS


def step(position: Position, direction: str) -> Position:
    """Return the cell next to ``position`` in ``direction``."""

    return position + DIRECTIONS[direction]


def random_position(rng: Optional[random.Random] = None, size: int = constants.GRID_SIZE) -> Position:
    """Return a uniformly random cell of the grid."""

    rng = rng or random
    return Position(rng.randrange(size), rng.randrange(size))


def random_code(
    rng: Optional[random.Random] = None,
    length: int = constants.SESSION_CODE_LENGTH,
    alphabet: str = constants.SESSION_CODE_ALPHABET,
) -> str:
    """Return a join code drawn from an alphabet without look-alike characters."""

    rng = rng or random
    return "".join(rng.choice(alphabet) for _ in range(length))
