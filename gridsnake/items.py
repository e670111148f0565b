"""Consumable entities placed on the grid."""

from __future__ import annotations

from dataclasses import dataclass
import random
from typing import Dict, Optional, Union

from . import constants
from .utils import Position

NORMAL = "normal"
SPECIAL = "special"


@dataclass
class Food:
    """A food item. Special food is worth more and grows the snake further."""

    position: Position
    type: str = NORMAL

    @classmethod
    def spawn_at(cls, position: Position, rng: Optional[random.Random] = None) -> "Food":
        """Create food at ``position`` with a randomly rolled type."""

        rng = rng or random
        food_type = SPECIAL if rng.random() < constants.SPECIAL_FOOD_CHANCE else NORMAL
        return cls(position=position, type=food_type)

    @property
    def is_special(self) -> bool:
        return self.type == SPECIAL

    @property
    def points(self) -> int:
        if self.is_special:
            return constants.SPECIAL_FOOD_POINTS
        return constants.NORMAL_FOOD_POINTS

    def to_dict(self) -> Dict[str, Union[int, str]]:
        return {"x": self.position.x, "y": self.position.y, "type": self.type}


@dataclass
class YellowDot:
    """Reveals the minimap to whoever eats it."""

    position: Position

    def to_dict(self) -> Dict[str, int]:
        return self.position.to_dict()


@dataclass
class Portal:
    """Grants speed boost capacity to whoever eats it."""

    position: Position

    def to_dict(self) -> Dict[str, int]:
        return self.position.to_dict()
