"""Per-tick snake movement and consumption rules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import constants, utils
from .collision import Collision, classify_collision
from .items import Food
from .player import Player
from .world import World


@dataclass
class MoveResult:
    """What happened during one movement tick."""

    collision: Optional[Collision] = None
    food: Optional[Food] = None
    portal: bool = False
    yellow_dot: bool = False

    @property
    def died(self) -> bool:
        return self.collision is not None


def advance(world: World, player: Player) -> MoveResult:
    """Move ``player`` one cell along its direction.

    A fatal move only reports the collision; the caller takes the player out
    of play. Otherwise the head is prepended, items on the new cell are
    consumed and the tail is dropped unless food was eaten.
    """

    new_head = utils.step(player.head, player.direction)
    collision = classify_collision(world, player, new_head)
    if collision is not None:
        return MoveResult(collision=collision)

    result = MoveResult()
    new_snake = [new_head] + player.snake

    if world.take_portal_at(new_head) is not None:
        player.add_boost(constants.PORTAL_BOOST)
        result.portal = True

    if world.take_yellow_dot_at(new_head) is not None:
        result.yellow_dot = True

    food = world.take_food_at(new_head)
    if food is not None:
        player.score += food.points
        if food.is_special:
            for _ in range(constants.SPECIAL_FOOD_EXTRA_SEGMENTS):
                new_snake.append(new_snake[-1])
        result.food = food
    else:
        new_snake.pop()

    player.snake = new_snake
    return result


def apply_speed_boost(player: Player) -> None:
    """Burn one client-paced unit of speed boost."""

    if player.is_playing and player.speed_boost_percentage > 0:
        player.drain_boost(constants.SPEED_BOOST_DECAY)
