"""Collision classification for the game server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .player import Player
from .utils import Position
from .world import World

SUICIDE = "suicide"
KILLED = "killed"


@dataclass
class Collision:
    """Outcome of a fatal move."""

    type: str
    cause: str
    message: str
    killer: Optional[Player] = None


def classify_collision(world: World, player: Player, new_head: Position) -> Optional[Collision]:
    """Return the collision caused by moving ``player``'s head to ``new_head``.

    Checks run in precedence order: wall, own body (the current head is
    excluded), then any other playing snake. Other snakes are read from the
    live world so ticks from different connections see each other.
    """

    if not new_head.in_bounds(world.size):
        return Collision(
            type=SUICIDE,
            cause="wall",
            message=f"{player.name} committed suicide by hitting the wall",
        )

    if new_head in player.snake[1:]:
        return Collision(
            type=SUICIDE,
            cause="tail",
            message=f"{player.name} committed suicide by eating their own tail",
        )

    for other in world.playing_players():
        if other.id == player.id:
            continue
        if other.occupies(new_head):
            return Collision(
                type=KILLED,
                cause="player",
                message=f"{player.name} got killed by {other.name}",
                killer=other,
            )
    return None
