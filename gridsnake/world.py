"""Authoritative game world model."""

from __future__ import annotations

import itertools
import logging
import random
from typing import Dict, Iterable, Iterator, List, Optional

from . import constants, utils
from .items import Food, Portal, YellowDot
from .player import Player
from .utils import Position

logger = logging.getLogger(__name__)


class WorldFullError(RuntimeError):
    """Raised when no unoccupied cell is left on the grid."""


class World:
    """Holds every simulated entity: players, food, yellow dots and portals."""

    def __init__(self, rng: Optional[random.Random] = None, size: int = constants.GRID_SIZE) -> None:
        self.rng = rng or random.Random()
        self.size = size
        self.players: Dict[str, Player] = {}
        self.foods: List[Food] = []
        self.yellow_dots: List[YellowDot] = []
        self.portals: List[Portal] = []
        self._player_counter = itertools.count(1)

    # Players -----------------------------------------------------------------

    def add_player(self) -> Player:
        """Register a new, not yet playing, player on a free cell."""

        number = next(self._player_counter)
        player = Player(
            id=f"player{number}",
            name=f"Player {number}",
            snake=[self.random_unoccupied_position()],
        )
        self.players[player.id] = player
        return player

    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.players.pop(player_id, None)
        if player is not None:
            player.cancel_minimap_timer()
        return player

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.players.get(player_id)

    def playing_players(self) -> Iterator[Player]:
        return (player for player in self.players.values() if player.is_playing)

    # Occupancy ---------------------------------------------------------------

    def is_occupied(self, position: Position) -> bool:
        """Return ``True`` if any snake segment or item sits on ``position``."""

        for player in self.players.values():
            if player.occupies(position):
                return True
        return (
            any(food.position == position for food in self.foods)
            or any(dot.position == position for dot in self.yellow_dots)
            or any(portal.position == position for portal in self.portals)
        )

    def _occupied_cells(self) -> set:
        cells = set()
        for player in self.players.values():
            cells.update(player.snake)
        cells.update(food.position for food in self.foods)
        cells.update(dot.position for dot in self.yellow_dots)
        cells.update(portal.position for portal in self.portals)
        return cells

    def random_unoccupied_position(self, exclude: Iterable[Position] = ()) -> Position:
        """Return a free cell that is not in ``exclude``.

        Random sampling is tried ``MAX_SPAWN_ATTEMPTS`` times, after which the
        grid is scanned linearly starting from a random cell so a crowded
        board still yields a free cell if one exists.
        """

        excluded = set(exclude)
        for _ in range(constants.MAX_SPAWN_ATTEMPTS):
            position = utils.random_position(self.rng, self.size)
            if position not in excluded and not self.is_occupied(position):
                return position

        logger.warning("Random spawn search exhausted, scanning the grid")
        occupied = self._occupied_cells() | excluded
        total = self.size * self.size
        start = self.rng.randrange(total)
        for offset in range(total):
            index = (start + offset) % total
            position = Position(index % self.size, index // self.size)
            if position not in occupied:
                return position
        raise WorldFullError("No unoccupied cell left on the grid")

    def random_unoccupied_positions(self, count: int) -> List[Position]:
        """Return ``count`` distinct free cells."""

        chosen: List[Position] = []
        for _ in range(count):
            chosen.append(self.random_unoccupied_position(exclude=chosen))
        return chosen

    # Items -------------------------------------------------------------------

    def spawn_food(self) -> Optional[Food]:
        if len(self.foods) >= constants.MAX_FOOD:
            return None
        food = Food.spawn_at(self.random_unoccupied_position(), self.rng)
        self.foods.append(food)
        return food

    def spawn_portal(self) -> Portal:
        portal = Portal(self.random_unoccupied_position())
        self.portals.append(portal)
        return portal

    def spawn_yellow_dot(self) -> Optional[YellowDot]:
        if len(self.yellow_dots) >= constants.MAX_YELLOW_DOTS:
            return None
        dot = YellowDot(self.random_unoccupied_position())
        self.yellow_dots.append(dot)
        return dot

    def populate_initial(self) -> None:
        for _ in range(constants.INITIAL_FOOD_SPAWNS):
            self.spawn_food()
        for _ in range(constants.INITIAL_PORTAL_COUNT):
            self.spawn_portal()
        for _ in range(constants.INITIAL_YELLOW_DOTS):
            self.spawn_yellow_dot()

    def take_food_at(self, position: Position) -> Optional[Food]:
        return _take_at(self.foods, position)

    def take_portal_at(self, position: Position) -> Optional[Portal]:
        return _take_at(self.portals, position)

    def take_yellow_dot_at(self, position: Position) -> Optional[YellowDot]:
        return _take_at(self.yellow_dots, position)

    # Snapshots ---------------------------------------------------------------

    def snapshot(self) -> dict:
        return {
            "players": [player.to_snapshot() for player in self.players.values()],
            "foods": [food.to_dict() for food in self.foods],
            "yellowDots": [dot.to_dict() for dot in self.yellow_dots],
            "portals": [portal.to_dict() for portal in self.portals],
        }


def _take_at(items: list, position: Position):
    """Remove and return the first item of ``items`` placed on ``position``."""

    for index, item in enumerate(items):
        if item.position == position:
            return items.pop(index)
    return None
