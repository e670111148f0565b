"""Player entity implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from . import constants
from .utils import Position


@dataclass
class Player:
    """Authoritative representation of a connected player and their snake."""

    id: str
    name: str
    snake: List[Position] = field(default_factory=list)
    direction: str = "RIGHT"
    score: int = 0
    speed_boost_percentage: float = 0.0
    is_playing: bool = False
    session_id: Optional[str] = None
    minimap_visible: bool = False
    minimap_timer: Optional[Any] = field(default=None, repr=False)
    last_update_at: Optional[float] = None

    @property
    def head(self) -> Position:
        return self.snake[0]

    def occupies(self, position: Position) -> bool:
        return position in self.snake

    def respawn(self, position: Position, reset_score: bool = False) -> None:
        """Put a fresh single-segment snake at ``position`` and mark it playing."""

        self.cancel_minimap_timer()
        self.snake = [position]
        self.is_playing = True
        self.last_update_at = None
        if reset_score:
            self.score = 0

    def kill(self) -> None:
        """Take the snake out of the simulation."""

        self.is_playing = False
        self.cancel_minimap_timer()

    def add_boost(self, amount: float) -> None:
        self.speed_boost_percentage = min(
            self.speed_boost_percentage + amount, constants.MAX_SPEED_BOOST
        )

    def drain_boost(self, amount: float) -> None:
        self.speed_boost_percentage = max(0.0, self.speed_boost_percentage - amount)

    def set_minimap_timer(self, handle: Any) -> None:
        """Show the minimap, replacing any countdown already running."""

        self.cancel_minimap_timer()
        self.minimap_visible = True
        self.minimap_timer = handle

    def cancel_minimap_timer(self) -> None:
        if self.minimap_timer is not None:
            self.minimap_timer.cancel()
            self.minimap_timer = None
        self.minimap_visible = False

    def to_snapshot(self) -> dict:
        """Return a snapshot representation for clients."""

        return {
            "id": self.id,
            "name": self.name,
            "snake": [segment.to_dict() for segment in self.snake],
            "direction": self.direction,
            "score": self.score,
            "speedBoostPercentage": self.speed_boost_percentage,
            "isPlaying": self.is_playing,
            "minimapVisible": self.minimap_visible,
            "sessionId": self.session_id,
        }
