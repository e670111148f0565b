"""Runtime configuration for the game server."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping, Optional

from . import constants


@dataclass
class GameConfig:
    """Tunable server settings. Defaults mirror :mod:`gridsnake.constants`."""

    host: str = "0.0.0.0"
    port: int = 3001
    food_spawn_interval: float = constants.FOOD_SPAWN_INTERVAL
    portal_spawn_interval: float = constants.PORTAL_SPAWN_INTERVAL
    yellow_dot_spawn_interval: float = constants.YELLOW_DOT_SPAWN_INTERVAL
    broadcast_interval: float = constants.BROADCAST_INTERVAL
    session_reap_interval: float = constants.SESSION_REAP_INTERVAL
    session_max_age: float = constants.SESSION_MAX_AGE
    minimap_duration: int = constants.MINIMAP_DURATION
    # Seconds between accepted movement ticks per player. 0 disables the guard.
    min_update_interval: float = 0.0
    ping_interval: Optional[float] = 30.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Build a config from ``GRIDSNAKE_*`` environment variables."""

        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=env.get("GRIDSNAKE_HOST", defaults.host),
            port=int(env.get("GRIDSNAKE_PORT", defaults.port)),
            food_spawn_interval=float(
                env.get("GRIDSNAKE_FOOD_SPAWN_INTERVAL", defaults.food_spawn_interval)
            ),
            portal_spawn_interval=float(
                env.get("GRIDSNAKE_PORTAL_SPAWN_INTERVAL", defaults.portal_spawn_interval)
            ),
            yellow_dot_spawn_interval=float(
                env.get("GRIDSNAKE_YELLOW_DOT_SPAWN_INTERVAL", defaults.yellow_dot_spawn_interval)
            ),
            broadcast_interval=float(
                env.get("GRIDSNAKE_BROADCAST_INTERVAL", defaults.broadcast_interval)
            ),
            session_reap_interval=float(
                env.get("GRIDSNAKE_SESSION_REAP_INTERVAL", defaults.session_reap_interval)
            ),
            session_max_age=float(env.get("GRIDSNAKE_SESSION_MAX_AGE", defaults.session_max_age)),
            minimap_duration=int(env.get("GRIDSNAKE_MINIMAP_DURATION", defaults.minimap_duration)),
            min_update_interval=float(
                env.get("GRIDSNAKE_MIN_UPDATE_INTERVAL", defaults.min_update_interval)
            ),
        )
