"""Application context shared by every handler."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, List, Optional

from .config import GameConfig
from .protocol import Outbound
from .session import SessionTable
from .world import World

Scheduler = Callable[[float, Callable[[], None]], Any]
Sink = Callable[[List[Outbound]], None]


class GameContext:
    """Bundles the world, the session table and the process services.

    Handlers receive the context explicitly instead of reaching for module
    globals. ``scheduler`` must return a handle with a ``cancel()`` method;
    it defaults to the running event loop's ``call_later``. ``sink`` receives
    events produced outside of a request, such as timer expiries.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        world: Optional[World] = None,
        sessions: Optional[SessionTable] = None,
        clock: Callable[[], float] = time.time,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.world = world or World()
        self.clock = clock
        self.sessions = sessions or SessionTable(self.world, clock=clock)
        self.scheduler = scheduler
        self.sink: Optional[Sink] = None

    def call_later(self, delay: float, callback: Callable[[], None]) -> Any:
        if self.scheduler is not None:
            return self.scheduler(delay, callback)
        return asyncio.get_running_loop().call_later(delay, callback)

    def emit(self, events: List[Outbound]) -> None:
        if events and self.sink is not None:
            self.sink(events)
