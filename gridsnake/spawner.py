"""Periodic world population and session housekeeping."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List

from .context import GameContext
from .protocol import Outbound, to_player, to_playing
from .world import WorldFullError

logger = logging.getLogger(__name__)

Tick = Callable[[GameContext], List[Outbound]]


def spawn_food_tick(ctx: GameContext) -> List[Outbound]:
    try:
        ctx.world.spawn_food()
    except WorldFullError:
        logger.warning("Skipping food spawn, the grid is full")
    return []


def spawn_portal_tick(ctx: GameContext) -> List[Outbound]:
    try:
        ctx.world.spawn_portal()
    except WorldFullError:
        logger.warning("Skipping portal spawn, the grid is full")
    return []


def spawn_yellow_dot_tick(ctx: GameContext) -> List[Outbound]:
    try:
        ctx.world.spawn_yellow_dot()
    except WorldFullError:
        logger.warning("Skipping yellow dot spawn, the grid is full")
    return []


def reap_sessions_tick(ctx: GameContext) -> List[Outbound]:
    """Delete stale sessions and tell their remaining members."""

    events: List[Outbound] = []
    for session in ctx.sessions.reap_expired(max_age=ctx.config.session_max_age):
        for member_id in session.member_ids():
            events.append(to_player(member_id, "sessionClosed", {"sessionId": session.id}))
    return events


def broadcast_tick(ctx: GameContext) -> List[Outbound]:
    return [to_playing("gameState", ctx.world.snapshot())]


class Spawner:
    """Runs the background timers that keep the world stocked."""

    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self._tasks: List[asyncio.Task] = []

    def schedule(self) -> List[tuple]:
        config = self.ctx.config
        return [
            (config.food_spawn_interval, spawn_food_tick),
            (config.portal_spawn_interval, spawn_portal_tick),
            (config.yellow_dot_spawn_interval, spawn_yellow_dot_tick),
            (config.session_reap_interval, reap_sessions_tick),
            (config.broadcast_interval, broadcast_tick),
        ]

    def start(self) -> None:
        """Populate the world and start every periodic task on the running loop."""

        self.ctx.world.populate_initial()
        logger.info(
            "World populated with %d food, %d portals, %d yellow dots",
            len(self.ctx.world.foods),
            len(self.ctx.world.portals),
            len(self.ctx.world.yellow_dots),
        )
        for interval, tick in self.schedule():
            self._tasks.append(asyncio.create_task(self._every(interval, tick)))

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def _every(self, interval: float, tick: Tick) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                events = tick(self.ctx)
            except Exception:
                logger.exception("Periodic task %s failed", tick.__name__)
                continue
            self.ctx.emit(events)
