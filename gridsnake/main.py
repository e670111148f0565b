"""Entry point for the asyncio based game server."""

from __future__ import annotations

import argparse
import asyncio
from contextlib import asynccontextmanager
import logging
from typing import AsyncIterator, Dict, Iterable, List, Optional, Set

import websockets
from websockets.asyncio.server import Server, ServerConnection, serve

from . import commands, handlers, protocol
from .config import GameConfig
from .context import GameContext
from .protocol import Outbound, ProtocolError
from .spawner import Spawner

logger = logging.getLogger(__name__)


class GameServer:
    """High level orchestration of the game state and websocket IO."""

    def __init__(self, config: Optional[GameConfig] = None, ctx: Optional[GameContext] = None) -> None:
        self.config = config or GameConfig()
        self.ctx = ctx or GameContext(self.config)
        self.ctx.sink = self._schedule_delivery
        self.clients: Dict[str, ServerConnection] = {}
        self.spawner = Spawner(self.ctx)
        self._deliveries: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """Start the websocket server and the background spawners."""

        async with self.running():
            await asyncio.Future()

    @asynccontextmanager
    async def running(self) -> AsyncIterator[Server]:
        self.spawner.start()
        try:
            async with serve(
                self._handle_client,
                self.config.host,
                self.config.port,
                ping_interval=self.config.ping_interval,
            ) as server:
                logger.info("Server listening on %s:%s", self.config.host, self.config.port)
                yield server
        finally:
            await self.spawner.stop()

    async def _handle_client(self, websocket: ServerConnection) -> None:
        player, events = handlers.connect(self.ctx)
        self.clients[player.id] = websocket
        await self.deliver(events)
        try:
            async for message in websocket:
                await self.deliver(self.process_message(player.id, message))
        except websockets.ConnectionClosed:
            logger.info("Connection for %s closed abruptly", player.id)
        finally:
            self.clients.pop(player.id, None)
            await self.deliver(handlers.disconnect(self.ctx, player.id))

    def process_message(self, player_id: str, message) -> List[Outbound]:
        """Turn one raw frame into the events it produces.

        Errors never escape: malformed frames are answered with ``error`` and
        unexpected failures are logged so the other players keep playing.
        """

        try:
            payload = protocol.parse_client_message(message)
            command = commands.parse_command(payload)
        except ProtocolError as exc:
            return [protocol.to_player(player_id, "error", {"message": str(exc)})]
        try:
            return handlers.handle_command(self.ctx, player_id, command)
        except Exception:
            logger.exception("Failed to handle %s from %s", payload.get("type"), player_id)
            return []

    def recipients(self, event: Outbound) -> Iterable[str]:
        if event.target == protocol.TO_PLAYER:
            return [event.recipient] if event.recipient in self.clients else []
        if event.target == protocol.TO_ALL:
            return list(self.clients)
        if event.target == protocol.TO_PLAYING:
            playing = {player.id for player in self.ctx.world.playing_players()}
            return [player_id for player_id in self.clients if player_id in playing]
        session = self.ctx.sessions.get(event.recipient)
        if session is None:
            return []
        return [member_id for member_id in session.member_ids() if member_id in self.clients]

    async def deliver(self, events: List[Outbound]) -> None:
        for event in events:
            payload = event.encode()
            for player_id in self.recipients(event):
                ws = self.clients.get(player_id)
                if ws is None:
                    continue
                try:
                    await ws.send(payload)
                except websockets.ConnectionClosed:
                    logger.info("Dropping %s, connection closed during send", player_id)
                    self.clients.pop(player_id, None)
                except Exception:
                    logger.exception("Failed to send %s to client %s", event.type, player_id)
                    self.clients.pop(player_id, None)
                    await ws.close()

    def _schedule_delivery(self, events: List[Outbound]) -> None:
        task = asyncio.get_running_loop().create_task(self.deliver(events))
        self._deliveries.add(task)
        task.add_done_callback(self._deliveries.discard)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the gridsnake game server")
    parser.add_argument("--host", default=None, help="Host interface to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument(
        "--min-update-interval",
        type=float,
        default=None,
        help="Minimum seconds between accepted movement ticks per player (0 disables)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> GameConfig:
    config = GameConfig.from_env()
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.min_update_interval is not None:
        config.min_update_interval = args.min_update_interval
    return config


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="[%(levelname)s] %(message)s")
    server = GameServer(build_config(args))
    try:
        asyncio.run(server.start())
    except KeyboardInterrupt:
        logger.info("Server stopped")


if __name__ == "__main__":
    main()
