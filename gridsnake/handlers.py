"""Command handlers.

Each handler mutates the world or the session table synchronously and
returns the outbound events describing what changed. Nothing here awaits, so
a handler always runs to completion before the next message is processed.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Tuple

from . import commands, constants, movement, utils
from .collision import Collision
from .context import GameContext
from .player import Player
from .protocol import Outbound, to_all, to_player, to_playing, to_session
from .session import Session, SessionError
from .world import WorldFullError

logger = logging.getLogger(__name__)

Handler = Callable[[GameContext, Player, commands.Command], List[Outbound]]


def game_state(ctx: GameContext) -> Outbound:
    return to_playing("gameState", ctx.world.snapshot())


def session_updated(session: Session, **extra) -> Outbound:
    data = {"session": session.to_dict()}
    data.update(extra)
    return to_session(session.id, "sessionUpdated", data)


def session_error(player_id: str, message: str) -> Outbound:
    return to_player(player_id, "sessionError", {"message": message})


# Connection lifecycle ---------------------------------------------------------


def connect(ctx: GameContext) -> Tuple[Player, List[Outbound]]:
    """Register a new connection's player and greet it."""

    player = ctx.world.add_player()
    logger.info("Player %s connected", player.id)
    return player, [
        to_player(player.id, "init", {"playerId": player.id}),
        to_player(player.id, "gameState", ctx.world.snapshot()),
    ]


def disconnect(ctx: GameContext, player_id: str) -> List[Outbound]:
    """Drop a player, leaving its session first so the roster stays consistent."""

    player = ctx.world.get_player(player_id)
    if player is None:
        return []
    events: List[Outbound] = []
    session_id = player.session_id
    if session_id is not None and ctx.sessions.get(session_id) is not None:
        result = ctx.sessions.leave_session(session_id, player_id)
        ctx.world.remove_player(player_id)
        if not result.closed:
            ctx.sessions.settle_after_death(session_id)
            events.append(session_updated(result.session))
    else:
        ctx.world.remove_player(player_id)
    logger.info("Player %s disconnected", player_id)
    events.append(game_state(ctx))
    return events


def handle_command(ctx: GameContext, player_id: str, command: commands.Command) -> List[Outbound]:
    """Dispatch ``command`` issued by ``player_id``.

    Commands from players that no longer exist are ignored.
    """

    player = ctx.world.get_player(player_id)
    if player is None:
        return []
    handler = _HANDLERS[type(command)]
    return handler(ctx, player, command)


# Gameplay ----------------------------------------------------------------------


def _spawn(ctx: GameContext, player: Player, command: commands.Spawn) -> List[Outbound]:
    name = str(command.player_name or "").strip()[: constants.MAX_NAME_LENGTH]
    try:
        position = ctx.world.random_unoccupied_position()
    except WorldFullError:
        logger.warning("No room to spawn player %s", player.id)
        return [to_player(player.id, "error", {"message": "The world is full"})]
    if name:
        player.name = name
        _rename_in_session(ctx, player)
    player.respawn(position)
    return [game_state(ctx)]


def _rename_in_session(ctx: GameContext, player: Player) -> None:
    if player.session_id is None:
        return
    session = ctx.sessions.get(player.session_id)
    member = session.member(player.id) if session else None
    if member is not None:
        member.name = player.name


def _direction(ctx: GameContext, player: Player, command: commands.ChangeDirection) -> List[Outbound]:
    if player.is_playing and utils.is_direction(command.direction):
        player.direction = command.direction
    return []


def _update(ctx: GameContext, player: Player, command: commands.Update) -> List[Outbound]:
    if not player.is_playing:
        return []
    interval = ctx.config.min_update_interval
    now = ctx.clock()
    if interval > 0 and player.last_update_at is not None and now - player.last_update_at < interval:
        return []
    player.last_update_at = now

    result = movement.advance(ctx.world, player)
    if result.died:
        return _kill(ctx, player, result.collision)

    events: List[Outbound] = []
    if result.yellow_dot:
        events.append(_show_minimap(ctx, player))
    events.append(game_state(ctx))
    return events


def _kill(ctx: GameContext, player: Player, collision: Collision) -> List[Outbound]:
    player.kill()
    logger.info(collision.message)
    events = [
        to_all(
            "playerDeath",
            {
                "message": collision.message,
                "playerId": player.id,
                "killerId": collision.killer.id if collision.killer else None,
            },
        ),
        to_player(player.id, "gameOver", {"score": player.score, "message": collision.message}),
    ]
    session = ctx.sessions.settle_after_death(player.session_id)
    if session is not None:
        events.append(session_updated(session))
    events.append(game_state(ctx))
    return events


def _show_minimap(ctx: GameContext, player: Player) -> Outbound:
    duration = ctx.config.minimap_duration
    player_id = player.id
    handle = ctx.call_later(duration, lambda: ctx.emit(expire_minimap(ctx, player_id)))
    player.set_minimap_timer(handle)
    return to_player(player_id, "minimapUpdate", {"visible": True, "duration": duration, "reset": True})


def expire_minimap(ctx: GameContext, player_id: str) -> List[Outbound]:
    """Timer callback hiding the minimap once its window has elapsed."""

    player = ctx.world.get_player(player_id)
    if player is None:
        return []
    player.minimap_timer = None
    player.minimap_visible = False
    return [to_player(player_id, "minimapUpdate", {"visible": False, "duration": 0, "reset": False})]


def _speed_boost(ctx: GameContext, player: Player, command: commands.SpeedBoost) -> List[Outbound]:
    if not player.is_playing:
        return []
    movement.apply_speed_boost(player)
    return [game_state(ctx)]


# Sessions ------------------------------------------------------------------------


def _previous_session_events(
    ctx: GameContext, player_id: str, previous: Optional[str], current: str
) -> List[Outbound]:
    """Notify the session a player silently left by creating or joining another.

    When that session was deleted because the player was its last member, the
    player is told it closed instead.
    """

    if previous is None or previous == current:
        return []
    session = ctx.sessions.get(previous)
    if session is None:
        return [to_player(player_id, "sessionClosed", {"sessionId": previous})]
    ctx.sessions.settle_after_death(previous)
    return [session_updated(session)]


def _create_session(ctx: GameContext, player: Player, command: commands.CreateSession) -> List[Outbound]:
    previous = player.session_id
    name = command.session_name.strip() or f"{player.name}'s game"
    session = ctx.sessions.create_session(name, player.id, command.visibility)
    events = _previous_session_events(ctx, player.id, previous, session.id)
    events.append(to_player(player.id, "sessionCreated", {"session": session.to_dict()}))
    return events


def _join_session(ctx: GameContext, player: Player, command: commands.JoinSession) -> List[Outbound]:
    previous = player.session_id
    try:
        session = ctx.sessions.join_session(command.code, player.id)
    except SessionError as exc:
        return [session_error(player.id, str(exc))]
    events = _previous_session_events(ctx, player.id, previous, session.id)
    events.append(to_player(player.id, "sessionJoined", {"session": session.to_dict()}))
    events.append(session_updated(session))
    return events


def _leave_session(ctx: GameContext, player: Player, command: commands.LeaveSession) -> List[Outbound]:
    try:
        result = ctx.sessions.leave_session(command.session_id, player.id)
    except SessionError as exc:
        return [session_error(player.id, str(exc))]
    if result.closed:
        return [to_player(player.id, "sessionClosed", {"sessionId": result.session.id})]
    ctx.sessions.settle_after_death(result.session.id)
    return [
        to_player(player.id, "sessionUpdated", {"session": result.session.to_dict()}),
        session_updated(result.session),
    ]


def _toggle_ready(ctx: GameContext, player: Player, command: commands.ToggleReady) -> List[Outbound]:
    try:
        result = ctx.sessions.toggle_ready(command.session_id, player.id, command.is_ready)
    except SessionError as exc:
        return [session_error(player.id, str(exc))]
    except WorldFullError:
        logger.warning("No room to start session %s", command.session_id)
        return [session_error(player.id, "The world is full")]
    if not result.game_started:
        return [session_updated(result.session)]
    members = [ctx.world.get_player(member_id) for member_id in result.session.member_ids()]
    return [
        session_updated(
            result.session,
            gameStarted=True,
            players=[member.to_snapshot() for member in members if member is not None],
        ),
        game_state(ctx),
    ]


def _toggle_visibility(ctx: GameContext, player: Player, command: commands.ToggleVisibility) -> List[Outbound]:
    try:
        session = ctx.sessions.toggle_visibility(command.session_id, player.id, command.visibility)
    except SessionError as exc:
        return [session_error(player.id, str(exc))]
    return [session_updated(session)]


def _get_sessions(ctx: GameContext, player: Player, command: commands.GetSessions) -> List[Outbound]:
    sessions = [session.to_dict() for session in ctx.sessions.public_sessions()]
    return [to_player(player.id, "sessionsList", {"sessions": sessions})]


_HANDLERS: Dict[type, Handler] = {
    commands.Spawn: _spawn,
    commands.ChangeDirection: _direction,
    commands.Update: _update,
    commands.SpeedBoost: _speed_boost,
    commands.CreateSession: _create_session,
    commands.JoinSession: _join_session,
    commands.LeaveSession: _leave_session,
    commands.ToggleReady: _toggle_ready,
    commands.ToggleVisibility: _toggle_visibility,
    commands.GetSessions: _get_sessions,
}
