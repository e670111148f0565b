"""Inbound client commands, one variant per message type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

from .protocol import ProtocolError


@dataclass(frozen=True)
class Spawn:
    player_name: Optional[str] = None


@dataclass(frozen=True)
class ChangeDirection:
    direction: str


@dataclass(frozen=True)
class Update:
    pass


@dataclass(frozen=True)
class SpeedBoost:
    pass


@dataclass(frozen=True)
class CreateSession:
    session_name: str
    visibility: str = "public"


@dataclass(frozen=True)
class JoinSession:
    code: str


@dataclass(frozen=True)
class LeaveSession:
    session_id: str


@dataclass(frozen=True)
class ToggleReady:
    session_id: str
    is_ready: bool


@dataclass(frozen=True)
class ToggleVisibility:
    session_id: str
    visibility: str


@dataclass(frozen=True)
class GetSessions:
    pass


Command = Union[
    Spawn,
    ChangeDirection,
    Update,
    SpeedBoost,
    CreateSession,
    JoinSession,
    LeaveSession,
    ToggleReady,
    ToggleVisibility,
    GetSessions,
]


def _text(payload: dict, key: str, default: str = "") -> str:
    value = payload.get(key, default)
    return value if isinstance(value, str) else str(value)


def _flag(payload: dict, key: str) -> bool:
    value = payload.get(key, False)
    if not isinstance(value, bool):
        raise ProtocolError(f"{key} must be a boolean")
    return value


_PARSERS: Dict[str, Callable[[dict], Command]] = {
    "spawn": lambda p: Spawn(player_name=p.get("playerName")),
    "direction": lambda p: ChangeDirection(direction=_text(p, "direction")),
    "update": lambda p: Update(),
    "speedBoost": lambda p: SpeedBoost(),
    "createSession": lambda p: CreateSession(
        session_name=_text(p, "sessionName"), visibility=_text(p, "visibility", "public")
    ),
    "joinSession": lambda p: JoinSession(code=_text(p, "code")),
    "leaveSession": lambda p: LeaveSession(session_id=_text(p, "sessionId")),
    "toggleReady": lambda p: ToggleReady(
        session_id=_text(p, "sessionId"), is_ready=_flag(p, "isReady")
    ),
    "toggleVisibility": lambda p: ToggleVisibility(
        session_id=_text(p, "sessionId"), visibility=_text(p, "visibility")
    ),
    "getSessions": lambda p: GetSessions(),
}


def parse_command(payload: dict) -> Command:
    """Turn a decoded client message into its command variant."""

    parser = _PARSERS.get(payload.get("type"))
    if parser is None:
        raise ProtocolError(f"Unknown message type: {payload.get('type')}")
    return parser(payload)
