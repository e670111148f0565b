"""JSON protocol helpers for the websocket transport."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Dict, Optional

# Delivery targets for outbound events.
TO_PLAYER = "player"
TO_ALL = "all"
TO_PLAYING = "playing"
TO_SESSION = "session"


class ProtocolError(ValueError):
    """Raised for frames the server cannot interpret."""


@dataclass
class Outbound:
    """A message waiting to be delivered to one or more connections.

    ``target`` selects the audience: a single player (``recipient`` is the
    player id), every connection, every playing connection, or the members of
    a session (``recipient`` is the session id).
    """

    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    target: str = TO_PLAYER
    recipient: Optional[str] = None

    def encode(self) -> str:
        return encode_message(self.type, self.data)


def to_player(player_id: str, type: str, data: Optional[Dict[str, Any]] = None) -> Outbound:
    return Outbound(type=type, data=data or {}, target=TO_PLAYER, recipient=player_id)


def to_session(session_id: str, type: str, data: Optional[Dict[str, Any]] = None) -> Outbound:
    return Outbound(type=type, data=data or {}, target=TO_SESSION, recipient=session_id)


def to_all(type: str, data: Optional[Dict[str, Any]] = None) -> Outbound:
    return Outbound(type=type, data=data or {}, target=TO_ALL)


def to_playing(type: str, data: Optional[Dict[str, Any]] = None) -> Outbound:
    return Outbound(type=type, data=data or {}, target=TO_PLAYING)


def parse_client_message(message: str) -> dict:
    """Parse a raw client ``message`` into a Python dictionary."""

    try:
        payload = json.loads(message)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ProtocolError("Invalid client message") from exc
    if not isinstance(payload, dict):
        raise ProtocolError("Client message must be a JSON object")
    if not isinstance(payload.get("type"), str):
        raise ProtocolError("Client message is missing a type")
    return payload


def encode_message(type: str, data: Dict[str, Any]) -> str:
    """Encode a ``{type, data}`` envelope."""

    return json.dumps({"type": type, "data": data})
