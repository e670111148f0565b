"""Session (lobby) management."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
import time
import uuid
from typing import Callable, Dict, List, Optional

from . import constants, utils
from .world import World, WorldFullError

logger = logging.getLogger(__name__)

WAITING = "waiting"
PLAYING = "playing"
PUBLIC = "public"
PRIVATE = "private"
VISIBILITIES = (PUBLIC, PRIVATE)


class SessionError(Exception):
    """A lobby request that cannot be honoured. The message is shown to the client."""


@dataclass
class SessionMember:
    id: str
    name: str
    is_ready: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "isReady": self.is_ready}


@dataclass
class Session:
    """A group of players readying up before their snakes enter the world."""

    id: str
    code: str
    name: str
    host_id: str
    created_at: float
    visibility: str = PUBLIC
    status: str = WAITING
    players: List[SessionMember] = field(default_factory=list)

    def member(self, player_id: str) -> Optional[SessionMember]:
        for member in self.players:
            if member.id == player_id:
                return member
        return None

    def member_ids(self) -> List[str]:
        return [member.id for member in self.players]

    def all_ready(self) -> bool:
        return all(member.is_ready for member in self.players)

    def reset_ready(self) -> None:
        for member in self.players:
            member.is_ready = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "hostId": self.host_id,
            "players": [member.to_dict() for member in self.players],
            "status": self.status,
            "visibility": self.visibility,
            "createdAt": int(self.created_at * 1000),
        }


@dataclass
class LeaveResult:
    session: Session
    closed: bool


@dataclass
class ReadyResult:
    session: Session
    game_started: bool


class SessionTable:
    """Owns every live session and keeps rosters in sync with the world's players."""

    def __init__(
        self,
        world: World,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.world = world
        self.clock = clock
        self.rng = rng or world.rng
        self.sessions: Dict[str, Session] = {}

    def get(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def find_by_code(self, code: str) -> Optional[Session]:
        code = code.strip().upper()
        for session in self.sessions.values():
            if session.code == code:
                return session
        return None

    def public_sessions(self) -> List[Session]:
        return [s for s in self.sessions.values() if s.visibility == PUBLIC]

    def _new_code(self) -> str:
        live = {session.code for session in self.sessions.values()}
        while True:
            code = utils.random_code(self.rng)
            if code not in live:
                return code

    def _require(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionError("Session not found")
        return session

    def create_session(self, name: str, host_id: str, visibility: str = PUBLIC) -> Session:
        """Create a session hosted by ``host_id``, who joins it not ready."""

        if visibility not in VISIBILITIES:
            visibility = PUBLIC
        host = self.world.get_player(host_id)
        session = Session(
            id=uuid.uuid4().hex,
            code=self._new_code(),
            name=name,
            host_id=host_id,
            created_at=self.clock(),
            visibility=visibility,
        )
        session.players.append(SessionMember(id=host_id, name=host.name if host else "Host"))
        if host is not None:
            self._detach(host_id)
            host.session_id = session.id
        self.sessions[session.id] = session
        logger.info("Session %s (%s) created by %s", session.code, session.name, host_id)
        return session

    def join_session(self, code: str, player_id: str) -> Session:
        session = self.find_by_code(code)
        if session is None:
            raise SessionError("Session not found")
        if session.member(player_id) is not None:
            return session
        if session.status == PLAYING:
            raise SessionError("Game already in progress")
        player = self.world.get_player(player_id)
        if player is None:
            raise SessionError("Player not found")
        self._detach(player_id)
        session.players.append(SessionMember(id=player.id, name=player.name))
        player.session_id = session.id
        logger.info("Player %s joined session %s", player_id, session.code)
        return session

    def leave_session(self, session_id: str, player_id: str) -> LeaveResult:
        """Remove ``player_id``; migrate the host or delete an empty session."""

        session = self._require(session_id)
        member = session.member(player_id)
        if member is None:
            raise SessionError("Player not in session")
        session.players.remove(member)
        player = self.world.get_player(player_id)
        if player is not None and player.session_id == session.id:
            player.session_id = None

        if not session.players:
            del self.sessions[session.id]
            logger.info("Session %s closed", session.code)
            return LeaveResult(session=session, closed=True)
        if session.host_id == player_id:
            session.host_id = session.players[0].id
            logger.info("Session %s host is now %s", session.code, session.host_id)
        return LeaveResult(session=session, closed=False)

    def _detach(self, player_id: str) -> Optional[LeaveResult]:
        player = self.world.get_player(player_id)
        if player is None or player.session_id is None:
            return None
        if player.session_id not in self.sessions:
            player.session_id = None
            return None
        return self.leave_session(player.session_id, player_id)

    def toggle_ready(self, session_id: str, player_id: str, is_ready: bool) -> ReadyResult:
        """Update a ready flag and start the game once everyone is ready."""

        session = self._require(session_id)
        member = session.member(player_id)
        if member is None:
            raise SessionError("Player not in session")
        was_ready = member.is_ready
        member.is_ready = bool(is_ready)

        if (
            session.status == WAITING
            and len(session.players) >= constants.MIN_SESSION_PLAYERS
            and session.all_ready()
        ):
            try:
                self._start(session)
            except WorldFullError:
                member.is_ready = was_ready
                raise
            return ReadyResult(session=session, game_started=True)
        return ReadyResult(session=session, game_started=False)

    def _start(self, session: Session) -> None:
        players = [self.world.get_player(member_id) for member_id in session.member_ids()]
        players = [player for player in players if player is not None]
        # Pick every cell first so a full grid leaves the session untouched.
        positions = self.world.random_unoccupied_positions(len(players))
        session.status = PLAYING
        for player, position in zip(players, positions):
            player.respawn(position, reset_score=True)
        logger.info("Session %s started with %d players", session.code, len(session.players))

    def toggle_visibility(self, session_id: str, player_id: str, visibility: str) -> Session:
        session = self._require(session_id)
        if session.host_id != player_id:
            raise SessionError("Only the host can change visibility")
        if visibility not in VISIBILITIES:
            raise SessionError("Invalid visibility")
        session.visibility = visibility
        return session

    def settle_after_death(self, session_id: Optional[str]) -> Optional[Session]:
        """Return a playing session to the lobby once none of its snakes is alive.

        Returns the session when it was reverted, ``None`` otherwise.
        """

        if session_id is None:
            return None
        session = self.sessions.get(session_id)
        if session is None or session.status != PLAYING:
            return None
        for member_id in session.member_ids():
            player = self.world.get_player(member_id)
            if player is not None and player.is_playing:
                return None
        session.status = WAITING
        session.reset_ready()
        logger.info("Session %s is back in the lobby", session.code)
        return session

    def reap_expired(self, now: Optional[float] = None, max_age: float = constants.SESSION_MAX_AGE) -> List[Session]:
        """Delete sessions older than ``max_age`` seconds regardless of state."""

        now = self.clock() if now is None else now
        expired = [s for s in self.sessions.values() if now - s.created_at > max_age]
        for session in expired:
            del self.sessions[session.id]
            for member_id in session.member_ids():
                player = self.world.get_player(member_id)
                if player is not None and player.session_id == session.id:
                    player.session_id = None
            logger.info("Session %s expired", session.code)
        return expired
