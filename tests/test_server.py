import asyncio
import json

from websockets.asyncio.client import connect

from gridsnake import protocol
from gridsnake.config import GameConfig
from gridsnake.main import GameServer, build_config, parse_args
from gridsnake.protocol import Outbound


class FakeConnection:
    def __init__(self):
        self.sent = []

    async def send(self, message):
        self.sent.append(json.loads(message))


def test_process_message_answers_protocol_errors():
    server = GameServer(GameConfig())
    events = server.process_message("player1", "{oops")
    assert [(e.type, e.recipient) for e in events] == [("error", "player1")]
    events = server.process_message("player1", json.dumps({"type": "fly"}))
    assert events[0].data["message"] == "Unknown message type: fly"


def test_deliver_routes_by_target():
    server = GameServer(GameConfig())
    world = server.ctx.world
    idle, playing, member = world.add_player(), world.add_player(), world.add_player()
    playing.is_playing = True
    session = server.ctx.sessions.create_session("Room", member.id)
    connections = {p.id: FakeConnection() for p in (idle, playing, member)}
    server.clients.update(connections)

    asyncio.run(
        server.deliver(
            [
                protocol.to_all("playerDeath", {"playerId": "x"}),
                protocol.to_playing("gameState", {}),
                protocol.to_session(session.id, "sessionUpdated", {}),
                protocol.to_player(idle.id, "gameOver", {}),
                Outbound(type="sessionUpdated", target=protocol.TO_SESSION, recipient="gone"),
            ]
        )
    )

    def types(player):
        return [message["type"] for message in connections[player.id].sent]

    assert types(idle) == ["playerDeath", "gameOver"]
    assert types(playing) == ["playerDeath", "gameState"]
    assert types(member) == ["playerDeath", "sessionUpdated"]


def test_build_config_overrides():
    config = build_config(parse_args(["--port", "4000", "--min-update-interval", "0.1"]))
    assert config.port == 4000
    assert config.min_update_interval == 0.1


async def _recv_until(ws, predicate, timeout=5.0):
    async def wait():
        while True:
            message = json.loads(await ws.recv())
            if predicate(message):
                return message

    return await asyncio.wait_for(wait(), timeout)


def _is(type, **fields):
    def check(message):
        if message["type"] != type:
            return False
        session = message["data"].get("session", {})
        return all(session.get(key) == value for key, value in fields.items())

    return check


def test_lobby_over_websockets():
    async def scenario():
        server = GameServer(GameConfig(host="127.0.0.1", port=0))
        async with server.running() as ws_server:
            port = next(iter(ws_server.sockets)).getsockname()[1]
            uri = f"ws://127.0.0.1:{port}"
            async with connect(uri) as alice, connect(uri) as bob:
                alice_id = (await _recv_until(alice, _is("init")))["data"]["playerId"]
                bob_id = (await _recv_until(bob, _is("init")))["data"]["playerId"]
                assert alice_id != bob_id

                await alice.send(json.dumps({"type": "createSession", "sessionName": "Room1", "visibility": "public"}))
                created = await _recv_until(alice, _is("sessionCreated"))
                code = created["data"]["session"]["code"]
                session_id = created["data"]["session"]["id"]
                assert len(code) == 6

                await bob.send(json.dumps({"type": "joinSession", "code": code}))
                for ws in (alice, bob):
                    message = await _recv_until(ws, _is("sessionUpdated"))
                    assert len(message["data"]["session"]["players"]) == 2

                for ws in (alice, bob):
                    await ws.send(json.dumps({"type": "toggleReady", "sessionId": session_id, "isReady": True}))
                for ws in (alice, bob):
                    message = await _recv_until(ws, _is("sessionUpdated", status="playing"))
                    players = message["data"]["players"]
                    assert {p["id"] for p in players} == {alice_id, bob_id}
                    assert all(p["score"] == 0 and len(p["snake"]) == 1 for p in players)

                await alice.send(json.dumps({"type": "getSessions"}))
                listed = await _recv_until(alice, _is("sessionsList"))
                assert [s["id"] for s in listed["data"]["sessions"]] == [session_id]

    asyncio.run(scenario())


def test_string_ready_flag_does_not_start_the_game():
    server = GameServer(GameConfig())
    world = server.ctx.world
    a, b = world.add_player(), world.add_player()
    session = server.ctx.sessions.create_session("Room", a.id)
    server.ctx.sessions.join_session(session.code, b.id)
    server.ctx.sessions.toggle_ready(session.id, a.id, True)

    frame = json.dumps({"type": "toggleReady", "sessionId": session.id, "isReady": "false"})
    events = server.process_message(b.id, frame)

    assert [(e.type, e.recipient) for e in events] == [("error", b.id)]
    assert session.status == "waiting"
    assert not session.member(b.id).is_ready
    assert not b.is_playing
