"""Shared fixtures for DeServer client tests."""

import json

import httpx
import pytest

from deserver_client.animation import AnimationScheduler
from deserver_client.commands import CommandInterpreter
from deserver_client.config import ClientConfig
from deserver_client.logging import bind_identity
from deserver_client.sync.client import SessionClient
from deserver_client.sync.state import Identity, SessionContext
from deserver_client.world import (
    Capability,
    CapabilityKind,
    InMemoryWorld,
    Material,
    PhysicsBody,
    Renderer,
    SceneNode,
    TextDisplay,
)

ENV_VARS = (
    "DESERVER_HOST",
    "DESERVER_PORT",
    "DESERVER_TIMEOUT",
    "DESERVER_DATA_DIR",
    "DESERVER_LOG_LEVEL",
)


class RecordingAcks:
    """Ack sink that remembers what it was told."""

    def __init__(self):
        self.acks: list[tuple[str, str]] = []

    def send_ack(self, cmd: str, label: str) -> None:
        self.acks.append((cmd, label))


class RecordingServer:
    """Handler for httpx.MockTransport that records requests and serves canned replies."""

    def __init__(self, commands: list[str] | None = None):
        self.requests: list[httpx.Request] = []
        self.commands_body = '{"commands":[]}'
        self.mods: dict[str, bytes] = {}
        self.fail = False
        if commands is not None:
            self.set_commands(commands)

    def set_commands(self, commands: list[str]) -> None:
        escaped = [c.replace("\\", "\\\\").replace('"', '\\"') for c in commands]
        self.commands_body = '{"commands":[' + ",".join(f'"{c}"' for c in escaped) + "]}"

    def posted(self, event: str | None = None) -> list[dict]:
        bodies = [json.loads(r.content) for r in self.requests if r.method == "POST"]
        if event is None:
            return bodies
        return [b for b in bodies if b["event"] == event]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        path = request.url.path
        if request.method == "POST" and path == "/":
            return httpx.Response(200, text="ok")
        if path == "/cmd":
            return httpx.Response(200, text=self.commands_body)
        if path == "/mods":
            names = ",".join(f'"{n}"' for n in self.mods)
            return httpx.Response(200, text='{"mods":[' + names + "]}")
        if path.startswith("/mods/"):
            name = path[len("/mods/") :]
            if name in self.mods:
                return httpx.Response(200, content=self.mods[name])
        return httpx.Response(404)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep DESERVER_* variables and a previously bound player out of tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    bind_identity("")


@pytest.fixture
def config(tmp_path):
    return ClientConfig(data_dir=tmp_path, log_to_file=False)


@pytest.fixture
def world():
    proto = SceneNode(
        "Proto",
        capabilities=[Renderer(), Capability(kind=CapabilityKind.BOX_COLLIDER)],
    )
    proto.add_child(SceneNode("ProtoChild", capabilities=[Renderer()]))

    player = SceneNode(
        "Player_Human",
        capabilities=[PhysicsBody(), Capability(kind=CapabilityKind.CHARACTER_CONTROLLER)],
    )

    hidden = SceneNode("HiddenProto", active=False, capabilities=[Renderer()])

    cube = SceneNode("Cube", capabilities=[Renderer(material=Material(texture="stone.png"))])
    cube.add_child(SceneNode("Label", capabilities=[TextDisplay(text="hi")]))

    return InMemoryWorld([proto, player, hidden, cube])


@pytest.fixture
def acks():
    return RecordingAcks()


@pytest.fixture
def scheduler():
    return AnimationScheduler()


@pytest.fixture
def interpreter(world, scheduler, acks):
    return CommandInterpreter(world, scheduler, acks)


@pytest.fixture
def server():
    return RecordingServer()


@pytest.fixture
def session(config):
    return SessionContext(config, identity=Identity("Tester", "7656"))


@pytest.fixture
def client(session, server):
    return SessionClient(
        session,
        transport=httpx.MockTransport(server),
        sync_transport=httpx.MockTransport(server),
    )
