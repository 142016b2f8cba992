"""
Sync Protocol

Outbound message bodies posted to the remote authority. Every body carries
the event name and the player's identity; the server keys identity as
``steamID``.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from deserver_client.sync.state import Identity
from deserver_client.world.spatial import Vector3


class EventType(Enum):
    """Values of the outbound ``event`` field."""

    # Connection
    CONNECT = "connect"
    DISCONNECT = "disconnect"

    # Heartbeat
    POS = "pos"
    OBJECTS = "objects"

    # Input
    INPUT = "input"
    AXIS = "axis"
    PAUSE = "pause"

    # Command acknowledgement
    ACK = "ack"


@dataclass
class OutboundMessage:
    """One POST body."""

    event: EventType
    identity: Identity
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event.value,
            "playerName": self.identity.player_name,
            "steamID": self.identity.steam_id,
            **self.payload,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


# Message factory functions


def create_connect_message(identity: Identity) -> OutboundMessage:
    return OutboundMessage(EventType.CONNECT, identity)


def create_disconnect_message(identity: Identity) -> OutboundMessage:
    return OutboundMessage(EventType.DISCONNECT, identity)


def create_pos_message(
    identity: Identity,
    position: Vector3 | None = None,
    rotation: Vector3 | None = None,
    camera: Vector3 | None = None,
) -> OutboundMessage:
    """
    Create a player transform report.

    Transform fields are only sent when the player node resolved; the camera
    position only rides along with them.
    """
    payload: dict[str, Any] = {}
    if position is not None and rotation is not None:
        payload.update(x=position.x, y=position.y, z=position.z)
        payload.update(rx=rotation.x, ry=rotation.y, rz=rotation.z)
        if camera is not None:
            payload.update(camx=camera.x, camy=camera.y, camz=camera.z)
    return OutboundMessage(EventType.POS, identity, payload)


def create_objects_message(identity: Identity, data: list[dict[str, Any]]) -> OutboundMessage:
    """Create a world snapshot report from serialized node descriptors."""
    return OutboundMessage(EventType.OBJECTS, identity, {"data": data})


def create_input_message(identity: Identity, key: str) -> OutboundMessage:
    return OutboundMessage(EventType.INPUT, identity, {"key": key})


def create_axis_message(identity: Identity, axis: str, value: float) -> OutboundMessage:
    """Create an axis report; the value is rounded to 4 decimals."""
    return OutboundMessage(EventType.AXIS, identity, {"axis": axis, "val": round(value, 4)})


def create_pause_message(identity: Identity, paused: bool) -> OutboundMessage:
    return OutboundMessage(EventType.PAUSE, identity, {"state": "on" if paused else "off"})


def create_ack_message(identity: Identity, cmd: str, label: str) -> OutboundMessage:
    return OutboundMessage(EventType.ACK, identity, {"cmd": cmd, "label": label})
