"""
Host World Model

Protocols the host implements, the capability registry, spatial math and an
in-memory reference host.
"""

from deserver_client.world.capabilities import (
    Capability,
    CapabilityFamily,
    CapabilityKind,
    Material,
    MeshFilter,
    PhysicsBody,
    Renderer,
    TextDisplay,
    resolve_kind,
)
from deserver_client.world.memory import InMemoryWorld, SceneNode, ScriptedInput
from deserver_client.world.mesh import MeshBuffer
from deserver_client.world.model import InputSource, Node, WorldModel
from deserver_client.world.spatial import Quaternion, Vector3

__all__ = [
    "Capability",
    "CapabilityFamily",
    "CapabilityKind",
    "InMemoryWorld",
    "InputSource",
    "Material",
    "MeshBuffer",
    "MeshFilter",
    "Node",
    "PhysicsBody",
    "Quaternion",
    "Renderer",
    "SceneNode",
    "ScriptedInput",
    "TextDisplay",
    "Vector3",
    "WorldModel",
    "resolve_kind",
]
