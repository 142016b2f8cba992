"""
Node Capabilities

Closed registry of the capability kinds the agent knows about, plus the plain
data objects an in-memory host attaches to nodes. A real host exposes its own
objects; they only need the attributes used here.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from deserver_client.world.spatial import Vector3

_instance_ids = itertools.count(1)


class CapabilityFamily(Enum):
    """How a capability reacts to an enable/disable toggle."""

    COLLIDER = "collider"
    RENDERER = "renderer"
    PHYSICS_BODY = "physics_body"
    BEHAVIOUR = "behaviour"
    DATA = "data"


class CapabilityKind(Enum):
    """Capability kinds addressable by wire name."""

    # Toggleable from component maps
    SPHERE_COLLIDER = "SphereCollider"
    BOX_COLLIDER = "BoxCollider"
    CAPSULE_COLLIDER = "CapsuleCollider"
    MESH_COLLIDER = "MeshCollider"
    MESH_RENDERER = "MeshRenderer"
    SKINNED_MESH_RENDERER = "SkinnedMeshRenderer"
    TRAIL_RENDERER = "TrailRenderer"
    RIGIDBODY = "Rigidbody"
    AUDIO_SOURCE = "AudioSource"
    LIGHT = "Light"
    CAMERA = "Camera"
    ANIMATOR = "Animator"
    PARTICLE_SYSTEM = "ParticleSystem"

    # Host-side only
    TRANSFORM = "Transform"
    MESH_FILTER = "MeshFilter"
    CHARACTER_CONTROLLER = "CharacterController"
    TEXT_MESH = "TextMesh"
    UI_TEXT = "Text"
    INPUT_FIELD = "InputField"

    @property
    def family(self) -> CapabilityFamily:
        return _FAMILIES.get(self, CapabilityFamily.BEHAVIOUR)

    @property
    def toggleable(self) -> bool:
        return self in TOGGLEABLE_KINDS

    @property
    def text_bearing(self) -> bool:
        return self in TEXT_KINDS


_FAMILIES = {
    CapabilityKind.SPHERE_COLLIDER: CapabilityFamily.COLLIDER,
    CapabilityKind.BOX_COLLIDER: CapabilityFamily.COLLIDER,
    CapabilityKind.CAPSULE_COLLIDER: CapabilityFamily.COLLIDER,
    CapabilityKind.MESH_COLLIDER: CapabilityFamily.COLLIDER,
    CapabilityKind.CHARACTER_CONTROLLER: CapabilityFamily.COLLIDER,
    CapabilityKind.MESH_RENDERER: CapabilityFamily.RENDERER,
    CapabilityKind.SKINNED_MESH_RENDERER: CapabilityFamily.RENDERER,
    CapabilityKind.TRAIL_RENDERER: CapabilityFamily.RENDERER,
    CapabilityKind.RIGIDBODY: CapabilityFamily.PHYSICS_BODY,
    CapabilityKind.TRANSFORM: CapabilityFamily.DATA,
    CapabilityKind.MESH_FILTER: CapabilityFamily.DATA,
}

TOGGLEABLE_KINDS = frozenset(
    {
        CapabilityKind.SPHERE_COLLIDER,
        CapabilityKind.BOX_COLLIDER,
        CapabilityKind.CAPSULE_COLLIDER,
        CapabilityKind.MESH_COLLIDER,
        CapabilityKind.MESH_RENDERER,
        CapabilityKind.SKINNED_MESH_RENDERER,
        CapabilityKind.TRAIL_RENDERER,
        CapabilityKind.RIGIDBODY,
        CapabilityKind.AUDIO_SOURCE,
        CapabilityKind.LIGHT,
        CapabilityKind.CAMERA,
        CapabilityKind.ANIMATOR,
        CapabilityKind.PARTICLE_SYSTEM,
    }
)

TEXT_KINDS = frozenset(
    {CapabilityKind.TEXT_MESH, CapabilityKind.UI_TEXT, CapabilityKind.INPUT_FIELD}
)


def resolve_kind(name: str) -> CapabilityKind | None:
    """Map a wire name to a toggleable kind, or None if it is not allowed."""
    try:
        kind = CapabilityKind(name)
    except ValueError:
        return None
    return kind if kind.toggleable else None


@dataclass
class Material:
    """Surface material; shared by reference when copied between renderers."""

    shader: str = "Standard"
    color: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    texture: str | None = None


@dataclass(eq=False)
class Capability:
    """A behaviour or data unit attached to a node."""

    kind: CapabilityKind
    enabled: bool = True
    instance_id: int = field(default_factory=lambda: next(_instance_ids))

    def describe(self) -> str:
        """Host-style label, e.g. 'BoxCollider (Capability #12)'."""
        return f"{self.kind.value} (Capability #{self.instance_id})"

    def copy(self) -> Capability:
        clone = _shallow_fields(self)
        clone["instance_id"] = next(_instance_ids)
        return type(self)(**clone)


@dataclass(eq=False)
class PhysicsBody(Capability):
    kind: CapabilityKind = CapabilityKind.RIGIDBODY
    kinematic: bool = False
    use_gravity: bool = True
    detect_collisions: bool = True
    velocity: Vector3 = field(default_factory=Vector3.zero)
    angular_velocity: Vector3 = field(default_factory=Vector3.zero)


@dataclass(eq=False)
class Renderer(Capability):
    kind: CapabilityKind = CapabilityKind.MESH_RENDERER
    material: Material | None = None


@dataclass(eq=False)
class TextDisplay(Capability):
    kind: CapabilityKind = CapabilityKind.TEXT_MESH
    text: str = ""


@dataclass(eq=False)
class MeshFilter(Capability):
    kind: CapabilityKind = CapabilityKind.MESH_FILTER
    mesh: Any = None


def new_capability(kind: CapabilityKind) -> Capability:
    """Default instance for a freshly attached capability."""
    if kind.family is CapabilityFamily.PHYSICS_BODY:
        return PhysicsBody()
    if kind.family is CapabilityFamily.RENDERER:
        return Renderer(kind=kind)
    if kind.text_bearing:
        return TextDisplay(kind=kind)
    if kind is CapabilityKind.MESH_FILTER:
        return MeshFilter()
    return Capability(kind=kind)


def _shallow_fields(capability: Capability) -> dict[str, Any]:
    values = {name: getattr(capability, name) for name in capability.__dataclass_fields__}
    # Clones own their material; only a texture copy shares one
    for name, value in values.items():
        if isinstance(value, Material):
            values[name] = replace(value)
    return values
