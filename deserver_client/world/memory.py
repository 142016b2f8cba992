"""
In-Memory World

Reference host used when the agent runs headless and throughout the test
suite. Transforms are stored per node in world space; moving a parent does
not move its children.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import yaml

from deserver_client.errors import SceneFileError
from deserver_client.logging import get_logger
from deserver_client.world.capabilities import (
    Capability,
    CapabilityKind,
    TextDisplay,
    new_capability,
)
from deserver_client.world.spatial import Quaternion, Vector3

logger = get_logger("world.memory")

_node_ids = itertools.count(1000)


class SceneNode:
    """A node of the in-memory world tree."""

    def __init__(
        self,
        name: str,
        position: Vector3 | None = None,
        rotation: Quaternion | None = None,
        local_scale: Vector3 | None = None,
        active: bool = True,
        capabilities: Iterable[Capability | None] | None = None,
    ):
        self.instance_id = next(_node_ids)
        self.name = name
        self.active_self = active
        self.position = position or Vector3.zero()
        self.rotation = rotation or Quaternion.identity()
        self.local_scale = local_scale or Vector3.one()

        self._parent: SceneNode | None = None
        self._children: list[SceneNode] = []
        self._capabilities: list[Capability | None] = list(capabilities or [])
        self._alive = True

    def __repr__(self) -> str:
        return f"SceneNode({self.name!r}, id={self.instance_id})"

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def parent(self) -> SceneNode | None:
        return self._parent

    @property
    def children(self) -> list[SceneNode]:
        return list(self._children)

    @property
    def capabilities(self) -> list[Capability | None]:
        return list(self._capabilities)

    @property
    def active_in_hierarchy(self) -> bool:
        node: SceneNode | None = self
        while node is not None:
            if not node.active_self:
                return False
            node = node._parent
        return True

    @property
    def euler_angles(self) -> Vector3:
        return self.rotation.to_euler()

    def add_child(self, child: SceneNode) -> SceneNode:
        """Attach a child and return it."""
        if child._parent is not None:
            child._parent._children.remove(child)
        child._parent = self
        self._children.append(child)
        return child

    def get_capability(self, kind: CapabilityKind) -> Capability | None:
        for capability in self._capabilities:
            if capability is not None and capability.kind is kind:
                return capability
        return None

    def capabilities_in_children(self, kinds: Iterable[CapabilityKind]) -> list[Capability]:
        """All capabilities of the given kinds on this node and its descendants."""
        wanted = set(kinds)
        found = []
        for node in self.iter_subtree():
            found.extend(
                c for c in node._capabilities if c is not None and c.kind in wanted
            )
        return found

    def add_capability(self, kind: CapabilityKind) -> Capability:
        capability = new_capability(kind)
        self._capabilities.append(capability)
        return capability

    def attach(self, capability: Capability | None) -> Capability | None:
        """Attach a prebuilt capability (None models a missing script)."""
        self._capabilities.append(capability)
        return capability

    def iter_subtree(self) -> Iterator[SceneNode]:
        """Pre-order walk including inactive descendants."""
        yield self
        for child in self._children:
            yield from child.iter_subtree()

    def clone_subtree(self) -> SceneNode:
        clone = SceneNode(
            self.name,
            position=self.position,
            rotation=self.rotation,
            local_scale=self.local_scale,
            active=self.active_self,
            capabilities=[c.copy() if c is not None else None for c in self._capabilities],
        )
        for child in self._children:
            clone.add_child(child.clone_subtree())
        return clone

    def _mark_destroyed(self) -> None:
        for node in self.iter_subtree():
            node._alive = False


class InMemoryWorld:
    """World model backed by plain Python objects."""

    def __init__(self, roots: Iterable[SceneNode] | None = None):
        self._roots: list[SceneNode] = list(roots or [])

    def add_root(self, node: SceneNode) -> SceneNode:
        self._roots.append(node)
        return node

    def roots(self) -> list[SceneNode]:
        return list(self._roots)

    def iter_all(self) -> Iterator[SceneNode]:
        for root in list(self._roots):
            yield from root.iter_subtree()

    def find(self, name: str) -> SceneNode | None:
        """First active node with this exact name."""
        for node in self.iter_all():
            if node.name == name and node.active_in_hierarchy:
                return node
        return None

    def find_including_inactive(self, name: str) -> SceneNode | None:
        for node in self.iter_all():
            if node.name == name:
                return node
        return None

    def instantiate(self, prototype: SceneNode) -> SceneNode:
        """Clone a subtree as a new root, host-style '(Clone)' suffix."""
        clone = prototype.clone_subtree()
        clone.name = f"{prototype.name}(Clone)"
        self._roots.append(clone)
        logger.debug(f"Instantiated {prototype.name!r} as {clone.instance_id}")
        return clone

    def destroy(self, node: SceneNode) -> None:
        if node.parent is not None:
            node.parent._children.remove(node)
            node._parent = None
        elif node in self._roots:
            self._roots.remove(node)
        node._mark_destroyed()

    def main_camera(self) -> SceneNode | None:
        for node in self.iter_all():
            if not node.active_in_hierarchy:
                continue
            camera = node.get_capability(CapabilityKind.CAMERA)
            if camera is not None and camera.enabled:
                return node
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryWorld:
        """Build a world from a scene description (see load()).

        Raises:
            SceneFileError: on a malformed node, vector or component name.
        """
        if not isinstance(data, dict):
            raise SceneFileError(f"Scene must be a mapping with a 'nodes' list, got {type(data).__name__}")
        world = cls()
        for spec in data.get("nodes", []) or []:
            world.add_root(_build_node(spec))
        return world

    @classmethod
    def load(cls, path: Path) -> InMemoryWorld:
        """
        Load a YAML scene file.

        Format::

            nodes:
              - name: Player_Human
                position: [0, 1, 0]
                rotation: [0, 90, 0]
                scale: [1, 1, 1]
                active: true
                components: [Rigidbody, CapsuleCollider]
                text: optional label text
                children: [...]
        """
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise SceneFileError(f"{path} is not valid YAML: {e}") from e
        world = cls.from_dict(data)
        logger.info(f"Loaded scene {path} with {len(world.roots())} root node(s)")
        return world


class ScriptedInput:
    """InputSource fed by tests or the headless runner."""

    def __init__(self, axes: dict[str, float] | None = None):
        self._axes: dict[str, float] = dict(axes or {})
        self._pending_keys: list[str] = []

    def press(self, *keys: str) -> None:
        """Queue keys reported as pressed on the next frame."""
        self._pending_keys.extend(keys)

    def set_axis(self, name: str, value: float) -> None:
        self._axes[name] = value

    def keys_down(self) -> list[str]:
        keys, self._pending_keys = self._pending_keys, []
        return keys

    def axis(self, name: str) -> float:
        return self._axes.get(name, 0.0)


def _vector(values: Any, default: Vector3, field_name: str, node_name: str) -> Vector3:
    if not values:
        return default
    if not isinstance(values, (list, tuple)) or len(values) != 3:
        raise SceneFileError(f"{node_name!r}: {field_name} needs exactly 3 numbers, got {values!r}")
    try:
        x, y, z = (float(v) for v in values)
    except (TypeError, ValueError) as e:
        raise SceneFileError(f"{node_name!r}: {field_name} {values!r} is not numeric") from e
    return Vector3(x, y, z)


def _build_node(spec: dict[str, Any]) -> SceneNode:
    if not isinstance(spec, dict) or "name" not in spec:
        raise SceneFileError(f"Scene node without a name: {spec!r}")
    name = str(spec["name"])

    rotation = _vector(spec.get("rotation"), Vector3.zero(), "rotation", name)
    node = SceneNode(
        name,
        position=_vector(spec.get("position"), Vector3.zero(), "position", name),
        rotation=Quaternion.from_euler_vector(rotation),
        local_scale=_vector(spec.get("scale"), Vector3.one(), "scale", name),
        active=bool(spec.get("active", True)),
    )
    for component in spec.get("components", []) or []:
        try:
            kind = CapabilityKind(component)
        except ValueError:
            raise SceneFileError(f"{name!r}: unknown component {component!r}") from None
        node.add_capability(kind)
    if "text" in spec:
        node.attach(TextDisplay(text=str(spec["text"])))
    for child in spec.get("children", []) or []:
        node.add_child(_build_node(child))
    return node
