"""
World Snapshot

Flattens the active part of the host world into node descriptors for the
``objects`` heartbeat.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from deserver_client.world.capabilities import Capability
from deserver_client.world.model import Node, WorldModel
from deserver_client.world.spatial import Vector3

MISSING_CAPABILITY = "null"


@dataclass(frozen=True)
class SceneNodeDescriptor:
    """One active node as reported to the server."""

    id: int
    parent_id: int
    parent_name: str
    name: str
    position: Vector3
    euler_rotation: Vector3
    capability_names: tuple[str, ...] = ()
    text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "parentId": self.parent_id,
            "parentName": self.parent_name,
            "name": self.name,
            "x": self.position.x,
            "y": self.position.y,
            "z": self.position.z,
            "rx": self.euler_rotation.x,
            "ry": self.euler_rotation.y,
            "rz": self.euler_rotation.z,
            "components": list(self.capability_names),
        }
        if self.text is not None:
            data["text"] = self.text
        return data


def capability_label(capability: Capability | None) -> str:
    """Host label up to its first '(' (e.g. 'BoxCollider'), or 'null'."""
    if capability is None:
        return MISSING_CAPABILITY
    label = capability.describe()
    paren = label.find("(")
    if paren > 0:
        label = label[:paren].strip()
    return label


def describe_node(node: Node) -> SceneNodeDescriptor:
    parent = node.parent
    text = None
    labels = []
    for capability in node.capabilities:
        if text is None and capability is not None and capability.kind.text_bearing:
            text = capability.text
        labels.append(capability_label(capability))

    return SceneNodeDescriptor(
        id=node.instance_id,
        parent_id=parent.instance_id if parent is not None else 0,
        parent_name=parent.name if parent is not None else "",
        name=node.name,
        position=node.position,
        euler_rotation=node.euler_angles,
        capability_names=tuple(labels),
        text=text,
    )


def snapshot_world(world: WorldModel) -> list[SceneNodeDescriptor]:
    """
    Walk the world depth-first with an explicit stack.

    Roots and children are pushed in their natural order, so siblings are
    visited last-first. Inactive nodes are skipped together with their
    subtrees.
    """
    descriptors = []
    stack: list[Node] = list(world.roots())
    while stack:
        node = stack.pop()
        if not node.alive or not node.active_in_hierarchy:
            continue
        descriptors.append(describe_node(node))
        stack.extend(node.children)
    return descriptors


def serialize_snapshot(world: WorldModel) -> list[dict[str, Any]]:
    """Snapshot in wire shape."""
    return [d.to_dict() for d in snapshot_world(world)]
