"""
World Model Protocols

Structural interface the agent expects from its host. The host owns storage
and rendering; the agent only reads transforms, walks the node tree and
mutates through these members.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Protocol, runtime_checkable

from deserver_client.world.capabilities import Capability, CapabilityKind
from deserver_client.world.spatial import Quaternion, Vector3


@runtime_checkable
class Node(Protocol):
    """One entry in the host's world tree."""

    instance_id: int
    name: str
    active_self: bool
    position: Vector3
    rotation: Quaternion
    local_scale: Vector3

    @property
    def alive(self) -> bool: ...
    @property
    def active_in_hierarchy(self) -> bool: ...
    @property
    def parent(self) -> Node | None: ...
    @property
    def children(self) -> list[Node]: ...
    @property
    def capabilities(self) -> list[Capability | None]: ...
    @property
    def euler_angles(self) -> Vector3: ...

    def get_capability(self, kind: CapabilityKind) -> Capability | None: ...
    def capabilities_in_children(
        self, kinds: Iterable[CapabilityKind]
    ) -> list[Capability]: ...
    def add_capability(self, kind: CapabilityKind) -> Capability: ...


@runtime_checkable
class WorldModel(Protocol):
    """Lookup and lifecycle operations on the host's world."""

    def roots(self) -> list[Node]: ...
    def find(self, name: str) -> Node | None: ...
    def find_including_inactive(self, name: str) -> Node | None: ...
    def iter_all(self) -> Iterator[Node]: ...
    def instantiate(self, prototype: Node) -> Node: ...
    def destroy(self, node: Node) -> None: ...
    def main_camera(self) -> Node | None: ...


@runtime_checkable
class InputSource(Protocol):
    """Per-frame input sampling."""

    def keys_down(self) -> list[str]: ...
    def axis(self, name: str) -> float: ...
