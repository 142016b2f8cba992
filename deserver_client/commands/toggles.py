"""
Component Toggles

Applies a ``{"CapabilityName": bool}`` map to a node. Names resolve through the
closed CapabilityKind registry; anything outside it is logged and skipped.
"""

from __future__ import annotations

from deserver_client.logging import get_logger
from deserver_client.world.capabilities import Capability, CapabilityFamily, CapabilityKind, resolve_kind
from deserver_client.world.model import Node

logger = get_logger("commands.toggles")


def set_enabled(capability: Capability, enabled: bool) -> None:
    """Flip one capability the way its family expects."""
    if capability.kind.family is CapabilityFamily.PHYSICS_BODY:
        # Bodies stay attached; switching off freezes them out of the simulation
        capability.kinematic = not enabled
        capability.use_gravity = enabled
        capability.detect_collisions = enabled
        return
    capability.enabled = enabled


def _matching(node: Node, kind: CapabilityKind, recursive: bool) -> list[Capability]:
    if recursive:
        return node.capabilities_in_children([kind])
    return [c for c in node.capabilities if c is not None and c.kind is kind]


def apply_toggles(node: Node, toggles: dict[str, bool], recursive: bool = True) -> int:
    """
    Enable or disable capabilities on a node.

    Args:
        node: Node the map applies to.
        toggles: Capability wire name to desired state.
        recursive: Whether descendants (inactive included) are affected, or
            only the node itself.

    Returns:
        Number of capabilities changed.
    """
    changed = 0
    for name, enabled in toggles.items():
        kind = resolve_kind(name)
        if kind is None:
            logger.warning(f"Unknown component {name!r}")
            continue

        targets = _matching(node, kind, recursive)
        if not targets:
            if not enabled:
                logger.debug(f"Component {name!r} not on {node.name!r}; nothing to disable")
                continue
            targets = [node.add_capability(kind)]
            logger.debug(f"Attached {name!r} to {node.name!r}")

        for capability in targets:
            set_enabled(capability, enabled)
            changed += 1
    return changed
