"""
Tests for component toggles.
"""

from deserver_client.commands.toggles import apply_toggles
from deserver_client.world import Capability, CapabilityKind, PhysicsBody, SceneNode


class TestApplyToggles:
    """Tests for apply_toggles."""

    def test_rigidbody_off_freezes_body(self):
        body = PhysicsBody()
        node = SceneNode("Crate", capabilities=[body])
        apply_toggles(node, {"Rigidbody": False})
        assert body.kinematic is True
        assert body.use_gravity is False
        assert body.detect_collisions is False
        assert node.get_capability(CapabilityKind.RIGIDBODY) is body

    def test_rigidbody_on_reverses_all_three(self):
        body = PhysicsBody(kinematic=True, use_gravity=False, detect_collisions=False)
        node = SceneNode("Crate", capabilities=[body])
        apply_toggles(node, {"Rigidbody": True})
        assert (body.kinematic, body.use_gravity, body.detect_collisions) == (False, True, True)

    def test_collider_and_behaviour_flags(self):
        collider = Capability(kind=CapabilityKind.SPHERE_COLLIDER)
        light = Capability(kind=CapabilityKind.LIGHT)
        node = SceneNode("Lamp", capabilities=[collider, light])
        apply_toggles(node, {"SphereCollider": False, "Light": False})
        assert collider.enabled is False
        assert light.enabled is False

    def test_unknown_names_skipped_others_applied(self):
        light = Capability(kind=CapabilityKind.LIGHT)
        node = SceneNode("Lamp", capabilities=[light])
        changed = apply_toggles(node, {"Teleporter": True, "Transform": False, "Light": False})
        assert changed == 1
        assert light.enabled is False

    def test_disabling_absent_capability_is_noop(self):
        node = SceneNode("Empty")
        assert apply_toggles(node, {"AudioSource": False}) == 0
        assert node.capabilities == []

    def test_enabling_absent_capability_attaches_to_root(self):
        root = SceneNode("Root")
        root.add_child(SceneNode("Child"))
        apply_toggles(root, {"BoxCollider": True})
        added = root.get_capability(CapabilityKind.BOX_COLLIDER)
        assert added is not None and added.enabled is True
        assert root.children[0].capabilities == []

    def test_recursive_reaches_inactive_descendants(self):
        root = SceneNode("Root")
        hidden = root.add_child(SceneNode("Hidden", active=False))
        camera = hidden.attach(Capability(kind=CapabilityKind.CAMERA))
        apply_toggles(root, {"Camera": False}, recursive=True)
        assert camera.enabled is False

    def test_non_recursive_ignores_children(self):
        root = SceneNode("Root")
        child = root.add_child(SceneNode("Child"))
        camera = child.attach(Capability(kind=CapabilityKind.CAMERA))
        apply_toggles(root, {"Camera": False}, recursive=False)
        assert camera.enabled is True
        assert root.get_capability(CapabilityKind.CAMERA) is None
