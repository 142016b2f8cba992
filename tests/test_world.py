"""
Tests for spatial math, mesh buffers and the in-memory world.
"""

import numpy as np
import pytest

from deserver_client.errors import MeshDataError, SceneFileError
from deserver_client.world import (
    CapabilityKind,
    InMemoryWorld,
    Material,
    MeshBuffer,
    PhysicsBody,
    Quaternion,
    Renderer,
    SceneNode,
    ScriptedInput,
    Vector3,
    resolve_kind,
)


class TestSpatial:
    """Tests for Vector3 and Quaternion."""

    def test_vector_ops(self):
        assert Vector3(1, 2, 3) + Vector3(1, 1, 1) == Vector3(2, 3, 4)
        assert Vector3(2, 2, 2) - Vector3(1, 0, 2) == Vector3(1, 2, 0)
        assert Vector3(1, 2, 3) * 2 == Vector3(2, 4, 6)
        assert Vector3(0, 0, 4).lerp(Vector3(0, 0, 8), 0.25) == Vector3(0, 0, 5)

    @pytest.mark.parametrize(
        "euler",
        [(0, 0, 0), (30, 0, 0), (0, 45, 0), (0, 0, 60), (10, 20, 30), (350, 200, 15)],
    )
    def test_euler_round_trip(self, euler):
        q = Quaternion.from_euler(*euler)
        back = Quaternion.from_euler_vector(q.to_euler())
        assert q.angle_to(back) == pytest.approx(0, abs=1e-3)

    def test_euler_angles_wrapped(self):
        angles = Quaternion.from_euler(0, -90, 0).to_euler()
        assert angles.y == pytest.approx(270)
        assert angles.x == pytest.approx(0, abs=1e-9)

    def test_composition_order(self):
        # Yaw then roll equals the combined Euler rotation
        combined = Quaternion.from_euler(0, 90, 0) * Quaternion.from_euler(0, 0, 90)
        assert combined.angle_to(Quaternion.from_euler(0, 90, 90)) == pytest.approx(0, abs=1e-3)

    def test_slerp_endpoints(self):
        a = Quaternion.identity()
        b = Quaternion.from_euler(0, 120, 0)
        assert a.slerp(b, 0).angle_to(a) == pytest.approx(0, abs=1e-3)
        assert a.slerp(b, 1).angle_to(b) == pytest.approx(0, abs=1e-3)
        assert a.slerp(b, 0.5).angle_to(Quaternion.from_euler(0, 60, 0)) == pytest.approx(0, abs=1e-3)


class TestMeshBuffer:
    """Tests for MeshBuffer.from_flat."""

    def test_triangle(self):
        mesh = MeshBuffer.from_flat([0, 0, 0, 1, 0, 0, 0, 1, 0], [0, 1, 2])
        assert mesh.vertex_count == 3
        assert mesh.triangle_count == 1
        assert mesh.vertices.dtype == np.float32
        np.testing.assert_allclose(mesh.normals, [[0, 0, 1]] * 3, atol=1e-6)
        np.testing.assert_allclose(mesh.bounds_min, [0, 0, 0])
        np.testing.assert_allclose(mesh.bounds_max, [1, 1, 0])

    def test_empty(self):
        mesh = MeshBuffer.from_flat([], [])
        assert mesh.vertex_count == 0
        assert mesh.triangle_count == 0

    @pytest.mark.parametrize(
        "vertices,indices",
        [
            ([0, 0], []),
            ([0, 0, 0], [0, 0]),
            ([0, 0, 0], [0, 0, 3]),
            ([0, 0, 0], [0, -1, 0]),
            ([0, 0, 0], [0, 0, 2**32]),
            ([0, 0, 0], [0, 0, 2**70]),
        ],
    )
    def test_invalid(self, vertices, indices):
        with pytest.raises(MeshDataError):
            MeshBuffer.from_flat(vertices, indices)


class TestCapabilities:
    """Tests for the capability registry."""

    def test_resolve_toggleable(self):
        assert resolve_kind("Rigidbody") is CapabilityKind.RIGIDBODY
        assert resolve_kind("ParticleSystem") is CapabilityKind.PARTICLE_SYSTEM

    def test_resolve_rejects_host_only_and_unknown(self):
        assert resolve_kind("Transform") is None
        assert resolve_kind("CharacterController") is None
        assert resolve_kind("rigidbody") is None

    def test_copy_gets_new_id_and_own_material(self):
        renderer = Renderer(material=Material(texture="a.png"))
        clone = renderer.copy()
        assert clone.instance_id != renderer.instance_id
        assert clone.material == renderer.material
        assert clone.material is not renderer.material


class TestInMemoryWorld:
    """Tests for InMemoryWorld."""

    def test_find_skips_inactive(self, world):
        assert world.find("HiddenProto") is None
        assert world.find_including_inactive("HiddenProto").name == "HiddenProto"

    def test_find_inside_inactive_parent(self):
        root = SceneNode("Root", active=False)
        root.add_child(SceneNode("Child"))
        world = InMemoryWorld([root])
        assert world.find("Child") is None
        assert world.find_including_inactive("Child") is not None

    def test_instantiate_clones_subtree(self, world):
        proto = world.find("Proto")
        clone = world.instantiate(proto)
        assert clone.name == "Proto(Clone)"
        assert clone.instance_id != proto.instance_id
        assert [c.name for c in clone.children] == ["ProtoChild"]
        assert clone in world.roots()

    def test_destroy_marks_subtree_dead(self, world):
        cube = world.find("Cube")
        label = cube.children[0]
        world.destroy(cube)
        assert not cube.alive and not label.alive
        assert world.find("Cube") is None

    def test_destroy_child_detaches(self, world):
        label = world.find("Label")
        world.destroy(label)
        assert world.find("Cube").children == []

    def test_main_camera(self, world):
        assert world.main_camera() is None
        cam = world.add_root(SceneNode("Cam"))
        cam.add_capability(CapabilityKind.CAMERA)
        assert world.main_camera() is cam

    def test_add_capability_builds_typed_defaults(self):
        node = SceneNode("N")
        assert isinstance(node.add_capability(CapabilityKind.RIGIDBODY), PhysicsBody)
        assert isinstance(node.add_capability(CapabilityKind.TRAIL_RENDERER), Renderer)

    def test_load_yaml_scene(self, tmp_path):
        scene = tmp_path / "scene.yaml"
        scene.write_text(
            "nodes:\n"
            "  - name: Player_Human\n"
            "    position: [0, 1, 0]\n"
            "    rotation: [0, 90, 0]\n"
            "    components: [Rigidbody, CapsuleCollider]\n"
            "    children:\n"
            "      - name: Nameplate\n"
            "        text: Ann\n"
            "  - name: ServerInfo:127.0.0.1:9000\n"
            "    active: false\n"
        )
        world = InMemoryWorld.load(scene)
        player = world.find("Player_Human")
        assert player.position == Vector3(0, 1, 0)
        assert player.euler_angles.y == pytest.approx(90)
        assert player.get_capability(CapabilityKind.RIGIDBODY) is not None
        assert player.children[0].capabilities[0].text == "Ann"
        assert world.find("ServerInfo:127.0.0.1:9000") is None
        assert len(world.roots()) == 2


class TestSceneFileErrors:
    """Tests for malformed scene descriptions."""

    @pytest.mark.parametrize(
        "text",
        [
            "nodes:\n  - name: Crate\n    components: [Teleporter]\n",
            "nodes:\n  - name: Crate\n    position: [1, 2]\n",
            "nodes:\n  - name: Crate\n    scale: [a, b, c]\n",
            "nodes:\n  - position: [0, 0, 0]\n",
            "nodes:\n  - name: Root\n    children:\n      - name: Kid\n        rotation: 90\n",
            "- just\n- a list\n",
            "nodes: [unclosed\n",
        ],
    )
    def test_load_raises_scene_error(self, tmp_path, text):
        scene = tmp_path / "scene.yaml"
        scene.write_text(text)
        with pytest.raises(SceneFileError):
            InMemoryWorld.load(scene)

    def test_message_names_node_and_component(self):
        with pytest.raises(SceneFileError, match="'Crate'.*'Teleporter'"):
            InMemoryWorld.from_dict({"nodes": [{"name": "Crate", "components": ["Teleporter"]}]})


class TestScriptedInput:
    """Tests for ScriptedInput."""

    def test_keys_drain(self):
        source = ScriptedInput()
        source.press("A", "B")
        assert source.keys_down() == ["A", "B"]
        assert source.keys_down() == []

    def test_axes_default_zero(self):
        source = ScriptedInput({"Horizontal": 0.5})
        assert source.axis("Horizontal") == 0.5
        assert source.axis("Vertical") == 0.0
