"""
Command Interpreter

Applies remote mutation commands to the host world. One wire message maps to
one typed command; each handler resolves its target, mutates the world, and
acknowledges through the ack sink (immediately or when its task completes).
"""

from __future__ import annotations

import base64
import binascii
from typing import Protocol

from deserver_client.animation.scheduler import AnimationScheduler
from deserver_client.animation.tasks import TimelineTask, TurnTask, TweenTask
from deserver_client.commands.colors import color_given, parse_color
from deserver_client.commands.models import (
    CreateCommand,
    EditCommand,
    MeshCommand,
    ModLoadCommand,
    TimelineCommand,
    TurnCommand,
    TweenCommand,
    command_name,
    parse_command,
)
from deserver_client.commands.toggles import apply_toggles
from deserver_client.errors import MeshDataError
from deserver_client.logging import get_logger
from deserver_client.wire.decoder import extract_number_array
from deserver_client.world.capabilities import (
    TEXT_KINDS,
    Capability,
    CapabilityFamily,
    CapabilityKind,
    Material,
)
from deserver_client.world.mesh import MeshBuffer
from deserver_client.world.model import Node, WorldModel
from deserver_client.world.spatial import Quaternion, Vector3

logger = get_logger("commands.interpreter")

RENDERER_KINDS = [k for k in CapabilityKind if k.family is CapabilityFamily.RENDERER]


class AckSink(Protocol):
    """Where acknowledgements go; the HTTP client posts them asynchronously."""

    def send_ack(self, cmd: str, label: str) -> None: ...


class ModuleRequester(Protocol):
    """Accepts a modload request and installs the module in the background."""

    def request(self, file: str) -> None: ...


class CommandInterpreter:
    """
    Dispatches decoded commands onto the world model.

    Every failure is contained to the command that caused it: lookups that
    miss are logged and abandoned, and unexpected exceptions are logged with
    their traceback.
    """

    def __init__(
        self,
        world: WorldModel,
        scheduler: AnimationScheduler,
        acks: AckSink,
        modules: ModuleRequester | None = None,
        player_node: str = "Player_Human",
    ):
        self.world = world
        self.scheduler = scheduler
        self.acks = acks
        self.modules = modules
        self.player_node = player_node

        self._handlers = {
            CreateCommand: self._create,
            EditCommand: self._edit,
            MeshCommand: self._mesh,
            TweenCommand: self._tween,
            TurnCommand: self._turn,
            TimelineCommand: self._timeline,
            ModLoadCommand: self._modload,
        }

    def apply(self, payload: str) -> None:
        """Decode and apply one command message."""
        if not payload:
            return
        command = parse_command(payload)
        if command is None:
            name = command_name(payload)
            if name:
                logger.warning(f"Unknown cmd {name!r}")
            else:
                logger.warning("Command without cmd field ignored")
            return

        try:
            self._handlers[type(command)](command)
        except Exception:
            logger.exception(f"Command {command.kind.value!r} failed")

    def _ack(self, cmd: str, label: str) -> None:
        self.acks.send_ack(cmd, label)

    def _lookup(self, name: str) -> Node | None:
        """Active scan first, then inactive-inclusive."""
        if not name:
            return None
        return self.world.find(name) or self.world.find_including_inactive(name)

    def _place(self, node: Node, position: Vector3, rotation: Vector3, scale: Vector3) -> None:
        node.position = position
        node.rotation = Quaternion.from_euler_vector(rotation)
        node.local_scale = scale

    def _paint(self, renderers: list[Capability], color: str | None) -> None:
        rgba = parse_color(color)
        if rgba is None:
            if color_given(color):
                logger.warning(f"Unparseable color {color!r}")
            return
        for renderer in renderers:
            if renderer.material is None:
                renderer.material = Material()
            renderer.material.color = rgba

    # -- create ---------------------------------------------------------------

    def _create(self, cmd: CreateCommand) -> None:
        prototype = self._lookup(cmd.src)
        if prototype is None:
            logger.warning(f"Create: prototype {cmd.src!r} not found")
            self._ack("create", cmd.src)
            return

        node = self.world.instantiate(prototype)
        self._place(node, cmd.position, cmd.rotation, cmd.scale)
        if cmd.rename:
            node.name = cmd.rename
        if color_given(cmd.color):
            self._paint(node.capabilities_in_children(RENDERER_KINDS), cmd.color)
        if cmd.components:
            apply_toggles(node, cmd.components, recursive=False)

        logger.info(f"Spawned {node.name!r} from {cmd.src!r}")
        self._ack("create", node.name)

    # -- edit -----------------------------------------------------------------

    def _edit(self, cmd: EditCommand) -> None:
        node = self._lookup(cmd.target)
        if node is None:
            logger.warning(f"Edit: target {cmd.target!r} not found")
            return

        if cmd.delete:
            self.world.destroy(node)
            logger.info(f"Deleted {cmd.target!r}")
            self._ack("delete", cmd.target)
            return

        is_player = node.name == self.player_node
        colored = color_given(cmd.color)
        if not cmd.position.is_zero() or (is_player and not colored):
            self._move(node, cmd.position)
        if not cmd.rotation.is_zero():
            node.rotation = Quaternion.from_euler_vector(cmd.rotation)
        if cmd.scale != Vector3.one():
            node.local_scale = cmd.scale
        if cmd.rename:
            node.name = cmd.rename
        if colored:
            self._paint(node.capabilities_in_children(RENDERER_KINDS), cmd.color)
        if cmd.copytex:
            self._copy_texture(node, cmd.copytex)
        if cmd.text:
            for display in node.capabilities_in_children(TEXT_KINDS):
                display.text = cmd.text
        if cmd.components:
            apply_toggles(node, cmd.components, recursive=True)

        logger.info(f"Edited {node.name!r}")
        self._ack("edit", node.name)

    def _move(self, node: Node, position: Vector3) -> None:
        controller = node.get_capability(CapabilityKind.CHARACTER_CONTROLLER)
        if controller is not None:
            controller.enabled = False
        node.position = position
        if controller is not None:
            controller.enabled = True

        body = node.get_capability(CapabilityKind.RIGIDBODY)
        if body is not None:
            body.velocity = Vector3.zero()
            body.angular_velocity = Vector3.zero()

    def _copy_texture(self, node: Node, source_name: str) -> None:
        source = self.world.find(source_name)
        if source is None:
            logger.warning(f"Edit: texture source {source_name!r} not found")
            return
        source_renderers = source.capabilities_in_children(RENDERER_KINDS)
        targets = node.capabilities_in_children(RENDERER_KINDS)
        if not source_renderers or not targets or source_renderers[0].material is None:
            return
        # Shared by reference, like the host's material assignment
        material = source_renderers[0].material
        for renderer in targets:
            renderer.material = material

    # -- mesh -----------------------------------------------------------------

    def _mesh(self, cmd: MeshCommand) -> None:
        prototype = self.world.find(cmd.src)
        if prototype is None:
            logger.warning(f"Mesh: prototype {cmd.src!r} not found")
            return

        node = self.world.instantiate(prototype)
        self._place(node, cmd.position, cmd.rotation, cmd.scale)

        try:
            # Line-wrapped payloads are accepted; whitespace is not base64
            packed = "".join(cmd.data.split())
            text = base64.b64decode(packed, validate=True).decode("utf-8")
            vertices = extract_number_array(text, "v")
            triangles = extract_number_array(text, "t", parse=int)
            mesh = MeshBuffer.from_flat(vertices, triangles)
        except (MeshDataError, binascii.Error, UnicodeDecodeError) as e:
            logger.warning(f"Mesh: bad data for {cmd.src!r}: {e}")
            self.world.destroy(node)
            return

        mesh_filter = node.get_capability(CapabilityKind.MESH_FILTER)
        if mesh_filter is None:
            mesh_filter = node.add_capability(CapabilityKind.MESH_FILTER)
        mesh_filter.mesh = mesh

        renderer = node.get_capability(CapabilityKind.MESH_RENDERER)
        if renderer is None:
            renderer = node.add_capability(CapabilityKind.MESH_RENDERER)
        renderer.enabled = True
        if color_given(cmd.color):
            self._paint([renderer], cmd.color)

        logger.info(f"Mesh spawned: {mesh.vertex_count} verts, {mesh.triangle_count} tris")

    # -- tween / turn ---------------------------------------------------------

    def _tween(self, cmd: TweenCommand) -> None:
        node = self.world.find(cmd.target)
        if node is None:
            logger.warning(f"Tween: target {cmd.target!r} not found")
            return

        label = node.name
        if cmd.delta_position.is_zero() and cmd.delta_rotation.is_zero() and cmd.delta_scale.is_zero():
            self._ack("tween", label)
            return

        end_position = None
        if not cmd.delta_position.is_zero():
            end_position = node.position + cmd.delta_position
        end_rotation = None
        if not cmd.delta_rotation.is_zero():
            end_rotation = Quaternion.from_euler_vector(node.euler_angles + cmd.delta_rotation)
        end_scale = None
        if not cmd.delta_scale.is_zero():
            end_scale = node.local_scale + cmd.delta_scale

        task = TweenTask(
            node,
            cmd.duration,
            end_position=end_position,
            end_rotation=end_rotation,
            end_scale=end_scale,
            on_complete=lambda: self._ack("tween", label),
        )
        if cmd.duration <= 0:
            task.step(0.0)
            return
        self.scheduler.schedule(task)

    def _turn(self, cmd: TurnCommand) -> None:
        node = self.world.find(cmd.target)
        if node is None:
            logger.warning(f"Turn: target {cmd.target!r} not found")
            return

        label = node.name
        end_rotation = node.rotation * Quaternion.from_euler_vector(cmd.delta_rotation)
        if cmd.delta_rotation.is_zero() or cmd.duration <= 0:
            node.rotation = end_rotation
            self._ack("turn", label)
            return

        self.scheduler.schedule(
            TurnTask(node, end_rotation, cmd.duration, on_complete=lambda: self._ack("turn", label))
        )

    # -- timeline -------------------------------------------------------------

    def _timeline(self, cmd: TimelineCommand) -> None:
        label = cmd.label or "timeline"
        self.scheduler.schedule(
            TimelineTask(
                self.scheduler,
                cmd.sorted_entries(),
                replay=self.apply,
                on_complete=lambda: self._ack("timeline", label),
            )
        )
        logger.debug(f"Timeline {label!r} scheduled with {len(cmd.entries)} entries")

    # -- modload --------------------------------------------------------------

    def _modload(self, cmd: ModLoadCommand) -> None:
        if not cmd.file:
            logger.warning("Modload: no file given")
            return
        if self.modules is None:
            logger.warning(f"Modload: no module loader; ignoring {cmd.file!r}")
            return
        self.modules.request(cmd.file)
