"""
Command Models

Typed forms of the remote authority's mutation commands. Each wire message
decodes into exactly one of these frozen dataclasses.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from deserver_client.wire.decoder import (
    TimelineEntry,
    extract_bool,
    extract_component_map,
    extract_float,
    extract_string,
    extract_timeline_entries,
)
from deserver_client.world.spatial import Vector3


class CommandKind(Enum):
    """Values of the ``cmd`` discriminator."""

    CREATE = "create"
    EDIT = "edit"
    MESH = "mesh"
    TWEEN = "tween"
    TURN = "turn"
    TIMELINE = "timeline"
    MODLOAD = "modload"


@dataclass(frozen=True)
class CreateCommand:
    src: str
    position: Vector3 = field(default_factory=Vector3.zero)
    rotation: Vector3 = field(default_factory=Vector3.zero)
    scale: Vector3 = field(default_factory=Vector3.one)
    color: str | None = None
    rename: str | None = None
    components: dict[str, bool] = field(default_factory=dict)

    kind = CommandKind.CREATE


@dataclass(frozen=True)
class EditCommand:
    target: str
    delete: bool = False
    position: Vector3 = field(default_factory=Vector3.zero)
    rotation: Vector3 = field(default_factory=Vector3.zero)
    scale: Vector3 = field(default_factory=Vector3.one)
    color: str | None = None
    copytex: str | None = None
    rename: str | None = None
    text: str | None = None
    components: dict[str, bool] = field(default_factory=dict)

    kind = CommandKind.EDIT


@dataclass(frozen=True)
class MeshCommand:
    src: str
    data: str = ""
    position: Vector3 = field(default_factory=Vector3.zero)
    rotation: Vector3 = field(default_factory=Vector3.zero)
    scale: Vector3 = field(default_factory=Vector3.one)
    color: str | None = None

    kind = CommandKind.MESH


@dataclass(frozen=True)
class TweenCommand:
    target: str
    delta_position: Vector3 = field(default_factory=Vector3.zero)
    delta_rotation: Vector3 = field(default_factory=Vector3.zero)
    delta_scale: Vector3 = field(default_factory=Vector3.zero)
    duration: float = 1.0

    kind = CommandKind.TWEEN


@dataclass(frozen=True)
class TurnCommand:
    target: str
    delta_rotation: Vector3 = field(default_factory=Vector3.zero)
    duration: float = 1.0

    kind = CommandKind.TURN


@dataclass(frozen=True)
class TimelineCommand:
    label: str | None = None
    entries: tuple[TimelineEntry, ...] = ()

    kind = CommandKind.TIMELINE

    def sorted_entries(self) -> list[TimelineEntry]:
        """Entries by ascending offset; ties keep wire order."""
        return sorted(self.entries, key=lambda e: e.offset)


@dataclass(frozen=True)
class ModLoadCommand:
    file: str = ""

    kind = CommandKind.MODLOAD


Command = (
    CreateCommand
    | EditCommand
    | MeshCommand
    | TweenCommand
    | TurnCommand
    | TimelineCommand
    | ModLoadCommand
)


def _vector(src: str, prefix: str, default: float) -> Vector3:
    return Vector3(
        extract_float(src, f"{prefix}x", default),
        extract_float(src, f"{prefix}y", default),
        extract_float(src, f"{prefix}z", default),
    )


def _parse_create(src: str) -> CreateCommand:
    return CreateCommand(
        src=extract_string(src, "src", ""),
        position=_vector(src, "", 0.0),
        rotation=_vector(src, "r", 0.0),
        scale=_vector(src, "s", 1.0),
        color=extract_string(src, "color"),
        rename=extract_string(src, "rename"),
        components=extract_component_map(src),
    )


def _parse_edit(src: str) -> EditCommand:
    return EditCommand(
        target=extract_string(src, "target", ""),
        delete=extract_bool(src, "delete", False),
        position=_vector(src, "", 0.0),
        rotation=_vector(src, "r", 0.0),
        scale=_vector(src, "s", 1.0),
        color=extract_string(src, "color"),
        copytex=extract_string(src, "copytex"),
        rename=extract_string(src, "rename"),
        text=extract_string(src, "text"),
        components=extract_component_map(src),
    )


def _parse_mesh(src: str) -> MeshCommand:
    return MeshCommand(
        src=extract_string(src, "src", ""),
        data=extract_string(src, "data", ""),
        position=_vector(src, "", 0.0),
        rotation=_vector(src, "r", 0.0),
        scale=_vector(src, "s", 1.0),
        color=extract_string(src, "color"),
    )


def _parse_tween(src: str) -> TweenCommand:
    return TweenCommand(
        target=extract_string(src, "target", ""),
        delta_position=_vector(src, "d", 0.0),
        delta_rotation=_vector(src, "dr", 0.0),
        delta_scale=_vector(src, "ds", 0.0),
        duration=extract_float(src, "duration", 1.0),
    )


def _parse_turn(src: str) -> TurnCommand:
    return TurnCommand(
        target=extract_string(src, "target", ""),
        delta_rotation=_vector(src, "dr", 0.0),
        duration=extract_float(src, "duration", 1.0),
    )


def _parse_timeline(src: str) -> TimelineCommand:
    return TimelineCommand(
        label=extract_string(src, "label"),
        entries=tuple(extract_timeline_entries(src)),
    )


def _parse_modload(src: str) -> ModLoadCommand:
    return ModLoadCommand(file=extract_string(src, "file", ""))


_PARSERS: dict[CommandKind, Callable[[str], Command]] = {
    CommandKind.CREATE: _parse_create,
    CommandKind.EDIT: _parse_edit,
    CommandKind.MESH: _parse_mesh,
    CommandKind.TWEEN: _parse_tween,
    CommandKind.TURN: _parse_turn,
    CommandKind.TIMELINE: _parse_timeline,
    CommandKind.MODLOAD: _parse_modload,
}


def command_name(payload: str | None) -> str:
    """The lower-cased ``cmd`` discriminator, or "" when missing."""
    return (extract_string(payload, "cmd", "") or "").lower()


def parse_command(payload: str | None) -> Command | None:
    """Decode one wire message; None for a missing or unknown ``cmd``."""
    try:
        kind = CommandKind(command_name(payload))
    except ValueError:
        return None
    return _PARSERS[kind](payload)
