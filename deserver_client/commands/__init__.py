"""Remote mutation commands: typed model, interpreter and toggles."""

from deserver_client.commands.interpreter import AckSink, CommandInterpreter, ModuleRequester
from deserver_client.commands.models import (
    Command,
    CommandKind,
    CreateCommand,
    EditCommand,
    MeshCommand,
    ModLoadCommand,
    TimelineCommand,
    TurnCommand,
    TweenCommand,
    parse_command,
)
from deserver_client.commands.toggles import apply_toggles

__all__ = [
    "AckSink",
    "Command",
    "CommandInterpreter",
    "CommandKind",
    "CreateCommand",
    "EditCommand",
    "MeshCommand",
    "ModLoadCommand",
    "ModuleRequester",
    "TimelineCommand",
    "TurnCommand",
    "TweenCommand",
    "apply_toggles",
    "parse_command",
]
