"""
DeServer Client

Synchronization agent that mirrors a host's 3D world to a DeServer and
applies the mutation commands it sends back.
"""

__version__ = "0.1.0"

from deserver_client.agent import SyncAgent
from deserver_client.animation import AnimationScheduler, TaskStatus
from deserver_client.commands import CommandInterpreter, parse_command
from deserver_client.config import ClientConfig, get_config
from deserver_client.errors import (
    DeServerError,
    MeshDataError,
    ModuleLoadError,
    SceneFileError,
    TransportError,
)
from deserver_client.logging import get_logger, setup_logging
from deserver_client.sync import ConnectionState, Identity, SessionContext
from deserver_client.world import InMemoryWorld, SceneNode

__all__ = [
    "AnimationScheduler",
    "ClientConfig",
    "CommandInterpreter",
    "ConnectionState",
    "DeServerError",
    "Identity",
    "InMemoryWorld",
    "MeshDataError",
    "ModuleLoadError",
    "SceneFileError",
    "SceneNode",
    "SessionContext",
    "SyncAgent",
    "TaskStatus",
    "TransportError",
    "get_config",
    "get_logger",
    "parse_command",
    "setup_logging",
]
