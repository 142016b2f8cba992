"""
Sync Module

Connection supervision, heartbeat and command polling against the remote
authority, plus input, pause and module forwarding.
"""

from deserver_client.sync.client import SessionClient
from deserver_client.sync.discovery import DiscoveredServer, apply_discovery, discover_server
from deserver_client.sync.inputs import InputForwarder, PauseMonitor
from deserver_client.sync.modules import DirectoryModuleLoader, ModuleHandle, ModuleLoader, ModuleSync
from deserver_client.sync.protocol import EventType, OutboundMessage
from deserver_client.sync.snapshot import SceneNodeDescriptor, serialize_snapshot, snapshot_world
from deserver_client.sync.state import (
    ConnectionState,
    Identity,
    IdentityProvider,
    SessionContext,
    resolve_identity,
)
from deserver_client.sync.supervisor import ConnectionSupervisor

__all__ = [
    "ConnectionState",
    "ConnectionSupervisor",
    "DirectoryModuleLoader",
    "DiscoveredServer",
    "EventType",
    "Identity",
    "IdentityProvider",
    "InputForwarder",
    "ModuleHandle",
    "ModuleLoader",
    "ModuleSync",
    "OutboundMessage",
    "PauseMonitor",
    "SceneNodeDescriptor",
    "SessionClient",
    "SessionContext",
    "apply_discovery",
    "discover_server",
    "resolve_identity",
    "serialize_snapshot",
    "snapshot_world",
]
