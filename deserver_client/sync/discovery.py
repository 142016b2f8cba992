"""
Server Discovery

A host scene can name the server it wants by carrying a node called
``ServerInfo:<ip>:<port>``. Discovery scans every node, inactive ones
included, and overrides the configured endpoint with the first match.
"""

from dataclasses import dataclass

from deserver_client.config import ServerConfig
from deserver_client.logging import get_logger
from deserver_client.world.model import WorldModel

logger = get_logger("sync.discovery")

SERVER_INFO_PREFIX = "ServerInfo:"


@dataclass(frozen=True)
class DiscoveredServer:
    """Endpoint announced by a ServerInfo node; port is None when invalid."""

    host: str
    port: int | None = None


def parse_server_info(name: str) -> DiscoveredServer | None:
    if not name.lower().startswith(SERVER_INFO_PREFIX.lower()):
        return None
    parts = name.split(":")
    if len(parts) < 3:
        return None

    port = None
    try:
        candidate = int(parts[2])
    except ValueError:
        candidate = 0
    if 0 < candidate < 65536:
        port = candidate
    return DiscoveredServer(host=parts[1], port=port)


def discover_server(world: WorldModel) -> DiscoveredServer | None:
    for node in world.iter_all():
        found = parse_server_info(node.name)
        if found is not None:
            return found
    return None


def apply_discovery(world: WorldModel, server: ServerConfig) -> bool:
    """
    Point the server config at a discovered endpoint.

    Returns:
        True if a ServerInfo node was found.
    """
    found = discover_server(world)
    if found is None:
        logger.warning(
            f"No ServerInfo:<ip>:<port> node found; using {server.host}:{server.port}"
        )
        return False

    server.host = found.host
    if found.port is not None:
        server.port = found.port
    logger.info(f"ServerInfo detected: {server.host}:{server.port}")
    return True
