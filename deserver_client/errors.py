"""Exception types raised inside the sync agent."""


class DeServerError(Exception):
    """Base error for the DeServer client."""


class TransportError(DeServerError):
    """A request to the remote authority failed or timed out."""


class MeshDataError(DeServerError):
    """A mesh payload could not be decoded into a valid buffer."""


class ModuleLoadError(DeServerError):
    """The host module loader rejected a module."""


class SceneFileError(DeServerError):
    """A scene description could not be turned into an in-memory world."""
