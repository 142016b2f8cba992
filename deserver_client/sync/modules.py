"""
Module Sync

Downloads host modules from the server's ``/mods`` endpoint and hands the
bytes to the host's module loader: all listed modules once at startup, and
single modules on a ``modload`` command.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from deserver_client.errors import ModuleLoadError, TransportError
from deserver_client.logging import get_logger
from deserver_client.sync.client import SessionClient
from deserver_client.sync.state import SessionContext

logger = get_logger("sync.modules")


@dataclass(frozen=True)
class ModuleHandle:
    """What the loader made of a module."""

    name: str
    attached: int = 0
    detail: Any = None


class ModuleLoader(Protocol):
    """Host hook that turns module bytes into something running."""

    def supports(self, file: str) -> bool:
        """Whether the loader understands this file (usually by extension)."""

    def load(self, name: str, data: bytes) -> ModuleHandle:
        """Load a module; raises ModuleLoadError when the bytes are rejected."""


class DirectoryModuleLoader:
    """
    Stores received modules in a directory.

    Used by the headless runner, where there is no host to attach modules
    to; the stored files can be inspected or picked up by other tooling.
    """

    def __init__(self, directory: Path, extensions: tuple[str, ...] = (".dll",)):
        self.directory = directory
        self.extensions = tuple(ext.lower() for ext in extensions)

    def supports(self, file: str) -> bool:
        return file.lower().endswith(self.extensions)

    def load(self, name: str, data: bytes) -> ModuleHandle:
        if not data:
            raise ModuleLoadError(f"Module {name!r} is empty")
        target = self.directory / Path(name).name
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise ModuleLoadError(f"Could not store {name!r}: {e}") from e
        return ModuleHandle(name=name, detail=target)


class ModuleSync:
    """Fetches modules and feeds them to the loader."""

    def __init__(self, session: SessionContext, client: SessionClient, loader: ModuleLoader):
        self.session = session
        self.client = client
        self.loader = loader
        self.loaded: dict[str, ModuleHandle] = {}

    async def install(self, file: str, ack: bool = False) -> ModuleHandle | None:
        """
        Download and load one module.

        Args:
            file: Module file name as listed by the server.
            ack: Whether to acknowledge a successful load as ``modload``.

        Returns:
            The loader's handle, or None if download or load failed.
        """
        try:
            data = await self.client.fetch_mod(file)
        except TransportError:
            logger.warning(f"Download failed for module {file!r}")
            return None

        try:
            handle = self.loader.load(file, data)
        except ModuleLoadError as e:
            logger.error(f"Could not load module {file!r}: {e}")
            return None

        self.loaded[file] = handle
        logger.info(f"Loaded module {file!r} ({handle.attached} attached)")
        if ack:
            self.client.send_ack("modload", file)
        return handle

    def request(self, file: str) -> None:
        """Handle a modload command: check the file type, then install in the background."""
        if not self.loader.supports(file):
            logger.warning(f"Modload ignored {file!r}: unsupported module type")
            return
        self.session.spawn(self.install(file, ack=True), name=f"modload-{file}")

    async def sync_all(self) -> list[ModuleHandle]:
        """Load every module the server lists; failures are skipped."""
        try:
            names = await self.client.fetch_mod_list()
        except TransportError:
            logger.warning("Could not fetch module list")
            return []

        handles = []
        for file in names:
            if not self.loader.supports(file):
                logger.warning(f"Skipping module {file!r}: unsupported module type")
                continue
            handle = await self.install(file)
            if handle is not None:
                handles.append(handle)
        logger.info(f"Module sync finished: {len(handles)}/{len(names)} loaded")
        return handles

    async def run(self) -> None:
        """Wait for the first connection, then sync once."""
        while not self.session.connected:
            await asyncio.sleep(self.session.config.loops.retry_interval)
        await self.sync_all()
