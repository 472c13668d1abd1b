"""
Directory-backed sandbox adapter: each session id is a directory under a root.
"""

import asyncio
import logging
import os

from typing_extensions import override

from sandbox_agent.exceptions import TransportError
from sandbox_agent.ports.sandbox.sandbox_port import (
    DirEntry,
    SandboxFileSystemPort,
    SandboxProviderPort,
    SandboxSessionPort,
)


class DirectorySandboxFileSystem(SandboxFileSystemPort):
    """Filesystem confined to one sandbox directory."""

    def __init__(self, root: str, logger: logging.Logger | None = None):
        """
        Initialize the filesystem.

        Args:
            root: Absolute directory holding the sandbox's project
            logger: Logger instance to use for logging. If None, a default logger will be created.
        """
        self._root = os.path.abspath(root)
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    def _resolve(self, path: str) -> str:
        """
        Map a sandbox path onto the host, refusing anything outside the sandbox.

        Raises:
            TransportError: If the path escapes the sandbox directory
        """
        relative = str(path or "").replace("\\", "/").lstrip("/")
        resolved = os.path.abspath(os.path.join(self._root, relative))
        try:
            common = os.path.commonpath([self._root, resolved])
        except ValueError:
            common = ""
        if common != self._root:
            raise TransportError(f"Path is outside of the sandbox: {path}")
        return resolved

    def _validate_directory(self, directory: str) -> None:
        if not os.path.exists(directory):
            raise TransportError(f"Directory does not exist: {directory}")
        if not os.path.isdir(directory):
            raise TransportError(f"Path is not a directory: {directory}")

    def _readdir(self, path: str) -> list[DirEntry]:
        directory = self._resolve(path)
        self._validate_directory(directory)
        entries: list[DirEntry] = []
        with os.scandir(directory) as it:
            for item in it:
                kind = "directory" if item.is_dir() else "file"
                entries.append(DirEntry(name=item.name, type=kind))
        return sorted(entries, key=lambda e: e.name)

    def _read_bytes(self, path: str) -> bytes:
        with open(self._resolve(path), "rb") as f:
            return f.read()

    def _read_text(self, path: str) -> str:
        with open(self._resolve(path), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def _write(self, path: str, content: bytes) -> None:
        target = self._resolve(path)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as f:
            f.write(content)

    async def _run(self, action: str, path: str, fn, *args):
        try:
            return await asyncio.to_thread(fn, path, *args)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to {action} {path}: {str(e)}")

    @override
    async def readdir(self, path: str) -> list[DirEntry]:
        return await self._run("list", path, self._readdir)

    @override
    async def read_file(self, path: str) -> bytes:
        return await self._run("read", path, self._read_bytes)

    @override
    async def read_text_file(self, path: str) -> str:
        return await self._run("read", path, self._read_text)

    @override
    async def write_text_file(self, path: str, content: str) -> None:
        await self._run("write", path, self._write, content.encode("utf-8"))

    @override
    async def write_file(self, path: str, content: bytes) -> None:
        await self._run("write", path, self._write, content)


class DirectorySandboxSession(SandboxSessionPort):
    def __init__(self, session_id: str, fs: DirectorySandboxFileSystem):
        self.session_id = session_id
        self._fs = fs

    @property
    @override
    def fs(self) -> SandboxFileSystemPort:
        return self._fs


class DirectorySandboxProvider(SandboxProviderPort):
    """Sandbox provider where ``<root>/<session id>`` is the sandbox."""

    def __init__(self, root: str, logger: logging.Logger | None = None):
        self._root = os.path.abspath(root)
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    @override
    async def resume(self, session_id: str) -> SandboxSessionPort:
        if not session_id or session_id in (".", "..") or "/" in session_id or "\\" in session_id:
            raise TransportError(f"Invalid sandbox id: {session_id!r}")
        directory = os.path.join(self._root, session_id)
        if not os.path.isdir(directory):
            raise TransportError(f"Sandbox not found: {session_id}")
        self._logger.debug(f"Resumed sandbox {session_id} at {directory}")
        return DirectorySandboxSession(
            session_id, DirectorySandboxFileSystem(directory, self._logger)
        )
