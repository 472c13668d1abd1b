"""
Sandbox port interfaces defining the contract for remote execution targets.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class DirEntry:
    """One entry of a sandbox directory listing."""

    name: str
    type: Literal["file", "directory"]


class SandboxFileSystemPort(ABC):
    """Filesystem of a connected sandbox session. Paths are sandbox paths."""

    @abstractmethod
    async def readdir(self, path: str) -> list[DirEntry]:
        """
        List the immediate children of a directory.

        Args:
            path: Directory path inside the sandbox

        Returns:
            Entries of the directory

        Raises:
            TransportError: If the directory cannot be listed
        """
        pass

    @abstractmethod
    async def read_file(self, path: str) -> bytes:
        """
        Read a file as raw bytes.

        Raises:
            TransportError: If the file cannot be read
        """
        pass

    @abstractmethod
    async def read_text_file(self, path: str) -> str:
        """
        Read a file as UTF-8 text.

        Raises:
            TransportError: If the file cannot be read or decoded
        """
        pass

    @abstractmethod
    async def write_text_file(self, path: str, content: str) -> None:
        """
        Create or overwrite a text file, creating parent directories.

        Raises:
            TransportError: If the file cannot be written
        """
        pass

    @abstractmethod
    async def write_file(self, path: str, content: bytes) -> None:
        """
        Create or overwrite a file with raw bytes, creating parent directories.

        Raises:
            TransportError: If the file cannot be written
        """
        pass


class SandboxSessionPort(ABC):
    """A live connection to one sandbox."""

    @property
    @abstractmethod
    def fs(self) -> SandboxFileSystemPort:
        pass

    async def disconnect(self) -> None:
        """Release the connection. Sessions without resources do nothing."""
        return None


class SandboxProviderPort(ABC):
    """Port interface for resuming sandbox sessions."""

    @abstractmethod
    async def resume(self, session_id: str) -> SandboxSessionPort:
        """
        Resume (wake if needed) a sandbox and connect to it.

        Args:
            session_id: Opaque reference of the sandbox

        Returns:
            A connected session

        Raises:
            TransportError: If the sandbox cannot be resumed
        """
        pass
