"""
Use case bridging file operations to a connected sandbox session.
"""

import asyncio
import base64
import binascii
import logging
from collections.abc import Awaitable
from typing import Optional, TypeVar, Union

from sandbox_agent.entities.sandbox_file import SandboxFile
from sandbox_agent.exceptions import InvalidContentError, TransportError
from sandbox_agent.ports.sandbox.sandbox_port import DirEntry, SandboxSessionPort
from sandbox_agent.use_cases.code.transform_content import ContentTransformer
from sandbox_agent.utils import paths

T = TypeVar("T")


class RemoteFileAccess:
    """Existence checks, reads and writes against a sandbox session."""

    def __init__(
        self,
        transformer: ContentTransformer,
        router_type: str = "app",
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the use case.

        Args:
            transformer: Pipeline applied to source-like files before writing
            router_type: Routing convention deciding which file is the entry file
            timeout: Seconds allowed for each remote call (None for no limit)
            logger: Logger instance to use for logging
        """
        self._transformer = transformer
        self._router_type = router_type
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    async def _call(self, awaitable: Awaitable[T]) -> T:
        if self._timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise TransportError(f"Remote call timed out after {self._timeout}s")

    async def list_dir(
        self, session: SandboxSessionPort, path: str
    ) -> list[DirEntry]:
        """
        List the direct children of a directory.

        Raises:
            TransportError: If the directory cannot be listed
        """
        normalized_path = paths.normalize(path) or "."
        try:
            return await self._call(session.fs.readdir(normalized_path))
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Error listing files in {normalized_path}: {e}")

    async def exists(self, session: SandboxSessionPort, path: str) -> bool:
        """
        Check whether a file exists by listing its parent directory.

        Errors are logged and reported as False.
        """
        normalized_path = paths.normalize(path)
        try:
            dir_path = paths.dir_name(normalized_path)
            file_name = paths.base_name(normalized_path)
            entries = await self._call(session.fs.readdir(dir_path))
            return any(entry.name == file_name for entry in entries)
        except Exception as e:
            self._logger.error(f"Error checking file existence {normalized_path}: {e}")
            return False

    async def read(
        self, session: SandboxSessionPort, path: str
    ) -> Optional[SandboxFile]:
        """
        Read a file as bytes or text depending on its classification.

        Returns:
            The file, or None if it cannot be read (the error is logged)
        """
        normalized_path = paths.normalize(path)
        try:
            if paths.classify(normalized_path).binary:
                content: Union[str, bytes] = await self._call(
                    session.fs.read_file(normalized_path)
                )
            else:
                content = await self._call(session.fs.read_text_file(normalized_path))
            return SandboxFile.from_content(normalized_path, content)
        except Exception as e:
            self._logger.error(f"Error reading remote file {normalized_path}: {e}")
            return None

    async def _prepare_text(self, normalized_path: str, content: str) -> str:
        if not paths.classify(normalized_path).source_like:
            return content
        try:
            result = await self._transformer.transform(
                normalized_path,
                content,
                paths.is_root_layout_file(normalized_path, self._router_type),
            )
            return result.new_content
        except Exception as e:
            self._logger.error(f"Error processing file {normalized_path}: {e}")
            return content

    async def write(self, session: SandboxSessionPort, path: str, content: str) -> bool:
        """
        Write a file, transforming source-like content first.

        Binary-classified paths expect base64 content and are written as bytes.

        Returns:
            True on success, False if the sandbox rejected the write (logged)

        Raises:
            InvalidContentError: If a binary path receives content that is not base64
        """
        normalized_path = paths.normalize(path)
        if paths.classify(normalized_path).binary:
            try:
                data = base64.b64decode(content, validate=True)
            except (binascii.Error, ValueError):
                raise InvalidContentError(
                    f"Content for binary file {normalized_path} must be base64 encoded"
                )
            return await self._write(session, normalized_path, data)

        write_content = await self._prepare_text(normalized_path, content)
        return await self._write(session, normalized_path, write_content)

    async def _write(
        self, session: SandboxSessionPort, normalized_path: str, content: Union[str, bytes]
    ) -> bool:
        try:
            if isinstance(content, bytes):
                await self._call(session.fs.write_file(normalized_path, content))
            else:
                await self._call(session.fs.write_text_file(normalized_path, content))
            return True
        except Exception as e:
            self._logger.error(f"Error writing remote file {normalized_path}: {e}")
            return False
