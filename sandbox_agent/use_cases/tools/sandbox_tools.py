"""
Tools list_files, read_files, create_file and edit_file mapped to a sandbox backend.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable, Mapping
from contextlib import asynccontextmanager
from types import MappingProxyType
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from sandbox_agent.entities.execution_target import ExecutionTarget, RemoteSessionTarget
from sandbox_agent.entities.tool_invocation import ToolName
from sandbox_agent.exceptions import (
    AlreadyExistsError,
    DiffApplicationError,
    NoSuchToolError,
    NotFoundError,
    SchemaViolationError,
    TransportError,
    UnimplementedProviderError,
    UnsupportedBinaryEditError,
)
from sandbox_agent.ports.code.apply_diff_port import ApplyDiffPort
from sandbox_agent.ports.llm.tools_port import ToolsHandlerPort, ToolSpec
from sandbox_agent.ports.sandbox.sandbox_port import SandboxProviderPort, SandboxSessionPort
from sandbox_agent.use_cases.files.remote_file_access import RemoteFileAccess
from sandbox_agent.use_cases.tools.tool_schemas import (
    BUILD_TOOLS,
    TOOL_ARGUMENTS,
    CreateFileArgs,
    EditFileArgs,
    ListFilesArgs,
    ReadFilesArgs,
    tool_spec,
)
from sandbox_agent.utils import paths

BoundTool = Callable[[Any], Awaitable[object]]


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors(include_url=False):
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


class PathLocks:
    """One asyncio lock per canonical path, shared by the tools of one turn."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, path: str) -> asyncio.Lock:
        key = paths.canonical_key(path)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


class ToolSet(ToolsHandlerPort):
    """Immutable mapping of tool name to a handler bound to one execution target."""

    def __init__(self, handlers: Mapping[str, BoundTool]):
        self._handlers: Mapping[str, BoundTool] = MappingProxyType(dict(handlers))

    @property
    def handlers(self) -> Mapping[str, BoundTool]:
        return self._handlers

    def available_tools(self) -> list[ToolSpec]:
        return [tool_spec(ToolName(name)) for name in self._handlers]

    def validate(
        self, name: str, arguments: Union[str, dict[str, Any]]
    ) -> BaseModel:
        """
        Validate arguments against the tool's argument model.

        Raises:
            NoSuchToolError: If the tool is not part of this set
            SchemaViolationError: If the arguments are not valid JSON or do not match
        """
        if name not in self._handlers:
            raise NoSuchToolError(name, list(self._handlers))
        model = TOOL_ARGUMENTS[ToolName(name)]
        try:
            if isinstance(arguments, (str, bytes)):
                return model.model_validate_json(arguments)
            return model.model_validate(arguments)
        except ValidationError as e:
            raise SchemaViolationError(name, arguments, _format_validation_error(e))

    async def dispatch(
        self, name: str, arguments: Union[str, dict[str, Any]]
    ) -> object:
        args = self.validate(name, arguments)
        return await self._handlers[name](args)


class SandboxToolsDispatcher:
    """Route tool invocations to the sandbox named by the execution target."""

    def __init__(
        self,
        sandbox_provider: SandboxProviderPort,
        file_access: RemoteFileAccess,
        apply_diff: ApplyDiffPort,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            sandbox_provider: Resumes sandbox sessions
            file_access: Shared read/write primitives
            apply_diff: Service merging edit snippets into files
            timeout: Seconds allowed to resume a sandbox (None for no limit)
            logger: Logger instance to use for logging
        """
        self._sandbox_provider = sandbox_provider
        self._file_access = file_access
        self._apply_diff = apply_diff
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    # ------------------------- sessions -------------------------
    @asynccontextmanager
    async def _session(
        self, tool_name: ToolName, target: ExecutionTarget
    ) -> AsyncIterator[SandboxSessionPort]:
        if not isinstance(target, RemoteSessionTarget) or not target.session_ref:
            raise UnimplementedProviderError(tool_name.value, target.kind.value)
        try:
            session = await asyncio.wait_for(
                self._sandbox_provider.resume(target.session_ref), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            raise TransportError(f"Timed out resuming sandbox {target.session_ref}")
        try:
            yield session
        finally:
            try:
                await session.disconnect()
            except Exception as e:
                self._logger.warning(f"Error disconnecting from sandbox: {e}")

    # ------------------------- tools -------------------------
    async def list_files(self, target: ExecutionTarget, path: str) -> list[dict[str, str]]:
        async with self._session(ToolName.LIST_FILES, target) as session:
            entries = await self._file_access.list_dir(session, path)
        return [{"path": entry.name, "type": entry.type} for entry in entries]

    async def read_files(
        self, target: ExecutionTarget, file_paths: list[str]
    ) -> list[dict[str, Any]]:
        """Read each path; paths that cannot be read are left out of the result."""
        async with self._session(ToolName.READ_FILES, target) as session:
            files = await asyncio.gather(
                *(self._file_access.read(session, p) for p in file_paths)
            )
        results: list[dict[str, Any]] = []
        for path, file in zip(file_paths, files):
            if file is None:
                self._logger.error(f"Failed to read file {path}")
                continue
            results.append(file.to_tool_result())
        return results

    async def create_file(
        self,
        target: ExecutionTarget,
        path: str,
        content: str,
        locks: Optional[PathLocks] = None,
    ) -> str:
        async with (locks or PathLocks()).get(path):
            async with self._session(ToolName.CREATE_FILE, target) as session:
                if await self._file_access.exists(session, path):
                    raise AlreadyExistsError("File already exists")
                if not await self._file_access.write(session, path, content):
                    raise TransportError("Error creating file")
        self._logger.info(f"Created {paths.normalize(path)}")
        return "File created"

    async def edit_file(
        self,
        target: ExecutionTarget,
        path: str,
        content: str,
        instruction: str,
        locks: Optional[PathLocks] = None,
    ) -> str:
        async with (locks or PathLocks()).get(path):
            async with self._session(ToolName.EDIT_FILE, target) as session:
                if not await self._file_access.exists(session, path):
                    raise NotFoundError("File does not exist")
                original = await self._file_access.read(session, path)
                if original is None:
                    raise TransportError("Error reading file")
                if original.is_binary:
                    raise UnsupportedBinaryEditError(
                        "Binary files are not supported for editing"
                    )

                updated = await self._apply_diff.apply_diff(
                    original_code=str(original.content),
                    update_snippet=content,
                    instruction=instruction,
                )
                if not updated.result:
                    raise DiffApplicationError(
                        f"Error applying code change: {updated.error}"
                    )
                if not await self._file_access.write(session, path, updated.result):
                    raise TransportError("Error editing file")
        self._logger.info(f"Edited {paths.normalize(path)}")
        return "File edited!"

    # ------------------------- binding -------------------------
    def bind(
        self, target: ExecutionTarget, tool_names: Iterable[ToolName] = BUILD_TOOLS
    ) -> ToolSet:
        """
        Build the tool set of one turn, every handler closed over ``target``.

        Create and edit calls of the returned set are serialized per path.
        """
        locks = PathLocks()

        async def list_files(args: ListFilesArgs) -> object:
            return await self.list_files(target, args.path)

        async def read_files(args: ReadFilesArgs) -> object:
            return await self.read_files(target, args.paths)

        async def create_file(args: CreateFileArgs) -> object:
            return await self.create_file(target, args.path, args.content, locks)

        async def edit_file(args: EditFileArgs) -> object:
            return await self.edit_file(
                target, args.path, args.content, args.instruction, locks
            )

        handlers: dict[ToolName, BoundTool] = {
            ToolName.LIST_FILES: list_files,
            ToolName.READ_FILES: read_files,
            ToolName.CREATE_FILE: create_file,
            ToolName.EDIT_FILE: edit_file,
        }
        return ToolSet({name.value: handlers[name] for name in tool_names})

    async def dispatch(
        self,
        name: str,
        arguments: Union[str, dict[str, Any]],
        target: ExecutionTarget,
    ) -> object:
        """Run a single tool call outside of a turn."""
        return await self.bind(target).dispatch(name, arguments)
