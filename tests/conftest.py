"""
Pytest configuration and shared fixtures.
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from sandbox_agent.adapters.code.prettier_formatter import PassthroughFormatterAdapter
from sandbox_agent.adapters.sandbox.directory_sandbox_adapter import (
    DirectorySandboxProvider,
)
from sandbox_agent.container import DependencyContainer
from sandbox_agent.entities.execution_target import RemoteSessionTarget
from sandbox_agent.ports.code.apply_diff_port import ApplyDiffPort, DiffResult
from sandbox_agent.use_cases.code.transform_content import ContentTransformer
from sandbox_agent.use_cases.files.remote_file_access import RemoteFileAccess
from sandbox_agent.use_cases.tools.sandbox_tools import SandboxToolsDispatcher

PRELOAD_SRC = "https://example.com/preload.js"
SANDBOX_ID = "project-1"


@pytest.fixture
def mock_logger():
    """
    Create a mock logger for testing.

    Returns:
        Mock logger instance
    """
    return MagicMock()


@pytest.fixture
def sandbox_root(tmp_path):
    """
    Create a sandbox root holding one sandbox with a small Next.js project.

    Returns:
        Path to the sandbox root
    """
    project = tmp_path / SANDBOX_ID
    (project / "app").mkdir(parents=True)
    (project / "public").mkdir()
    (project / "app" / "page.tsx").write_text(
        'export default function Page() {\n  return <div data-oid="abc1234">Hi</div>;\n}\n'
    )
    (project / "README.md").write_text("# Project\n")
    (project / "public" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01")
    return str(tmp_path)


@pytest.fixture
def project_dir(sandbox_root):
    return os.path.join(sandbox_root, SANDBOX_ID)


@pytest.fixture
def sandbox_provider(sandbox_root, mock_logger):
    return DirectorySandboxProvider(sandbox_root, mock_logger)


@pytest.fixture
def transformer(mock_logger):
    return ContentTransformer(PassthroughFormatterAdapter(), PRELOAD_SRC, mock_logger)


@pytest.fixture
def file_access(transformer, mock_logger):
    return RemoteFileAccess(transformer, router_type="app", timeout=5.0, logger=mock_logger)


@pytest.fixture
def apply_diff():
    """
    Create a mock diff-application service returning a fixed merge result.

    Returns:
        Mock ApplyDiffPort
    """
    service = MagicMock(spec=ApplyDiffPort)
    service.apply_diff = AsyncMock(
        return_value=DiffResult(
            result='export default function Page() {\n  return <div data-oid="abc1234">Bye</div>;\n}\n'
        )
    )
    return service


@pytest.fixture
def dispatcher(sandbox_provider, file_access, apply_diff, mock_logger):
    return SandboxToolsDispatcher(
        sandbox_provider, file_access, apply_diff, timeout=5.0, logger=mock_logger
    )


@pytest.fixture
def target():
    return RemoteSessionTarget(session_ref=SANDBOX_ID)


@pytest.fixture
def dependency_container(mock_logger):
    """
    Create a dependency container with mocked dependencies for testing.

    Returns:
        DependencyContainer instance with mocked logger
    """
    container = DependencyContainer()
    container._logger = mock_logger
    return container
