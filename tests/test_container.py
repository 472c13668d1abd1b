"""
Tests for the dependency container wiring.
"""

import pytest

from sandbox_agent.adapters.code.prettier_formatter import (
    PassthroughFormatterAdapter,
    PrettierFormatterAdapter,
)
from sandbox_agent.adapters.sandbox.directory_sandbox_adapter import DirectorySandboxProvider
from sandbox_agent.config.settings import settings
from sandbox_agent.entities.execution_target import RemoteSessionTarget
from sandbox_agent.entities.tool_invocation import ToolInvocation
from sandbox_agent.use_cases.tools.sandbox_tools import SandboxToolsDispatcher


class TestDependencyContainer:
    def test_missing_prettier_falls_back_to_passthrough(self, dependency_container, monkeypatch, mock_logger):
        monkeypatch.setattr(settings, "formatter", "prettier")
        monkeypatch.setattr(settings, "prettier_bin", "definitely-not-prettier-xyz")
        formatter = dependency_container.get_formatter()
        assert isinstance(formatter, PassthroughFormatterAdapter)
        mock_logger.warning.assert_called_once()

    def test_prettier_used_when_available(self, dependency_container, monkeypatch):
        monkeypatch.setattr(settings, "formatter", "prettier")
        monkeypatch.setattr(PrettierFormatterAdapter, "is_available", lambda self: True)
        assert isinstance(dependency_container.get_formatter(), PrettierFormatterAdapter)

    def test_formatter_can_be_disabled(self, dependency_container, monkeypatch):
        monkeypatch.setattr(settings, "formatter", "none")
        assert isinstance(dependency_container.get_formatter(), PassthroughFormatterAdapter)

    def test_instances_are_cached_until_reset(self, dependency_container, monkeypatch, tmp_path):
        monkeypatch.setattr(settings, "sandbox_root", str(tmp_path))
        provider = dependency_container.get_sandbox_provider()
        assert isinstance(provider, DirectorySandboxProvider)
        assert dependency_container.get_sandbox_provider() is provider
        dependency_container.reset()
        assert dependency_container.get_sandbox_provider() is not provider

    def test_tools_dispatcher_wiring(self, dependency_container, monkeypatch):
        monkeypatch.setattr(settings, "formatter", "none")
        monkeypatch.setattr(settings, "apply_diff_api_key", "test-key")
        dispatcher = dependency_container.get_tools_dispatcher()
        assert isinstance(dispatcher, SandboxToolsDispatcher)
        assert dependency_container.get_tools_dispatcher() is dispatcher

    @pytest.mark.asyncio
    async def test_file_tools_work_without_api_keys(self, dependency_container, monkeypatch, tmp_path):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.setattr(settings, "apply_diff_api_key", "")
        monkeypatch.setattr(settings, "formatter", "none")
        monkeypatch.setattr(settings, "sandbox_root", str(tmp_path))
        (tmp_path / "project-1").mkdir()
        (tmp_path / "project-1" / "README.md").write_text("# Project\n")

        dispatcher = dependency_container.get_tools_dispatcher()
        repairer = dependency_container.get_tool_repairer()
        tools = dispatcher.bind(RemoteSessionTarget(session_ref="project-1"))
        outcome = await repairer.execute(
            tools, ToolInvocation(name="list_files", arguments='{"path": "."}')
        )

        assert outcome.result == [{"path": "README.md", "type": "file"}]
