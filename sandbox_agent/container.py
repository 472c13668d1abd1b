"""
Dependency injection container for managing application dependencies.
"""

import logging

from sandbox_agent.adapters.auth.static_token_identity_adapter import (
    StaticTokenIdentityAdapter,
)
from sandbox_agent.adapters.code.openai_apply_diff_adapter import OpenAIApplyDiffAdapter
from sandbox_agent.adapters.code.prettier_formatter import (
    PassthroughFormatterAdapter,
    PrettierFormatterAdapter,
)
from sandbox_agent.adapters.llm.openai_adapter import OpenAIAdapter
from sandbox_agent.adapters.llm.openai_tools_adapter import OpenAIToolsAdapter
from sandbox_agent.adapters.sandbox.directory_sandbox_adapter import (
    DirectorySandboxProvider,
)
from sandbox_agent.adapters.usage.in_memory_usage_adapter import InMemoryUsageAdapter
from sandbox_agent.config.settings import settings
from sandbox_agent.ports.auth.identity_port import IdentityPort
from sandbox_agent.ports.code.apply_diff_port import ApplyDiffPort
from sandbox_agent.ports.code.formatter_port import FormatterPort
from sandbox_agent.ports.llm.llm_port import StructuredLLMPort, ToolCallingLLMPort
from sandbox_agent.ports.sandbox.sandbox_port import SandboxProviderPort
from sandbox_agent.ports.usage.usage_port import UsagePort
from sandbox_agent.use_cases.chat.stream_chat import StreamChatUseCase
from sandbox_agent.use_cases.code.transform_content import ContentTransformer
from sandbox_agent.use_cases.files.remote_file_access import RemoteFileAccess
from sandbox_agent.use_cases.tools.repair_tool_call import ToolCallRepairer
from sandbox_agent.use_cases.tools.sandbox_tools import SandboxToolsDispatcher


class DependencyContainer:
    """
    Container for managing application dependencies using dependency injection.
    """

    def __init__(self):
        self._instances = {}
        self._logger = logging.getLogger(__name__)

    def get_formatter(self) -> FormatterPort:
        """
        Get the formatter used after identifier injection.

        Falls back to no formatting when Prettier is disabled or not installed.
        """
        if "formatter" not in self._instances:
            formatter: FormatterPort = PassthroughFormatterAdapter()
            if settings.formatter == "prettier":
                prettier = PrettierFormatterAdapter(
                    settings.prettier_bin, logger=self._logger
                )
                if prettier.is_available():
                    formatter = prettier
                else:
                    self._logger.warning(
                        f"{settings.prettier_bin} not found, files are written unformatted"
                    )
            self._instances["formatter"] = formatter
        return self._instances["formatter"]

    def get_content_transformer(self) -> ContentTransformer:
        if "content_transformer" not in self._instances:
            self._instances["content_transformer"] = ContentTransformer(
                self.get_formatter(), settings.preload_script_src, self._logger
            )
        return self._instances["content_transformer"]

    def get_remote_file_access(self) -> RemoteFileAccess:
        if "remote_file_access" not in self._instances:
            self._instances["remote_file_access"] = RemoteFileAccess(
                self.get_content_transformer(),
                router_type=settings.router_type,
                timeout=settings.remote_timeout_seconds,
                logger=self._logger,
            )
        return self._instances["remote_file_access"]

    def get_sandbox_provider(self) -> SandboxProviderPort:
        """
        Get sandbox provider instance.

        Returns:
            SandboxProviderPort implementation
        """
        if "sandbox_provider" not in self._instances:
            self._instances["sandbox_provider"] = DirectorySandboxProvider(
                settings.sandbox_root, self._logger
            )
        return self._instances["sandbox_provider"]

    def get_apply_diff_adapter(self) -> ApplyDiffPort:
        if "apply_diff_adapter" not in self._instances:
            self._instances["apply_diff_adapter"] = OpenAIApplyDiffAdapter(
                logger=self._logger
            )
        return self._instances["apply_diff_adapter"]

    def get_tools_dispatcher(self) -> SandboxToolsDispatcher:
        """
        Get the sandbox tools dispatcher with injected dependencies.

        Returns:
            Configured SandboxToolsDispatcher
        """
        if "tools_dispatcher" not in self._instances:
            self._instances["tools_dispatcher"] = SandboxToolsDispatcher(
                self.get_sandbox_provider(),
                self.get_remote_file_access(),
                self.get_apply_diff_adapter(),
                timeout=settings.remote_timeout_seconds,
                logger=self._logger,
            )
        return self._instances["tools_dispatcher"]

    def get_llm_adapter(self) -> StructuredLLMPort:
        """
        Get LLM adapter instance used for structured generation.

        Returns:
            StructuredLLMPort implementation
        """
        if "llm_adapter" not in self._instances:
            self._instances["llm_adapter"] = OpenAIAdapter(logger=self._logger)
        return self._instances["llm_adapter"]

    def get_llm_tools_adapter(self) -> ToolCallingLLMPort:
        """
        LLM adapter with tools (function-calling) support.
        """
        if "llm_tools_adapter" not in self._instances:
            self._instances["llm_tools_adapter"] = OpenAIToolsAdapter(
                logger=self._logger
            )
        return self._instances["llm_tools_adapter"]

    def get_tool_repairer(self) -> ToolCallRepairer:
        if "tool_repairer" not in self._instances:
            self._instances["tool_repairer"] = ToolCallRepairer(
                self.get_llm_adapter(), settings.max_tool_repairs, self._logger
            )
        return self._instances["tool_repairer"]

    def get_usage_adapter(self) -> UsagePort:
        if "usage_adapter" not in self._instances:
            self._instances["usage_adapter"] = InMemoryUsageAdapter(
                settings.daily_message_limit,
                settings.monthly_message_limit,
                logger=self._logger,
            )
        return self._instances["usage_adapter"]

    def get_identity_adapter(self) -> IdentityPort:
        if "identity_adapter" not in self._instances:
            self._instances["identity_adapter"] = StaticTokenIdentityAdapter(
                settings.api_tokens
            )
        return self._instances["identity_adapter"]

    def get_stream_chat_use_case(self) -> StreamChatUseCase:
        """
        Get stream chat use case with injected dependencies.

        Returns:
            Configured StreamChatUseCase
        """
        if "stream_chat_use_case" not in self._instances:
            self._instances["stream_chat_use_case"] = StreamChatUseCase(
                self.get_llm_tools_adapter(),
                self.get_tools_dispatcher(),
                self.get_tool_repairer(),
                self.get_usage_adapter(),
                max_steps=settings.max_steps,
                logger=self._logger,
            )
        return self._instances["stream_chat_use_case"]

    def reset(self):
        """Reset all instances (useful for testing)."""
        self._instances.clear()


# Global container instance
container = DependencyContainer()
