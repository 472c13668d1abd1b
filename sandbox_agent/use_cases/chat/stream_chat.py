"""
Use case streaming one chat turn in which the model works on a sandbox through tools.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

from sandbox_agent.config.prompts import get_system_prompt
from sandbox_agent.entities.chat import ChatType, User
from sandbox_agent.entities.execution_target import ExecutionTarget
from sandbox_agent.entities.tool_invocation import ToolCallOutcome, ToolInvocation
from sandbox_agent.exceptions import LLMError, QuotaExceededError, ToolError
from sandbox_agent.ports.llm.llm_port import ToolCallingLLMPort
from sandbox_agent.ports.usage.usage_port import UsagePort
from sandbox_agent.use_cases.tools.repair_tool_call import ToolCallRepairer
from sandbox_agent.use_cases.tools.sandbox_tools import SandboxToolsDispatcher, ToolSet
from sandbox_agent.use_cases.tools.tool_schemas import ASK_TOOLS, BUILD_TOOLS


class StreamChatUseCase:
    """Quota gate, tool selection and event stream of a chat turn."""

    def __init__(
        self,
        llm_adapter: ToolCallingLLMPort,
        dispatcher: SandboxToolsDispatcher,
        repairer: ToolCallRepairer,
        usage: UsagePort,
        max_steps: int = 20,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the use case.

        Args:
            llm_adapter: Tool-calling model adapter
            dispatcher: Binds the sandbox tools to a target
            repairer: Runs tool calls, fixing invalid arguments
            usage: Quota gate and message accounting
            max_steps: Maximum number of model calls per turn
            logger: Logger instance to use for logging
        """
        self._llm_adapter = llm_adapter
        self._dispatcher = dispatcher
        self._repairer = repairer
        self._usage = usage
        self._max_steps = max_steps
        self._logger = logger or logging.getLogger(__name__)

    async def check_quota(self, user: User) -> None:
        """
        Raises:
            QuotaExceededError: If the daily or monthly limit is reached
        """
        check = await self._usage.check_limit(user.id)
        if check.exceeded:
            self._logger.info(
                f"User {user.id} exceeded the {check.usage.period} message limit"
            )
            raise QuotaExceededError(
                "Message limit exceeded. Please upgrade to a paid plan.",
                check.usage.to_dict(),
            )

    def tools_for(self, chat_type: ChatType, target: ExecutionTarget) -> ToolSet:
        names = ASK_TOOLS if chat_type == ChatType.ASK else BUILD_TOOLS
        return self._dispatcher.bind(target, names)

    async def _increment_usage(self, user: User) -> None:
        try:
            await self._usage.increment(user.id)
        except Exception as e:
            self._logger.error(f"Error incrementing usage for {user.id}: {e}")

    async def execute(
        self,
        user: User,
        messages: list[dict[str, Any]],
        chat_type: ChatType,
        target: ExecutionTarget,
        **kwargs: Any,
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Start a chat turn.

        The quota gate runs before this returns, so a caller can refuse the
        request before any event is streamed.

        Args:
            user: Authenticated caller
            messages: Conversation so far (role/content dictionaries)
            chat_type: Kind of turn, deciding the prompt and the tools
            target: Sandbox the tools act on
            **kwargs: Additional model parameters (temperature, max_tokens)

        Returns:
            Async iterator of stream events

        Raises:
            QuotaExceededError: If the caller has no messages left
        """
        await self.check_quota(user)
        tool_set = self.tools_for(chat_type, target)
        self._logger.info(
            f"Starting {chat_type.value} turn for {user.id} with tools "
            f"{', '.join(tool_set.tool_names())}"
        )
        if chat_type == ChatType.EDIT:
            await self._increment_usage(user)
        return self._events(tool_set, messages, chat_type, **kwargs)

    async def _events(
        self,
        tool_set: ToolSet,
        messages: list[dict[str, Any]],
        chat_type: ChatType,
        **kwargs: Any,
    ) -> AsyncIterator[dict[str, Any]]:
        async def execute_tool(invocation: ToolInvocation) -> ToolCallOutcome:
            return await self._repairer.execute(tool_set, invocation)

        try:
            async for event in self._llm_adapter.run_turn(
                messages,
                get_system_prompt(chat_type),
                tool_set.available_tools(),
                execute_tool,
                self._max_steps,
                **kwargs,
            ):
                yield event
        except ToolError as e:
            self._logger.error(f"Tool error, aborting turn: {e}")
            yield {"type": "error", "error": str(e), "kind": type(e).__name__}
        except LLMError as e:
            self._logger.error(f"Error in chat turn: {e}")
            yield {"type": "error", "error": str(e), "kind": type(e).__name__}
