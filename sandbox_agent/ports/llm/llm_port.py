"""
LLM port interfaces defining the contract for language model implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from sandbox_agent.entities.tool_invocation import ToolCallOutcome, ToolInvocation
from sandbox_agent.ports.llm.tools_port import ToolSpec

ToolExecutor = Callable[[ToolInvocation], Awaitable[ToolCallOutcome]]


class StructuredLLMPort(ABC):
    """Port interface for schema-constrained generation."""

    @abstractmethod
    async def generate_structured(
        self, schema: dict[str, Any], prompt: str
    ) -> dict[str, Any]:
        """
        Generate an object matching a JSON schema.

        Args:
            schema: JSON schema the object must follow
            prompt: Instructions for the model

        Returns:
            The generated object

        Raises:
            LLMError: If generation fails or the output is not a JSON object
        """
        pass

    def get_model_info(self) -> dict[str, Any]:
        """
        Get information about the current model configuration.

        Returns:
            Dictionary with model configuration details
        """
        return {"provider": "Unknown", "model": "Unknown"}


class ToolCallingLLMPort(ABC):
    """Port interface for a tool-calling generation turn."""

    @abstractmethod
    def run_turn(
        self,
        messages: list[dict[str, Any]],
        system_message: str,
        tools: list[ToolSpec],
        execute_tool: ToolExecutor,
        max_steps: int,
        **kwargs: Any,
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Run one chat turn, executing the model's tool calls until it answers.

        Args:
            messages: Conversation so far (role/content dictionaries)
            system_message: System prompt for the turn
            tools: Tools the model may call
            execute_tool: Coroutine running one tool call
            max_steps: Maximum number of model calls in the turn

        Yields:
            Stream events: ``text``, ``tool_call``, ``tool_result``, ``repair``, ``finish``

        Raises:
            LLMError: If the model call fails
            ToolError: If a tool call fails; the turn is aborted
        """
        pass
