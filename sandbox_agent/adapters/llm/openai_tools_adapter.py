"""
OpenAI adapter with tools (function-calling) support.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any, cast

from openai import NOT_GIVEN
from openai.types.chat import ChatCompletionMessageParam, ChatCompletionToolParam
from typing_extensions import override

from sandbox_agent.adapters.llm.openai_adapter import OpenAIAdapter
from sandbox_agent.entities.tool_invocation import ToolCallOutcome, ToolInvocation
from sandbox_agent.exceptions import LLMError
from sandbox_agent.ports.llm.llm_port import ToolCallingLLMPort, ToolExecutor
from sandbox_agent.ports.llm.tools_port import ToolSpec


class OpenAIToolsAdapter(OpenAIAdapter, ToolCallingLLMPort):
    """Runs chat turns where the model calls sandbox tools."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._logger: logging.Logger = kwargs.get("logger") or logging.getLogger(
            __name__
        )

    def _to_openai_tools(self, tools: list[ToolSpec]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": spec["name"],
                    "description": spec["description"],
                    "parameters": spec["parameters"],
                },
            }
            for spec in tools
        ]

    def _serialize_result(self, result: object) -> str:
        if isinstance(result, str):
            return result
        try:
            return json.dumps(result, ensure_ascii=False)
        except (TypeError, ValueError):
            return str(result)

    def _assistant_tool_message(
        self, content: str, outcomes: list[ToolCallOutcome]
    ) -> ChatCompletionMessageParam:
        """
        Build the assistant message recording the tool calls of one step.

        Repaired calls are recorded with their corrected arguments so that the
        model sees the call that actually ran.
        """
        tool_calls = []
        for outcome in outcomes:
            arguments = outcome.invocation.arguments
            if not isinstance(arguments, str):
                arguments = json.dumps(arguments)
            tool_calls.append(
                {
                    "id": outcome.invocation.call_id,
                    "type": "function",
                    "function": {"name": outcome.invocation.name, "arguments": arguments},
                }
            )
        return cast(
            ChatCompletionMessageParam,
            cast(
                object,
                {"role": "assistant", "content": content, "tool_calls": tool_calls},
            ),
        )

    async def _complete(
        self,
        history: list[ChatCompletionMessageParam],
        tools: list[dict[str, Any]],
        **kwargs: Any,
    ) -> Any:
        try:
            return await self.client.chat.completions.create(
                model=self.model,
                messages=cast(Iterable[ChatCompletionMessageParam], history),
                tools=cast(Iterable[ChatCompletionToolParam], tools) if tools else NOT_GIVEN,
                tool_choice="auto" if tools else NOT_GIVEN,
                temperature=kwargs.get("temperature", NOT_GIVEN),
                max_tokens=kwargs.get("max_tokens", NOT_GIVEN),
            )
        except Exception as e:
            raise LLMError(f"Failed to generate response with tools: {str(e)}")

    async def _execute_all(
        self, invocations: list[ToolInvocation], execute_tool: ToolExecutor
    ) -> list[ToolCallOutcome]:
        """Run the tool calls of one step concurrently; the first failure aborts the turn."""
        results = await asyncio.gather(
            *(execute_tool(invocation) for invocation in invocations),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return cast(list[ToolCallOutcome], results)

    @override
    async def run_turn(
        self,
        messages: list[dict[str, Any]],
        system_message: str,
        tools: list[ToolSpec],
        execute_tool: ToolExecutor,
        max_steps: int,
        **kwargs: Any,
    ) -> AsyncIterator[dict[str, Any]]:
        history = cast(
            list[ChatCompletionMessageParam],
            [{"role": "system", "content": system_message}, *messages],
        )
        openai_tools = self._to_openai_tools(tools)

        for step in range(1, max_steps + 1):
            response = await self._complete(history, openai_tools, **kwargs)
            choices = getattr(response, "choices", None) or []
            if not choices:
                raise LLMError("No response generated from the model")
            msg = choices[0].message
            content = msg.content or ""
            if content:
                yield {"type": "text", "text": content}

            tool_calls = [
                tc for tc in (msg.tool_calls or []) if getattr(tc, "function", None)
            ]
            if not tool_calls:
                history.append(
                    cast(
                        ChatCompletionMessageParam,
                        cast(object, {"role": "assistant", "content": content}),
                    )
                )
                yield {
                    "type": "finish",
                    "reason": choices[0].finish_reason or "stop",
                    "steps": step,
                }
                return

            invocations = [
                ToolInvocation(
                    name=tc.function.name,
                    arguments=tc.function.arguments or "",
                    call_id=tc.id,
                )
                for tc in tool_calls
            ]
            for invocation in invocations:
                self._logger.info(f"Tool call {invocation.name} ({invocation.call_id})")
                yield {
                    "type": "tool_call",
                    "call_id": invocation.call_id,
                    "name": invocation.name,
                    "arguments": invocation.arguments_for_display(),
                }

            outcomes = await self._execute_all(invocations, execute_tool)

            for outcome in outcomes:
                for repair in outcome.repairs:
                    yield {
                        "type": "repair",
                        "call_id": outcome.invocation.call_id,
                        "name": outcome.invocation.name,
                        "arguments": repair.to_invocation().arguments_for_display(),
                    }

            history.append(self._assistant_tool_message(content, outcomes))
            for outcome in outcomes:
                history.append(
                    cast(
                        ChatCompletionMessageParam,
                        cast(
                            object,
                            {
                                "role": "tool",
                                "tool_call_id": outcome.invocation.call_id,
                                "content": self._serialize_result(outcome.result),
                            },
                        ),
                    )
                )
                yield {
                    "type": "tool_result",
                    "call_id": outcome.invocation.call_id,
                    "name": outcome.invocation.name,
                    "result": outcome.result,
                }

        self._logger.warning(f"Turn stopped after {max_steps} steps")
        yield {"type": "finish", "reason": "max_steps", "steps": max_steps}
