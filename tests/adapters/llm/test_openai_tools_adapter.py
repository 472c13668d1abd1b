"""
Tests for the OpenAI adapters, with a mocked client.
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from sandbox_agent.adapters.llm.openai_adapter import OpenAIAdapter
from sandbox_agent.adapters.llm.openai_tools_adapter import OpenAIToolsAdapter
from sandbox_agent.entities.tool_invocation import (
    RepairedCall,
    ToolCallOutcome,
    ToolInvocation,
)
from sandbox_agent.exceptions import LLMError, NotFoundError

TOOLS = [
    {
        "name": "list_files",
        "description": "List files",
        "parameters": {"type": "object", "properties": {"path": {"type": "string"}}},
    }
]


def _response(content=None, tool_calls=None, finish_reason="stop"):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=finish_reason)])


def _tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def _client(*responses):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=list(responses))
    return client


async def _collect(adapter, execute_tool, max_steps=5, **kwargs):
    return [
        event
        async for event in adapter.run_turn(
            [{"role": "user", "content": "hi"}], "system", TOOLS, execute_tool, max_steps, **kwargs
        )
    ]


class TestOpenAIToolsAdapter:
    @pytest.mark.asyncio
    async def test_plain_answer(self, mock_logger):
        client = _client(_response(content="Hello!"))
        adapter = OpenAIToolsAdapter(client=client, model="test-model", logger=mock_logger)

        events = await _collect(adapter, AsyncMock(), temperature=0.1)

        assert events == [
            {"type": "text", "text": "Hello!"},
            {"type": "finish", "reason": "stop", "steps": 1},
        ]
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.1
        assert kwargs["tool_choice"] == "auto"
        assert kwargs["tools"][0]["function"]["name"] == "list_files"
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}

    @pytest.mark.asyncio
    async def test_tool_calls_are_executed_and_fed_back(self, mock_logger):
        client = _client(
            _response(
                content="Let me look.",
                tool_calls=[
                    _tool_call("c1", "list_files", '{"path": "app"}'),
                    _tool_call("c2", "list_files", '{"dir": "."}'),
                ],
                finish_reason="tool_calls",
            ),
            _response(content="Done."),
        )
        adapter = OpenAIToolsAdapter(client=client, model="m", logger=mock_logger)

        async def execute_tool(invocation: ToolInvocation) -> ToolCallOutcome:
            if invocation.call_id == "c2":
                repair = RepairedCall(original=invocation, corrected_arguments='{"path": "."}')
                return ToolCallOutcome(
                    invocation=repair.to_invocation(), result=["root"], repairs=(repair,)
                )
            return ToolCallOutcome(invocation=invocation, result=[{"path": "page.tsx"}])

        events = await _collect(adapter, execute_tool)

        assert [e["type"] for e in events] == [
            "text",
            "tool_call",
            "tool_call",
            "repair",
            "tool_result",
            "tool_result",
            "text",
            "finish",
        ]
        assert events[3] == {
            "type": "repair",
            "call_id": "c2",
            "name": "list_files",
            "arguments": {"path": "."},
        }
        assert events[-1]["steps"] == 2

        history = client.chat.completions.create.await_args_list[1].kwargs["messages"]
        assistant = [m for m in history if m["role"] == "assistant" and m.get("tool_calls")][0]
        assert [tc["function"]["arguments"] for tc in assistant["tool_calls"]] == [
            '{"path": "app"}',
            '{"path": "."}',
        ]
        tool_messages = [m for m in history if m["role"] == "tool"]
        assert tool_messages[0] == {
            "role": "tool",
            "tool_call_id": "c1",
            "content": json.dumps([{"path": "page.tsx"}]),
        }

    @pytest.mark.asyncio
    async def test_tool_error_aborts_turn(self, mock_logger):
        client = _client(
            _response(tool_calls=[_tool_call("c1", "list_files", "{}")], finish_reason="tool_calls")
        )
        adapter = OpenAIToolsAdapter(client=client, model="m", logger=mock_logger)

        with pytest.raises(NotFoundError):
            await _collect(adapter, AsyncMock(side_effect=NotFoundError("File does not exist")))
        assert client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_max_steps(self, mock_logger):
        looping = _response(
            tool_calls=[_tool_call("c", "list_files", "{}")], finish_reason="tool_calls"
        )
        client = _client(looping, looping)
        adapter = OpenAIToolsAdapter(client=client, model="m", logger=mock_logger)

        async def execute_tool(invocation):
            return ToolCallOutcome(invocation=invocation, result="ok")

        events = await _collect(adapter, execute_tool, max_steps=2)

        assert events[-1] == {"type": "finish", "reason": "max_steps", "steps": 2}
        assert client.chat.completions.create.await_count == 2

    @pytest.mark.asyncio
    async def test_api_error_is_wrapped(self, mock_logger):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("502 Bad Gateway"))
        adapter = OpenAIToolsAdapter(client=client, model="m", logger=mock_logger)

        with pytest.raises(LLMError, match="502 Bad Gateway"):
            await _collect(adapter, AsyncMock())


class TestOpenAIAdapter:
    @pytest.mark.asyncio
    async def test_generate_structured(self, mock_logger):
        client = _client(_response(content='{"path": "app"}'))
        adapter = OpenAIAdapter(client=client, model="m", logger=mock_logger)
        schema = {"type": "object", "properties": {"path": {"type": "string"}}}

        result = await adapter.generate_structured(schema, "fix it")

        assert result == {"path": "app"}
        kwargs = client.chat.completions.create.await_args.kwargs
        assert kwargs["response_format"]["type"] == "json_schema"
        assert kwargs["response_format"]["json_schema"]["schema"] == schema
        assert kwargs["messages"][1] == {"role": "user", "content": "fix it"}

    @pytest.mark.asyncio
    async def test_non_object_output(self, mock_logger):
        adapter = OpenAIAdapter(client=_client(_response(content="[1, 2]")), model="m", logger=mock_logger)
        with pytest.raises(LLMError, match="not a JSON object"):
            await adapter.generate_structured({}, "p")

    @pytest.mark.asyncio
    async def test_invalid_json_output(self, mock_logger):
        adapter = OpenAIAdapter(client=_client(_response(content="nope")), model="m", logger=mock_logger)
        with pytest.raises(LLMError, match="Failed to generate structured output"):
            await adapter.generate_structured({}, "p")

    @pytest.mark.asyncio
    async def test_empty_response(self, mock_logger):
        adapter = OpenAIAdapter(client=_client(_response(content="")), model="m", logger=mock_logger)
        with pytest.raises(LLMError, match="Empty response received from the model"):
            await adapter.generate_structured({}, "p")

    def test_model_info(self, mock_logger):
        adapter = OpenAIAdapter(client=MagicMock(), model="m", api_base="http://x", logger=mock_logger)
        assert adapter.get_model_info() == {"provider": "OpenAI", "model": "m", "api_base": "http://x"}

    def test_construction_without_api_key(self, mock_logger, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        adapter = OpenAIAdapter(model="m", logger=mock_logger)
        assert adapter.get_model_info()["model"] == "m"

    @pytest.mark.asyncio
    async def test_missing_api_key_fails_on_first_call(self, mock_logger, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        adapter = OpenAIAdapter(model="m", logger=mock_logger)
        with pytest.raises(LLMError, match="OPENAI_API_KEY"):
            await adapter.generate_structured({}, "p")
