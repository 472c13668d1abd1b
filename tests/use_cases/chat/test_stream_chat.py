"""
Tests for the StreamChatUseCase.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sandbox_agent.config.prompts import ASK_SYSTEM_PROMPT, EDIT_SYSTEM_PROMPT
from sandbox_agent.entities.chat import ChatType, Usage, UsageCheck, User
from sandbox_agent.entities.tool_invocation import ToolInvocation
from sandbox_agent.exceptions import LLMError, QuotaExceededError
from sandbox_agent.ports.llm.llm_port import StructuredLLMPort, ToolCallingLLMPort
from sandbox_agent.ports.usage.usage_port import UsagePort
from sandbox_agent.use_cases.chat.stream_chat import StreamChatUseCase
from sandbox_agent.use_cases.tools.repair_tool_call import ToolCallRepairer

USER = User(id="user-1")
MESSAGES = [{"role": "user", "content": "Add an about page"}]


class ScriptedLLM(ToolCallingLLMPort):
    """Tool-calling model that runs a fixed list of invocations, then finishes."""

    def __init__(self, invocations=(), fail=None):
        self.invocations = list(invocations)
        self.fail = fail
        self.calls = []

    async def run_turn(self, messages, system_message, tools, execute_tool, max_steps, **kwargs):
        self.calls.append(
            {"system_message": system_message, "tools": [t["name"] for t in tools], "kwargs": kwargs}
        )
        yield {"type": "text", "text": "Working on it"}
        if self.fail is not None:
            raise self.fail
        for invocation in self.invocations:
            outcome = await execute_tool(invocation)
            yield {"type": "tool_result", "name": invocation.name, "result": outcome.result}
        yield {"type": "finish", "reason": "stop", "steps": 1}


@pytest.fixture
def usage():
    port = MagicMock(spec=UsagePort)
    port.check_limit = AsyncMock(
        return_value=UsageCheck(
            exceeded=False, usage=Usage(period="day", usage_count=0, limit_count=10)
        )
    )
    port.increment = AsyncMock()
    return port


@pytest.fixture
def repairer(mock_logger):
    llm = MagicMock(spec=StructuredLLMPort)
    llm.generate_structured = AsyncMock(return_value={})
    return ToolCallRepairer(llm, logger=mock_logger)


def _use_case(llm, dispatcher, repairer, usage, mock_logger):
    return StreamChatUseCase(llm, dispatcher, repairer, usage, max_steps=5, logger=mock_logger)


async def _collect(events):
    return [event async for event in events]


class TestStreamChat:
    @pytest.mark.asyncio
    async def test_edit_turn_runs_tools_and_counts_usage(
        self, dispatcher, repairer, usage, target, mock_logger
    ):
        llm = ScriptedLLM(
            [
                ToolInvocation(
                    name="create_file",
                    arguments='{"path": "notes/todo.txt", "content": "x"}',
                    call_id="1",
                )
            ]
        )
        use_case = _use_case(llm, dispatcher, repairer, usage, mock_logger)

        events = await _collect(
            await use_case.execute(USER, MESSAGES, ChatType.EDIT, target, temperature=0.2)
        )

        assert [e["type"] for e in events] == ["text", "tool_result", "finish"]
        assert events[1]["result"] == "File created"
        assert llm.calls[0]["system_message"] == EDIT_SYSTEM_PROMPT
        assert llm.calls[0]["tools"] == ["list_files", "read_files", "create_file", "edit_file"]
        assert llm.calls[0]["kwargs"] == {"temperature": 0.2}
        usage.increment.assert_awaited_once_with("user-1")

    @pytest.mark.asyncio
    async def test_ask_turn_is_read_only_and_not_counted(
        self, dispatcher, repairer, usage, target, mock_logger
    ):
        llm = ScriptedLLM()
        use_case = _use_case(llm, dispatcher, repairer, usage, mock_logger)

        await _collect(await use_case.execute(USER, MESSAGES, ChatType.ASK, target))

        assert llm.calls[0]["tools"] == ["list_files", "read_files"]
        assert llm.calls[0]["system_message"] == ASK_SYSTEM_PROMPT
        usage.increment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_turn_is_not_counted(self, dispatcher, repairer, usage, target, mock_logger):
        use_case = _use_case(ScriptedLLM(), dispatcher, repairer, usage, mock_logger)
        await _collect(await use_case.execute(USER, MESSAGES, ChatType.CREATE, target))
        usage.increment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_quota_exceeded_stops_before_any_tool(
        self, dispatcher, repairer, usage, target, mock_logger
    ):
        usage.check_limit = AsyncMock(
            return_value=UsageCheck(
                exceeded=True, usage=Usage(period="month", usage_count=500, limit_count=500)
            )
        )
        llm = ScriptedLLM()
        use_case = _use_case(llm, dispatcher, repairer, usage, mock_logger)

        with pytest.raises(QuotaExceededError) as exc_info:
            await use_case.execute(USER, MESSAGES, ChatType.EDIT, target)

        assert exc_info.value.usage == {"period": "month", "usage_count": 500, "limit_count": 500}
        assert llm.calls == []
        usage.increment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_increment_failure_is_logged(self, dispatcher, repairer, usage, target, mock_logger):
        usage.increment = AsyncMock(side_effect=RuntimeError("db down"))
        use_case = _use_case(ScriptedLLM(), dispatcher, repairer, usage, mock_logger)

        events = await _collect(await use_case.execute(USER, MESSAGES, ChatType.EDIT, target))

        assert events[-1]["type"] == "finish"
        mock_logger.error.assert_any_call("Error incrementing usage for user-1: db down")

    @pytest.mark.asyncio
    async def test_tool_error_aborts_turn(self, dispatcher, repairer, usage, target, mock_logger):
        llm = ScriptedLLM(
            [
                ToolInvocation(
                    name="create_file",
                    arguments={"path": "README.md", "content": "again"},
                    call_id="1",
                )
            ]
        )
        use_case = _use_case(llm, dispatcher, repairer, usage, mock_logger)

        events = await _collect(await use_case.execute(USER, MESSAGES, ChatType.EDIT, target))

        assert [e["type"] for e in events] == ["text", "error"]
        assert events[-1]["error"] == "File already exists"
        assert events[-1]["kind"] == "AlreadyExistsError"

    @pytest.mark.asyncio
    async def test_model_error_becomes_error_event(
        self, dispatcher, repairer, usage, target, mock_logger
    ):
        llm = ScriptedLLM(fail=LLMError("model unavailable"))
        use_case = _use_case(llm, dispatcher, repairer, usage, mock_logger)

        events = await _collect(await use_case.execute(USER, MESSAGES, ChatType.EDIT, target))

        assert events[-1] == {"type": "error", "error": "model unavailable", "kind": "LLMError"}
