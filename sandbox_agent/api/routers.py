"""
FastAPI router definitions for the API endpoints.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse

from sandbox_agent.api.dependencies import (
    get_current_user,
    get_stream_chat_uc,
    get_tool_repairer,
    get_tools_dispatcher,
)
from sandbox_agent.api.schemas import (
    ChatRequest,
    ErrorResponse,
    QuotaErrorResponse,
    RepairInfo,
    ToolListResponse,
    ToolRequest,
    ToolResponse,
    ToolSpecInfo,
)
from sandbox_agent.entities.chat import User
from sandbox_agent.entities.execution_target import target_from_sandbox_id
from sandbox_agent.entities.tool_invocation import ToolInvocation
from sandbox_agent.exceptions import (
    AlreadyExistsError,
    DiffApplicationError,
    InvalidContentError,
    LLMError,
    NoSuchToolError,
    NotFoundError,
    QuotaExceededError,
    SchemaViolationError,
    ToolError,
    TransportError,
    UnimplementedProviderError,
    UnsupportedBinaryEditError,
)
from sandbox_agent.use_cases.chat.stream_chat import StreamChatUseCase
from sandbox_agent.use_cases.tools.repair_tool_call import ToolCallRepairer
from sandbox_agent.use_cases.tools.sandbox_tools import SandboxToolsDispatcher
from sandbox_agent.use_cases.tools.tool_schemas import BUILD_TOOLS, tool_spec

router = APIRouter()
logger = logging.getLogger(__name__)

TOOL_ERROR_STATUS: list[tuple[type[ToolError], int]] = [
    (NotFoundError, 404),
    (AlreadyExistsError, 409),
    (UnsupportedBinaryEditError, 415),
    (SchemaViolationError, 422),
    (InvalidContentError, 422),
    (UnimplementedProviderError, 501),
    (TransportError, 502),
    (DiffApplicationError, 502),
    (NoSuchToolError, 400),
]


def status_for_tool_error(error: ToolError) -> int:
    for error_type, status in TOOL_ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def _sse(event: dict[str, Any]) -> str:
    return (
        f"event: {event.get('type', 'message')}\n"
        f"data: {json.dumps(event, ensure_ascii=False, default=str)}\n\n"
    )


@router.post(
    "/chat",
    responses={
        401: {"model": ErrorResponse},
        402: {"model": QuotaErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def chat(
    body: ChatRequest,
    user: User = Depends(get_current_user),
    use_case: StreamChatUseCase = Depends(get_stream_chat_uc),
):
    """
    Stream a chat turn as Server-Sent Events.

    Emits events ``text``, ``tool_call``, ``repair``, ``tool_result``, ``finish``
    and ``error``, then ``done``.
    """
    params: dict[str, Any] = {}
    if body.temperature is not None:
        params["temperature"] = body.temperature
    if body.max_tokens is not None:
        params["max_tokens"] = body.max_tokens

    try:
        events = await use_case.execute(
            user,
            [m.model_dump() for m in body.messages],
            body.chat_type,
            target_from_sandbox_id(body.sandbox_id),
            **params,
        )
    except QuotaExceededError as e:
        return JSONResponse(status_code=402, content={"error": str(e), "usage": e.usage})
    except Exception as e:
        logger.error(f"Error in chat: {e}")
        raise HTTPException(status_code=500, detail=f"Internal Server Error: {e}")

    async def gen() -> AsyncIterator[str]:
        async for event in events:
            yield _sse(event)
        yield "event: done\ndata: {}\n\n"

    return StreamingResponse(gen(), media_type="text/event-stream")


@router.get("/tools", response_model=ToolListResponse)
def list_tools():
    """List the tools a build turn exposes to the model."""
    return ToolListResponse(
        tools=[ToolSpecInfo(**tool_spec(name)) for name in BUILD_TOOLS]
    )


@router.post(
    "/tools/{name}",
    response_model=ToolResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        415: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def run_tool(
    name: str,
    body: ToolRequest,
    user: User = Depends(get_current_user),
    dispatcher: SandboxToolsDispatcher = Depends(get_tools_dispatcher),
    repairer: ToolCallRepairer = Depends(get_tool_repairer),
):
    """
    Invoke one tool against a sandbox, repairing invalid arguments once.

    Raises:
        HTTPException: With the status code matching the tool error
    """
    tool_set = dispatcher.bind(target_from_sandbox_id(body.sandbox_id))
    invocation = ToolInvocation(name=name, arguments=body.arguments)
    try:
        outcome = await repairer.execute(tool_set, invocation)
    except ToolError as e:
        logger.info(f"Tool {name} failed for {user.id}: {e}")
        raise HTTPException(status_code=status_for_tool_error(e), detail=str(e))
    except LLMError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return ToolResponse(
        name=name,
        result=outcome.result,
        repairs=[
            RepairInfo(
                original_arguments=r.original.arguments_for_display(),
                corrected_arguments=r.to_invocation().arguments_for_display(),
            )
            for r in outcome.repairs
        ],
    )
