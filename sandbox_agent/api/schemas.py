"""
Pydantic models for API requests and responses.
"""

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from sandbox_agent.entities.chat import ChatType


class ChatMessage(BaseModel):
    """Schema for one message of the conversation."""

    role: Literal["user", "assistant"] = Field(..., description="Author of the message")
    content: str = Field(..., description="Message text")


class ChatRequest(BaseModel):
    """Schema for a chat turn request."""

    messages: List[ChatMessage] = Field(..., min_length=1, description="Conversation so far")
    chat_type: ChatType = Field(ChatType.EDIT, description="Kind of turn: create, ask or edit")
    sandbox_id: Optional[str] = Field(
        None, description="Sandbox the tools act on; without one every tool call fails"
    )
    temperature: Optional[float] = Field(None, description="Temperature for generation")
    max_tokens: Optional[int] = Field(None, description="Maximum tokens per model call")


class ToolRequest(BaseModel):
    """Schema for a single tool invocation."""

    sandbox_id: Optional[str] = Field(None, description="Sandbox the tool acts on")
    arguments: Union[str, dict[str, Any]] = Field(
        ..., description="Tool arguments, as an object or a JSON string"
    )


class RepairInfo(BaseModel):
    original_arguments: Any = Field(..., description="Arguments as first received")
    corrected_arguments: Any = Field(..., description="Arguments after repair")


class ToolResponse(BaseModel):
    """Schema for the result of a tool invocation."""

    name: str = Field(..., description="Tool name")
    result: Any = Field(..., description="Tool result")
    repairs: List[RepairInfo] = Field(
        default_factory=list, description="Argument repairs applied before the call succeeded"
    )


class ToolSpecInfo(BaseModel):
    name: str = Field(..., description="Tool name")
    description: str = Field(..., description="What the tool does")
    parameters: dict[str, Any] = Field(..., description="JSON schema of the arguments")


class ToolListResponse(BaseModel):
    tools: List[ToolSpecInfo] = Field(..., description="Available tools")


class ErrorResponse(BaseModel):
    """Schema for error responses."""

    detail: str = Field(..., description="Error message")


class QuotaErrorResponse(BaseModel):
    """Schema for the response sent when a user has no messages left."""

    error: str = Field(..., description="Error message")
    usage: dict[str, Any] = Field(..., description="Usage of the exhausted period")
