"""
FastAPI dependency functions for retrieving use cases from the container.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from sandbox_agent.container import container
from sandbox_agent.entities.chat import User
from sandbox_agent.ports.auth.identity_port import IdentityPort
from sandbox_agent.use_cases.chat.stream_chat import StreamChatUseCase
from sandbox_agent.use_cases.tools.repair_tool_call import ToolCallRepairer
from sandbox_agent.use_cases.tools.sandbox_tools import SandboxToolsDispatcher


def get_stream_chat_uc() -> StreamChatUseCase:
    """
    Get the stream chat use case from the container.

    Returns:
        StreamChatUseCase: The stream chat use case instance
    """
    return container.get_stream_chat_use_case()


def get_tools_dispatcher() -> SandboxToolsDispatcher:
    return container.get_tools_dispatcher()


def get_tool_repairer() -> ToolCallRepairer:
    return container.get_tool_repairer()


def get_identity() -> IdentityPort:
    return container.get_identity_adapter()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    authorization: Optional[str] = Header(None),
    identity: IdentityPort = Depends(get_identity),
) -> User:
    """
    Resolve the caller from the ``Authorization: Bearer`` header.

    Raises:
        HTTPException: 401 when the token is missing or unknown
    """
    user = await identity.get_user(_bearer_token(authorization))
    if user is None:
        raise HTTPException(
            status_code=401, detail="Unauthorized, no user found. Please login again."
        )
    return user
