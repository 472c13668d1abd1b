"""
Execution targets: the backend a turn's tools run against.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class ProviderKind(str, Enum):
    REMOTE_SESSION = "remote-session"
    UNIMPLEMENTED = "unimplemented"


@dataclass(frozen=True)
class RemoteSessionTarget:
    """A remote sandbox reached by resuming a session by reference."""

    session_ref: str
    kind: ProviderKind = ProviderKind.REMOTE_SESSION


@dataclass(frozen=True)
class UnimplementedTarget:
    """No backend is available for this turn; every tool call fails explicitly."""

    kind: ProviderKind = ProviderKind.UNIMPLEMENTED


ExecutionTarget = Union[RemoteSessionTarget, UnimplementedTarget]


def target_from_sandbox_id(sandbox_id: Optional[str]) -> ExecutionTarget:
    """Build the execution target for a project, given its sandbox id (if any)."""
    if sandbox_id and sandbox_id.strip():
        return RemoteSessionTarget(session_ref=sandbox_id.strip())
    return UnimplementedTarget()
