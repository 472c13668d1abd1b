"""
Tool invocation entities.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class ToolName(str, Enum):
    LIST_FILES = "list_files"
    READ_FILES = "read_files"
    CREATE_FILE = "create_file"
    EDIT_FILE = "edit_file"


@dataclass(frozen=True)
class ToolInvocation:
    """
    One model-requested tool call.

    ``arguments`` is the JSON payload exactly as the model produced it, or an
    already decoded mapping when the caller is not a model.
    """

    name: str
    arguments: Union[str, dict[str, Any]]
    call_id: str = ""

    def with_arguments(self, arguments: str) -> "ToolInvocation":
        return ToolInvocation(name=self.name, arguments=arguments, call_id=self.call_id)

    def arguments_for_display(self) -> Any:
        """Best-effort decoded arguments for logs and traces."""
        if isinstance(self.arguments, dict):
            return self.arguments
        try:
            return json.loads(self.arguments)
        except (TypeError, ValueError):
            return self.arguments


@dataclass(frozen=True)
class RepairedCall:
    """A tool call whose arguments were regenerated to match the tool schema."""

    original: ToolInvocation
    corrected_arguments: str

    def to_invocation(self) -> ToolInvocation:
        return self.original.with_arguments(self.corrected_arguments)


@dataclass(frozen=True)
class ToolCallOutcome:
    """Result of running a tool call, with the repair that made it valid (if any)."""

    invocation: ToolInvocation
    result: Any
    repairs: tuple[RepairedCall, ...] = field(default_factory=tuple)

    @property
    def repaired(self) -> Optional[RepairedCall]:
        return self.repairs[-1] if self.repairs else None
