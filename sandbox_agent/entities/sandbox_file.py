"""
Sandbox file domain entity.
"""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class FileKind(str, Enum):
    """How a file's content is held: decoded text or raw bytes."""

    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True)
class SandboxFile:
    """
    A file read from a sandbox.

    The kind always agrees with the content type: binary files hold bytes,
    text files hold str.
    """

    path: str
    kind: FileKind
    content: Union[str, bytes]

    def __post_init__(self) -> None:
        if not isinstance(self.path, str) or not self.path:
            raise ValueError("Path must be a non-empty string")
        if self.kind == FileKind.BINARY and not isinstance(self.content, bytes):
            raise ValueError(f"Binary file {self.path} must hold bytes")
        if self.kind == FileKind.TEXT and not isinstance(self.content, str):
            raise ValueError(f"Text file {self.path} must hold a string")

    @classmethod
    def from_content(cls, path: str, content: Union[str, bytes]) -> "SandboxFile":
        """Build a file whose kind is derived from the content type."""
        if isinstance(content, (bytes, bytearray)):
            return cls(path=path, kind=FileKind.BINARY, content=bytes(content))
        return cls(path=path, kind=FileKind.TEXT, content=content)

    @property
    def is_binary(self) -> bool:
        return self.kind == FileKind.BINARY

    def to_tool_result(self) -> dict[str, Any]:
        """
        Serialize for a tool result; binary content is base64 encoded.

        Returns:
            Dictionary with path, content and type
        """
        if isinstance(self.content, bytes):
            content = base64.b64encode(self.content).decode("ascii")
        else:
            content = self.content
        return {"path": self.path, "content": content, "type": self.kind.value}

    def __str__(self) -> str:
        return f"SandboxFile(path='{self.path}', type='{self.kind.value}')"
