"""
Port and types to define LLM tools (function calls), independent of the provider.
"""

from abc import ABC, abstractmethod
from typing import Any, TypedDict, Union


class ToolSpec(TypedDict):
    """Specification for a tool that can be called by an LLM."""

    name: str
    description: str
    parameters: dict[str, object]  # JSON Schema


class ToolsHandlerPort(ABC):
    """
    Port interface for handling LLM tools (function calls).

    This port exposes available tools and dispatches tool invocations to appropriate use cases.
    """

    @abstractmethod
    def available_tools(self) -> list[ToolSpec]:
        """
        Get a list of available tools.

        Returns:
            List of tool specifications
        """
        pass

    @abstractmethod
    async def dispatch(
        self, name: str, arguments: Union[str, dict[str, Any]]
    ) -> object:
        """
        Dispatch a tool invocation to the appropriate use case.

        Args:
            name: Name of the tool to invoke
            arguments: JSON-encoded arguments as produced by the model, or a decoded mapping

        Returns:
            Result of the tool invocation

        Raises:
            NoSuchToolError: If the tool name is unknown
            SchemaViolationError: If the arguments do not match the tool schema
        """
        pass

    def tool_names(self) -> list[str]:
        return [spec["name"] for spec in self.available_tools()]

    def parameters_schema(self, name: str) -> dict[str, object]:
        """Return the declared JSON schema of a tool's parameters."""
        for spec in self.available_tools():
            if spec["name"] == name:
                return spec["parameters"]
        raise KeyError(name)
