"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class BaseAppError(Exception):
    """Base exception class for application errors."""

    pass


class LLMError(BaseAppError):
    """Exception raised for LLM-related errors."""

    pass


class ConfigurationError(BaseAppError):
    """Exception raised for configuration errors."""

    pass


class UnauthorizedError(BaseAppError):
    """Exception raised when a request carries no known identity."""

    pass


class QuotaExceededError(BaseAppError):
    """Exception raised when a user has used up their message allowance."""

    def __init__(self, message: str, usage: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.usage = usage or {}


class ToolError(BaseAppError):
    """Base exception for failures of a sandbox tool invocation."""

    pass


class UnimplementedProviderError(ToolError):
    """Exception raised when no execution backend matches the tool's target."""

    def __init__(self, tool_name: str, provider: str = "unimplemented"):
        super().__init__(f"Unimplemented provider {provider} for tool {tool_name}")
        self.tool_name = tool_name
        self.provider = provider


class AlreadyExistsError(ToolError):
    """Exception raised when creating a file that already exists."""

    pass


class NotFoundError(ToolError):
    """Exception raised when editing a file that does not exist."""

    pass


class UnsupportedBinaryEditError(ToolError):
    """Exception raised when an edit targets a binary file."""

    pass


class DiffApplicationError(ToolError):
    """Exception raised when the diff-application service returns an error."""

    pass


class TransportError(ToolError):
    """Exception raised when the remote sandbox cannot be reached or fails an operation."""

    pass


class InvalidContentError(ToolError):
    """Exception raised when content cannot be written in the form the path requires."""

    pass


class NoSuchToolError(ToolError):
    """Exception raised when the model calls a tool that is not in the tool set."""

    def __init__(self, tool_name: str, available_tools: list[str]):
        super().__init__(
            f'Tool "{tool_name}" not found. Available tools: {", ".join(available_tools)}'
        )
        self.tool_name = tool_name
        self.available_tools = available_tools


class SchemaViolationError(ToolError):
    """Exception raised when tool arguments do not validate against the tool schema."""

    def __init__(self, tool_name: str, arguments: Any, errors: str):
        super().__init__(f"Invalid arguments for tool {tool_name}: {errors}")
        self.tool_name = tool_name
        self.arguments = arguments
        self.errors = errors


class ContentTransformError(BaseAppError):
    """Base exception for recoverable failures of the content transformation pipeline."""

    pass


class ParseFailure(ContentTransformError):
    """Exception raised when source content cannot be parsed into a syntax tree."""

    pass


class FormatFailure(ContentTransformError):
    """Exception raised when the external formatter rejects the content."""

    pass
