"""
Formatter port used by the content transformation pipeline.
"""

from abc import ABC, abstractmethod


class FormatterPort(ABC):
    """Port interface for source formatters."""

    @abstractmethod
    async def format(self, path: str, content: str) -> str:
        """
        Format source content.

        Args:
            path: Path of the file, used to pick the parser
            content: Source to format

        Returns:
            Formatted source

        Raises:
            FormatFailure: If the formatter rejects the content
        """
        pass
