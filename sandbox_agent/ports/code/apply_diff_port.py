"""
Diff-application port used by the edit tool.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DiffResult:
    """Either the full updated code or an error message."""

    result: Optional[str]
    error: Optional[str] = None


class ApplyDiffPort(ABC):
    """Port interface for merging an update snippet into existing code."""

    @abstractmethod
    async def apply_diff(
        self, original_code: str, update_snippet: str, instruction: str
    ) -> DiffResult:
        """
        Merge an update snippet into the original code.

        Args:
            original_code: Current content of the file
            update_snippet: Partial code describing the change
            instruction: Natural-language description of the change

        Returns:
            DiffResult with the replacement text, or an error string
        """
        pass
