"""
Usage port interface (quota gate).
"""

from abc import ABC, abstractmethod

from sandbox_agent.entities.chat import UsageCheck


class UsagePort(ABC):
    """Port interface for per-user message usage accounting."""

    @abstractmethod
    async def check_limit(self, user_id: str) -> UsageCheck:
        """
        Check whether a user may send another message.

        Args:
            user_id: Identity of the caller

        Returns:
            UsageCheck; ``exceeded`` is a hard stop before any tool runs
        """
        pass

    @abstractmethod
    async def increment(self, user_id: str) -> None:
        """Record one message for the user."""
        pass
