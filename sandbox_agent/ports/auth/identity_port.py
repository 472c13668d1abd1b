"""
Identity port interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from sandbox_agent.entities.chat import User


class IdentityPort(ABC):
    """Port interface resolving a request credential to a user."""

    @abstractmethod
    async def get_user(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve a bearer token.

        Args:
            token: Credential sent by the caller, if any

        Returns:
            The user, or None when the credential is missing or unknown
        """
        pass
