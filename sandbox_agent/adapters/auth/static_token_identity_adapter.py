"""
Identity adapter resolving bearer tokens from a static mapping.
"""

from typing import Optional

from typing_extensions import override

from sandbox_agent.entities.chat import User
from sandbox_agent.ports.auth.identity_port import IdentityPort


class StaticTokenIdentityAdapter(IdentityPort):
    def __init__(self, tokens: dict[str, str]):
        """
        Args:
            tokens: Mapping of bearer token to user id
        """
        self._tokens = dict(tokens)

    @override
    async def get_user(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        user_id = self._tokens.get(token)
        return User(id=user_id) if user_id else None
