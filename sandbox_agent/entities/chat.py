"""
Chat and usage domain entities.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ChatType(str, Enum):
    CREATE = "create"
    ASK = "ask"
    EDIT = "edit"


@dataclass(frozen=True)
class User:
    """Authenticated caller."""

    id: str


@dataclass(frozen=True)
class Usage:
    """Message usage over one period."""

    period: str
    usage_count: int
    limit_count: int

    @property
    def exceeded(self) -> bool:
        return self.usage_count >= self.limit_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "usage_count": self.usage_count,
            "limit_count": self.limit_count,
        }


@dataclass(frozen=True)
class UsageCheck:
    """Outcome of the quota gate."""

    exceeded: bool
    usage: Usage
