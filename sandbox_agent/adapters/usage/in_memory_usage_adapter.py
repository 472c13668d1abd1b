"""
In-memory usage accounting with daily and monthly message limits.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timezone

from typing_extensions import override

from sandbox_agent.entities.chat import Usage, UsageCheck
from sandbox_agent.ports.usage.usage_port import UsagePort


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryUsageAdapter(UsagePort):
    """Per-process message counters keyed by user and calendar period."""

    def __init__(
        self,
        daily_limit: int,
        monthly_limit: int,
        clock: Callable[[], datetime] = _utcnow,
        logger: logging.Logger | None = None,
    ):
        self._daily_limit = daily_limit
        self._monthly_limit = monthly_limit
        self._clock = clock
        self._counts: dict[tuple[str, str], int] = defaultdict(int)
        self._lock = asyncio.Lock()
        self._logger: logging.Logger = logger or logging.getLogger(__name__)

    def _period_keys(self) -> tuple[str, str]:
        now = self._clock()
        return f"day:{now:%Y-%m-%d}", f"month:{now:%Y-%m}"

    def _usage(self, user_id: str, period: str, key: str, limit: int) -> Usage:
        return Usage(
            period=period, usage_count=self._counts[(user_id, key)], limit_count=limit
        )

    @override
    async def check_limit(self, user_id: str) -> UsageCheck:
        day_key, month_key = self._period_keys()
        async with self._lock:
            daily = self._usage(user_id, "day", day_key, self._daily_limit)
            if daily.exceeded:
                return UsageCheck(exceeded=True, usage=daily)
            monthly = self._usage(user_id, "month", month_key, self._monthly_limit)
            if monthly.exceeded:
                return UsageCheck(exceeded=True, usage=monthly)
        return UsageCheck(exceeded=False, usage=daily)

    @override
    async def increment(self, user_id: str) -> None:
        day_key, month_key = self._period_keys()
        async with self._lock:
            self._counts[(user_id, day_key)] += 1
            self._counts[(user_id, month_key)] += 1
            count = self._counts[(user_id, day_key)]
        self._logger.debug(f"Usage for {user_id}: {count} message(s) today")
