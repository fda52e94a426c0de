"""Database reachability as an injected, health-checked dependency.

There is no process-wide "connected" flag: callers ask DatabaseHealth,
which probes with `SELECT 1` and retries according to a RetryPolicy.
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: base_delay, 2*base_delay, ... capped at max_delay."""

    attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 5.0

    def delay_for(self, attempt: int) -> float:
        """Delay before retry number `attempt` (1-based)."""
        return float(min(self.max_delay, self.base_delay * (2 ** (attempt - 1))))

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        return cls(
            attempts=settings.DB_CONNECT_RETRIES,
            base_delay=settings.DB_RETRY_BACKOFF_SECONDS,
            max_delay=settings.DB_RETRY_MAX_BACKOFF_SECONDS,
        )


class DatabaseHealth:
    def __init__(self, engine: AsyncEngine, policy: RetryPolicy | None = None) -> None:
        self._engine = engine
        self._policy = policy or RetryPolicy.from_settings()

    async def ping(self) -> bool:
        """Single probe, no retries."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (OperationalError, DBAPIError, OSError) as exc:
            logger.warning("Database ping failed: %s", exc)
            return False
        return True

    async def check(self) -> bool:
        """Probe with retries; True as soon as one attempt succeeds."""
        for attempt in range(1, self._policy.attempts + 1):
            if await self.ping():
                return True
            if attempt < self._policy.attempts:
                delay = self._policy.delay_for(attempt)
                logger.warning(
                    "Database unreachable (attempt %d/%d), retrying in %.1fs",
                    attempt,
                    self._policy.attempts,
                    delay,
                )
                await asyncio.sleep(delay)
        logger.error("Database unreachable after %d attempts", self._policy.attempts)
        return False
