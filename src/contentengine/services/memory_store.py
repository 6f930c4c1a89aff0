"""In-memory user and usage stores.

Used by tests and single-process deployments. Both satisfy the store
protocols in ``contentengine.interfaces``; a document database adapter can
replace them without touching the dispatcher.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Optional

from contentengine.models.errors import UserNotFoundError
from contentengine.models.usage import UsageRecord, UsageStatus, UserRecord, UserUsageCounters

logger = logging.getLogger(__name__)


class InMemoryUsageStore:
    """Append-only usage log with simple aggregates."""

    def __init__(self):
        self._records: list[UsageRecord] = []
        self._lock = threading.Lock()

    async def append(self, record: UsageRecord) -> None:
        """
        Append one usage record.

        Args:
            record: Immutable record of a dispatch attempt
        """
        with self._lock:
            self._records.append(record)
        logger.debug(
            f"📊 [UsageStore] Recorded {record.tool_id} for user={record.user_id}: "
            f"status={record.status.value}, duration={record.processing_time_ms}ms"
        )

    def get_all(self) -> list[UsageRecord]:
        """Get all recorded usage entries."""
        with self._lock:
            return list(self._records)

    def for_user(self, user_id: str) -> list[UsageRecord]:
        with self._lock:
            return [r for r in self._records if r.user_id == user_id]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def summary(self) -> dict[str, Any]:
        """Get a summary of recorded usage."""
        with self._lock:
            records = list(self._records)
        if not records:
            return {"count": 0, "errors": 0, "total_duration_ms": 0, "avg_duration_ms": 0}

        total_duration = sum(r.processing_time_ms for r in records)
        return {
            "count": len(records),
            "errors": sum(1 for r in records if r.status is UsageStatus.ERROR),
            "total_duration_ms": total_duration,
            "avg_duration_ms": total_duration / len(records),
        }


class InMemoryUserStore:
    """User documents keyed by id, with an atomic usage increment."""

    def __init__(self, users: Optional[list[UserRecord]] = None):
        self._users: dict[str, UserRecord] = {}
        self._lock = threading.Lock()
        for user in users or []:
            self._users[user.id] = user.model_copy(deep=True)

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    async def save(self, user: UserRecord) -> None:
        with self._lock:
            self._users[user.id] = user.model_copy(deep=True)

    async def increment_usage(
        self, user_id: str, tool_id: str, tool_name: str, at: datetime | None = None
    ) -> UserUsageCounters:
        """
        Count one generation for ``user_id`` under the store lock.

        Args:
            user_id: User to update
            tool_id: Tool that produced the payload
            tool_name: Display name for a new per-tool entry
            at: Time of use (defaults to now, UTC)

        Returns:
            Copy of the updated counters

        Raises:
            UserNotFoundError: No user stored under ``user_id``
        """
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            user.usage.record_use(tool_id, tool_name, at or datetime.now(timezone.utc))
            return user.usage.model_copy(deep=True)
