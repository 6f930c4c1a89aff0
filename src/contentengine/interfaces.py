"""Protocol interfaces for the collaborators the dispatcher depends on."""

from datetime import datetime
from typing import Any, Optional, Protocol

from typing_extensions import runtime_checkable

from contentengine.models.requests import GenerationInstruction, GenerationOptions
from contentengine.models.usage import UsageRecord, UserRecord, UserUsageCounters


@runtime_checkable
class GenerationClient(Protocol):
    """Transport to the external generative model."""

    async def generate(
        self,
        instruction: GenerationInstruction,
        schema_hint: dict[str, Any],
        options: GenerationOptions,
    ) -> str:
        """
        Run one completion and return the model's raw text.

        Args:
            instruction: System and user prompts built for a tool
            schema_hint: JSON schema the reply is expected to match
            options: Model, token budget, temperature and timeout

        Returns:
            Raw reply text (may be empty or malformed)

        Raises:
            UpstreamError: Classified transport, auth or quota failure
        """
        ...

    @property
    def is_configured(self) -> bool:
        """Whether a usable credential is present."""
        ...


@runtime_checkable
class UserStore(Protocol):
    """User and entitlement store."""

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    async def save(self, user: UserRecord) -> None:
        ...

    async def increment_usage(
        self, user_id: str, tool_id: str, tool_name: str, at: datetime | None = None
    ) -> UserUsageCounters:
        """Atomically count one generation and return the updated counters."""
        ...


@runtime_checkable
class UsageStore(Protocol):
    """Append-only store of usage records."""

    async def append(self, record: UsageRecord) -> None:
        ...


@runtime_checkable
class NotificationService(Protocol):
    """Recomputes a user's notification set. Idempotent."""

    async def regenerate(self, user_id: str) -> None:
        ...
