"""User, subscription and usage accounting models."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contentengine.models.errors import ErrorCode

TRIAL_LENGTH = timedelta(days=7)


def as_utc(value: datetime) -> datetime:
    """Read a naive datetime as UTC; aware values pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PlanTier(str, Enum):
    """Subscription plans, cheapest first."""

    FREE_TRIAL = "free_trial"
    STARTER = "starter"
    PRO = "pro"
    AGENCY = "agency"


class SubscriptionStatus(str, Enum):
    """Billing state of a subscription."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
    TRIAL = "trial"
    PAST_DUE = "past_due"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Subscription(BaseModel):
    """Plan and trial window of a user."""

    plan: PlanTier = Field(PlanTier.FREE_TRIAL, description="Current plan tier")
    status: SubscriptionStatus = Field(SubscriptionStatus.TRIAL, description="Billing status")
    trial_start_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    trial_end_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc) + TRIAL_LENGTH)

    @field_validator("trial_start_date", "trial_end_date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Document stores often hand back naive timestamps; they are stored in UTC."""
        return as_utc(value)

    def trial_days_remaining(self, now: datetime | None = None) -> int:
        """Whole days left in the trial window, never negative."""
        now = now or datetime.now(timezone.utc)
        seconds = (self.trial_end_date - now).total_seconds()
        if seconds <= 0:
            return 0
        # Partial days count as a full day
        return int(-(-seconds // 86400))


class ToolUsageEntry(BaseModel):
    """Per-tool usage counter."""

    tool_id: str
    tool_name: str
    usage_count: int = Field(0, ge=0)
    last_used_at: Optional[datetime] = None


class UserUsageCounters(BaseModel):
    """Rolling usage aggregate owned by the user entity."""

    total_generations: int = Field(0, ge=0)
    monthly_generations: int = Field(0, ge=0)
    last_reset_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tools_used: list[ToolUsageEntry] = Field(default_factory=list)

    @field_validator("last_reset_date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    def record_use(self, tool_id: str, tool_name: str, at: datetime | None = None) -> None:
        """
        Count one generation for ``tool_id``.

        The monthly counter restarts when ``at`` falls in a later calendar month
        than ``last_reset_date``.

        Args:
            tool_id: Tool that produced the payload
            tool_name: Display name stored with a new per-tool entry
            at: Time of use (defaults to now, UTC)
        """
        at = at or datetime.now(timezone.utc)
        if (at.year, at.month) > (self.last_reset_date.year, self.last_reset_date.month):
            self.monthly_generations = 0
            self.last_reset_date = at

        self.total_generations += 1
        self.monthly_generations += 1

        for entry in self.tools_used:
            if entry.tool_id == tool_id:
                entry.usage_count += 1
                entry.last_used_at = at
                return
        self.tools_used.append(ToolUsageEntry(tool_id=tool_id, tool_name=tool_name, usage_count=1, last_used_at=at))

    def usage_for(self, tool_id: str) -> int:
        """Usage count for one tool (0 if never used)."""
        return next((e.usage_count for e in self.tools_used if e.tool_id == tool_id), 0)


class UserRecord(BaseModel):
    """Slice of the user document the engine reads and updates."""

    id: str
    email: Optional[str] = None
    role: UserRole = UserRole.USER
    subscription: Subscription = Field(default_factory=Subscription)
    usage: UserUsageCounters = Field(default_factory=UserUsageCounters)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UsageStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class UsageRecord(BaseModel):
    """Immutable log entry of one dispatch attempt."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    tool_id: str
    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)
    output: Optional[dict[str, Any]] = Field(None, description="Payload returned to the caller, None on hard error")
    processing_time_ms: int = Field(..., ge=0)
    status: UsageStatus
    error_kind: Optional[ErrorCode] = None
    error_message: Optional[str] = None
    tokens_used: Optional[int] = Field(None, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
