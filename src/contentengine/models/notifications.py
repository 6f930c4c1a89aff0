"""Notification models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class NotificationCategory(str, Enum):
    TRIAL = "trial"
    SUBSCRIPTION = "subscription"
    USAGE = "usage"


class Notification(BaseModel):
    """One user-facing notice."""

    title: str
    message: str
    type: NotificationType
    category: NotificationCategory
    action_url: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
