"""Notification emitter and an in-memory notification collaborator."""

import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from contentengine.interfaces import NotificationService, UserStore
from contentengine.models.errors import NotificationUnavailableError
from contentengine.models.notifications import Notification, NotificationCategory, NotificationType
from contentengine.models.usage import PlanTier, SubscriptionStatus, UserRecord

logger = logging.getLogger(__name__)

# Monthly generation allowance per plan (None = unlimited)
PLAN_MONTHLY_LIMITS: dict[PlanTier, Optional[int]] = {
    PlanTier.FREE_TRIAL: 10,
    PlanTier.STARTER: 30,
    PlanTier.PRO: 100,
    PlanTier.AGENCY: None,
}

USAGE_MILESTONES = (10, 25, 50, 100, 250, 500)


class NotificationEmitter:
    """Fire-and-forget trigger for notification regeneration."""

    def __init__(self, service: NotificationService):
        self._service = service
        self._pending: set[asyncio.Task] = set()

    def emit(self, user_id: str) -> asyncio.Task:
        """
        Schedule ``regenerate(user_id)`` without waiting for it.

        Args:
            user_id: User whose notifications should be recomputed

        Returns:
            The background task (already tracked by the emitter)
        """
        task = asyncio.create_task(self._run(user_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, user_id: str) -> None:
        try:
            await self._service.regenerate(user_id)
        except Exception as e:
            error = NotificationUnavailableError(f"Notification regeneration failed: {str(e)}", original_exception=e)
            logger.warning(f"🔕 [NotificationEmitter] {error.message} (user={user_id})")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled notification task to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


class InMemoryNotificationService:
    """Recomputes trial, subscription and usage notices for a user."""

    def __init__(self, user_store: UserStore):
        self._user_store = user_store
        self._notifications: dict[str, list[Notification]] = {}
        self._lock = threading.Lock()

    def for_user(self, user_id: str) -> list[Notification]:
        with self._lock:
            return list(self._notifications.get(user_id, []))

    async def regenerate(self, user_id: str) -> None:
        """
        Rebuild notifications for ``user_id``; existing titles are not duplicated.

        Args:
            user_id: User to evaluate
        """
        user = await self._user_store.find_user(user_id)
        if user is None:
            logger.debug(f"🔕 [NotificationService] Unknown user={user_id}, nothing to do")
            return

        candidates = self.subscription_notifications(user) + self.usage_notifications(user)
        with self._lock:
            existing = self._notifications.setdefault(user_id, [])
            titles = {n.title for n in existing}
            added = [n for n in candidates if n.title not in titles]
            existing.extend(added)
        if added:
            logger.info(f"🔔 [NotificationService] Added {len(added)} notifications for user={user_id}")

    @staticmethod
    def subscription_notifications(user: UserRecord, now: datetime | None = None) -> list[Notification]:
        now = now or datetime.now(timezone.utc)
        subscription = user.subscription
        notices: list[Notification] = []

        if subscription.status is SubscriptionStatus.TRIAL:
            days = subscription.trial_days_remaining(now)
            if days <= 0:
                notices.append(
                    Notification(
                        title="Free Trial Expired!",
                        message="Your free trial has expired. Upgrade now to continue using all AI tools.",
                        type=NotificationType.ERROR,
                        category=NotificationCategory.TRIAL,
                        action_url="/upgrade",
                    )
                )
            elif days <= 1:
                notices.append(
                    Notification(
                        title="Trial Expires Tomorrow!",
                        message="Your free trial expires tomorrow. Upgrade now to avoid interruption.",
                        type=NotificationType.WARNING,
                        category=NotificationCategory.TRIAL,
                        action_url="/upgrade",
                    )
                )
            elif days <= 3:
                notices.append(
                    Notification(
                        title="Trial Ending Soon",
                        message=f"Your free trial will expire in {days} days. Upgrade now to unlock all features.",
                        type=NotificationType.WARNING,
                        category=NotificationCategory.TRIAL,
                        action_url="/upgrade",
                    )
                )

        if subscription.status is SubscriptionStatus.ACTIVE and subscription.plan is not PlanTier.FREE_TRIAL:
            notices.append(
                Notification(
                    title="Subscription Activated!",
                    message=f"Your {subscription.plan.value} plan is now active.",
                    type=NotificationType.SUCCESS,
                    category=NotificationCategory.SUBSCRIPTION,
                    action_url="/dashboard",
                )
            )
        return notices

    @staticmethod
    def usage_notifications(user: UserRecord) -> list[Notification]:
        notices: list[Notification] = []
        monthly = user.usage.monthly_generations
        limit = PLAN_MONTHLY_LIMITS.get(user.subscription.plan, 10)

        if limit:
            percentage = monthly / limit * 100
            if percentage >= 90:
                notices.append(
                    Notification(
                        title="Usage Limit Warning",
                        message=f"You've used {monthly}/{limit} generations this month. Consider upgrading.",
                        type=NotificationType.WARNING,
                        category=NotificationCategory.USAGE,
                        action_url="/upgrade",
                    )
                )
            elif percentage >= 75:
                notices.append(
                    Notification(
                        title="Usage Update",
                        message=f"You've used {monthly}/{limit} generations this month. {limit - monthly} remaining.",
                        type=NotificationType.INFO,
                        category=NotificationCategory.USAGE,
                    )
                )

        total = user.usage.total_generations
        if total in USAGE_MILESTONES:
            notices.append(
                Notification(
                    title=f"Usage Milestone: {total}!",
                    message=f"Congratulations! You've generated {total} pieces of content.",
                    type=NotificationType.SUCCESS,
                    category=NotificationCategory.USAGE,
                )
            )
        return notices
