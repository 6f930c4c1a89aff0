"""Plan- and trial-based tool entitlement."""

import logging
from datetime import datetime, timezone
from typing import Iterable

from contentengine.models.errors import ToolNotAvailableError, TrialExpiredError
from contentengine.models.tools import ToolDefinition
from contentengine.models.usage import PlanTier, Subscription, SubscriptionStatus, UserRecord, UserRole

logger = logging.getLogger(__name__)

# Tools a starter plan adds on top of the trial set
STARTER_EXTRA_TOOLS = ("blog-writing", "email-marketing", "ad-copy")

PAID_ACTIVE_STATUSES = {SubscriptionStatus.ACTIVE, SubscriptionStatus.PAST_DUE}
INACTIVE_STATUSES = {SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED}


def has_active_paid_plan(subscription: Subscription) -> bool:
    """Paid tier with a status that still grants access."""
    return subscription.plan is not PlanTier.FREE_TRIAL and subscription.status in PAID_ACTIVE_STATUSES


def is_trial_expired(subscription: Subscription, now: datetime | None = None) -> bool:
    """
    Check whether the trial window elapsed with no paid plan to fall back on.

    A subscription counts as a trial when either its plan is ``free_trial`` or
    its status is ``trial``.
    """
    now = now or datetime.now(timezone.utc)
    on_trial = subscription.plan is PlanTier.FREE_TRIAL or subscription.status is SubscriptionStatus.TRIAL
    if not on_trial or has_active_paid_plan(subscription):
        return False
    return subscription.trial_end_date <= now


class EntitlementGate:
    """Pure decision function over plan tier, trial state and the tool catalogue."""

    def __init__(self, definitions: Iterable[ToolDefinition]):
        self._definitions = {d.id: d for d in definitions}
        all_tools = list(self._definitions)
        trial_tools = [d.id for d in self._definitions.values() if d.included_in_trial]
        self._plan_tools: dict[PlanTier, list[str]] = {
            PlanTier.FREE_TRIAL: trial_tools,
            PlanTier.STARTER: trial_tools + [t for t in STARTER_EXTRA_TOOLS if t in self._definitions],
            PlanTier.PRO: all_tools,
            PlanTier.AGENCY: all_tools,
        }

    def tools_for_plan(self, plan: PlanTier) -> list[str]:
        """Tool ids granted by ``plan`` when it is in good standing."""
        return list(self._plan_tools.get(plan, []))

    def minimum_plan_for(self, tool_id: str) -> PlanTier | None:
        """Cheapest plan whose tool list contains ``tool_id``."""
        for plan in PlanTier:
            if tool_id in self._plan_tools[plan]:
                return plan
        return None

    def available_tools(self, user: UserRecord, now: datetime | None = None) -> list[str]:
        """
        Compute the tool ids the user may invoke right now.

        Args:
            user: User with role and subscription
            now: Evaluation time (defaults to now, UTC)

        Returns:
            Tool ids in catalogue order (empty when nothing is allowed)
        """
        if user.role is UserRole.ADMIN:
            return list(self._definitions)

        subscription = user.subscription
        if is_trial_expired(subscription, now):
            return []
        if subscription.status is SubscriptionStatus.TRIAL:
            return self.tools_for_plan(PlanTier.FREE_TRIAL)
        if subscription.status in INACTIVE_STATUSES:
            return []
        return self.tools_for_plan(subscription.plan)

    def check_access(self, user: UserRecord, tool_id: str, now: datetime | None = None) -> None:
        """
        Raise unless ``user`` may invoke ``tool_id``.

        Args:
            user: User with role and subscription
            tool_id: Requested tool identifier
            now: Evaluation time (defaults to now, UTC)

        Raises:
            TrialExpiredError: Trial elapsed and no paid plan is active
            ToolNotAvailableError: Tool is outside the user's current allowance
        """
        if user.role is UserRole.ADMIN:
            return

        if is_trial_expired(user.subscription, now):
            logger.info(f"⛔ [Entitlement] Trial expired for user={user.id}, tool={tool_id}")
            raise TrialExpiredError()

        allowed = self.available_tools(user, now)
        if tool_id not in allowed:
            required = self.minimum_plan_for(tool_id)
            logger.info(
                f"⛔ [Entitlement] Tool {tool_id} not in plan {user.subscription.plan.value} for user={user.id}"
            )
            raise ToolNotAvailableError(tool_id, allowed, required.value if required else None)
