"""Shared pytest fixtures for content engine tests."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from contentengine.models.config import EngineConfig, LimiterConfig
from contentengine.models.errors import ErrorCode, UpstreamError
from contentengine.models.requests import GenerationInstruction, GenerationOptions
from contentengine.models.usage import PlanTier, Subscription, SubscriptionStatus, UserRecord, UserRole
from contentengine.services.dispatch_service import ToolDispatcher
from contentengine.services.memory_store import InMemoryUsageStore, InMemoryUserStore
from contentengine.services.notification_service import InMemoryNotificationService
from contentengine.tools.base import strip_fallback_marker
from contentengine.tools.registry import default_registry

VALID_API_KEY = "sk-test-0123456789abcdefghijklmnop"


class FakeGenerationClient:
    """Scriptable generation client for dispatcher tests."""

    def __init__(
        self,
        response_text: str = "",
        error: Optional[Exception] = None,
        block: bool = False,
        configured: bool = True,
    ):
        """
        Initialize fake client.

        Args:
            response_text: Text returned by generate()
            error: Exception raised by generate() instead of returning
            block: If True, generate() waits forever (for cancellation tests)
            configured: Value reported by is_configured
        """
        self.response_text = response_text
        self.error = error
        self.block = block
        self.configured = configured
        self.call_count = 0
        self.calls: list[tuple[GenerationInstruction, dict[str, Any], GenerationOptions]] = []
        self.started = asyncio.Event()

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(
        self,
        instruction: GenerationInstruction,
        schema_hint: dict[str, Any],
        options: GenerationOptions,
    ) -> str:
        self.call_count += 1
        self.calls.append((instruction, schema_hint, options))
        self.started.set()
        if self.block:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error
        return self.response_text


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_user(
    user_id: str = "user-1",
    plan: PlanTier = PlanTier.PRO,
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    trial_days_left: float = 7,
    role: UserRole = UserRole.USER,
) -> UserRecord:
    """Build a user whose trial ends ``trial_days_left`` days from now (negative = past)."""
    now = datetime.now(timezone.utc)
    return UserRecord(
        id=user_id,
        email=f"{user_id}@example.com",
        role=role,
        subscription=Subscription(
            plan=plan,
            status=status,
            trial_start_date=now - timedelta(days=7 - trial_days_left),
            trial_end_date=now + timedelta(days=trial_days_left),
        ),
    )


def model_payload(tool_id: str, raw_input: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """A schema-complete payload without the fallback marker, standing in for model output."""
    return strip_fallback_marker(default_registry().synthesize(tool_id, raw_input or {}))


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def pro_user():
    return make_user("pro-user", PlanTier.PRO, SubscriptionStatus.ACTIVE)


@pytest.fixture
def expired_trial_user():
    return make_user("trial-user", PlanTier.FREE_TRIAL, SubscriptionStatus.TRIAL, trial_days_left=-1)


@pytest.fixture
def user_store(pro_user, expired_trial_user):
    return InMemoryUserStore(
        [
            pro_user,
            expired_trial_user,
            make_user("starter-user", PlanTier.STARTER, SubscriptionStatus.ACTIVE),
            make_user("active-trial-user", PlanTier.FREE_TRIAL, SubscriptionStatus.TRIAL, trial_days_left=5),
        ]
    )


@pytest.fixture
def usage_store():
    return InMemoryUsageStore()


@pytest.fixture
def notification_service(user_store):
    return InMemoryNotificationService(user_store)


@pytest.fixture
def engine_config():
    return EngineConfig(
        openai_api_key=VALID_API_KEY,
        identity_limiter=LimiterConfig(window_ms=60_000, max_count=3),
        global_limiter=LimiterConfig(window_ms=60_000, max_count=10),
    )


@pytest.fixture
def make_dispatcher(engine_config, user_store, usage_store, notification_service):
    """Factory for dispatchers sharing the fixture stores."""

    def _make(client: FakeGenerationClient, config: Optional[EngineConfig] = None, **overrides) -> ToolDispatcher:
        return ToolDispatcher.from_config(
            config or engine_config,
            user_store=overrides.get("user_store", user_store),
            usage_store=overrides.get("usage_store", usage_store),
            notification_service=overrides.get("notification_service", notification_service),
            client=client,
        )

    return _make


@pytest.fixture
def upstream_failure():
    """Factory for classified upstream errors."""

    def _make(code: ErrorCode = ErrorCode.UPSTREAM_TRANSIENT) -> UpstreamError:
        return UpstreamError(code, f"simulated {code.value}")

    return _make


@pytest.fixture
def user_factory():
    """Factory for users with a given plan, status and trial window."""
    return make_user


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_client():
    """Factory for scriptable generation clients."""
    return FakeGenerationClient


@pytest.fixture
def valid_payload():
    """Factory for schema-complete payloads standing in for model output."""
    return model_payload
