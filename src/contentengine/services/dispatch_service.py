"""Tool generation dispatch.

One call flows through: limiters -> tool lookup -> user -> entitlement ->
request builder -> generation client -> output validator, short-circuiting
to the fallback synthesizer on any generation-path failure. Every attempt
that gets past the rejections is then recorded and triggers notifications.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from contentengine.interfaces import GenerationClient, NotificationService, UsageStore, UserStore
from contentengine.models.config import GLOBAL_LIMITER_KEY, EngineConfig
from contentengine.models.errors import (
    AuthenticationRequiredError,
    ErrorCode,
    InvalidInputError,
    RateLimitedError,
    UpstreamError,
    UserNotFoundError,
)
from contentengine.models.requests import GenerationOptions, GenerationRequest
from contentengine.models.responses import (
    GenerationOutcome,
    OutcomeStatus,
    SubscriptionSummary,
    ToolListing,
    ToolResponse,
    ToolSummary,
    UsageSummary,
)
from contentengine.models.tools import MissingSectionPolicy
from contentengine.models.usage import SubscriptionStatus, UserRecord
from contentengine.services.entitlement_service import EntitlementGate
from contentengine.services.generation_client import OpenAIGenerationClient
from contentengine.services.limiter_service import SlidingWindowLimiter
from contentengine.services.notification_service import NotificationEmitter
from contentengine.services.output_validator import missing_sections, parse_model_output
from contentengine.services.usage_service import UsageRecorder
from contentengine.tools.base import ToolSpec, strip_fallback_marker
from contentengine.tools.registry import ToolRegistry, default_registry

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Runs tool invocations end to end."""

    def __init__(
        self,
        *,
        registry: ToolRegistry,
        entitlement: EntitlementGate,
        identity_limiter: SlidingWindowLimiter,
        global_limiter: SlidingWindowLimiter,
        client: GenerationClient,
        user_store: UserStore,
        recorder: UsageRecorder,
        notifier: NotificationEmitter,
        options: GenerationOptions | None = None,
    ):
        self.registry = registry
        self.entitlement = entitlement
        self.identity_limiter = identity_limiter
        self.global_limiter = global_limiter
        self.client = client
        self.user_store = user_store
        self.recorder = recorder
        self.notifier = notifier
        self.options = options or GenerationOptions()
        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls,
        config: EngineConfig,
        *,
        user_store: UserStore,
        usage_store: UsageStore,
        notification_service: NotificationService,
        client: GenerationClient | None = None,
        registry: ToolRegistry | None = None,
    ) -> "ToolDispatcher":
        """
        Wire a dispatcher from configuration and collaborators.

        Args:
            config: Engine settings (limiters, model options, credential)
            user_store: User/entitlement store
            usage_store: Append-only usage store
            notification_service: Notification collaborator
            client: Generation client (defaults to the OpenAI client)
            registry: Tool registry (defaults to the built-in tools)

        Returns:
            Ready-to-use ToolDispatcher
        """
        registry = registry or default_registry()
        return cls(
            registry=registry,
            entitlement=EntitlementGate(registry.definitions()),
            identity_limiter=SlidingWindowLimiter(config.identity_limiter, name="IdentityLimiter"),
            global_limiter=SlidingWindowLimiter(config.global_limiter, name="GlobalLimiter"),
            client=client or OpenAIGenerationClient(api_key=config.openai_api_key),
            user_store=user_store,
            recorder=UsageRecorder(usage_store, user_store, timeout_seconds=config.storage_timeout_seconds),
            notifier=NotificationEmitter(notification_service),
            options=config.generation_options(),
        )

    # Rejections

    def _check_limits(self, request: GenerationRequest) -> None:
        identity_key = request.identity_key
        if not self.identity_limiter.try_acquire(identity_key):
            logger.info(f"🚦 [Dispatcher] Identity limit reached for {identity_key}")
            raise RateLimitedError("identity", self.identity_limiter.retry_after(identity_key))
        if not self.global_limiter.try_acquire(GLOBAL_LIMITER_KEY):
            logger.info("🚦 [Dispatcher] Global limit reached")
            raise RateLimitedError("global", self.global_limiter.retry_after(GLOBAL_LIMITER_KEY))

    async def _resolve_user(self, user_id: Optional[str]) -> UserRecord:
        if not user_id:
            raise AuthenticationRequiredError()
        user = await self.user_store.find_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # Generation path

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)

    def _degrade(
        self,
        tool: ToolSpec,
        request: GenerationRequest,
        start: float,
        error_kind: ErrorCode,
        error_message: str | None,
        model_used: str | None = None,
    ) -> GenerationOutcome:
        logger.warning(f"⚠️ [Dispatcher] {tool.tool_id} degraded to fallback: {error_kind.value} ({error_message})")
        return GenerationOutcome(
            status=OutcomeStatus.DEGRADED,
            payload=tool.synthesize(request.input),
            processing_time_ms=self._elapsed_ms(start),
            error_kind=error_kind,
            error_message=error_message,
            model_used=model_used,
        )

    async def _generate(self, tool: ToolSpec, request: GenerationRequest, start: float) -> GenerationOutcome:
        options = self.options
        try:
            instruction = tool.build_request(request.input)
        except Exception as e:
            logger.error(f"❌ [Dispatcher] Request builder failed for {tool.tool_id}: {str(e)}", exc_info=True)
            return self._degrade(tool, request, start, ErrorCode.INTERNAL_ERROR, str(e))

        try:
            raw_text = await self.client.generate(instruction, instruction.output_schema, options)
        except UpstreamError as e:
            return self._degrade(tool, request, start, e.error_code, e.message, options.model)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"❌ [Dispatcher] Unclassified client failure for {tool.tool_id}: {str(e)}", exc_info=True)
            return self._degrade(tool, request, start, ErrorCode.UPSTREAM_UNKNOWN, str(e), options.model)

        result = parse_model_output(raw_text)
        if result.degrade:
            return self._degrade(tool, request, start, ErrorCode.MALFORMED_OUTPUT, result.reason, options.model)

        payload = strip_fallback_marker(result.payload or {})
        expected = tool.expected_sections()
        missing = missing_sections(payload, expected)
        if missing:
            if len(missing) == len(expected) or tool.missing_section_policy is MissingSectionPolicy.DISCARD:
                return self._degrade(
                    tool,
                    request,
                    start,
                    ErrorCode.MALFORMED_OUTPUT,
                    f"missing sections: {', '.join(missing)}",
                    options.model,
                )
            fallback = tool.synthesize(request.input)
            for section in missing:
                payload[section] = fallback[section]
            logger.info(f"🩹 [Dispatcher] Patched {tool.tool_id} sections from fallback: {missing}")

        return GenerationOutcome(
            status=OutcomeStatus.SUCCESS,
            payload=payload,
            processing_time_ms=self._elapsed_ms(start),
            patched_sections=missing,
            model_used=options.model,
        )

    # Bookkeeping

    def _track(self, coro: Any) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _record_cancelled(self, request: GenerationRequest, tool: ToolSpec, start: float) -> None:
        outcome = GenerationOutcome(
            status=OutcomeStatus.ERROR,
            processing_time_ms=self._elapsed_ms(start),
            error_kind=ErrorCode.CANCELLED,
            error_message="Request cancelled by client",
        )
        await self.recorder.record(request, tool.definition, outcome)
        if request.user_id:
            self.notifier.emit(request.user_id)

    async def _finalize(
        self, request: GenerationRequest, tool: ToolSpec, outcome: GenerationOutcome, user: UserRecord
    ) -> UsageSummary:
        usage = await self.recorder.record(request, tool.definition, outcome, current=user.usage)
        self.notifier.emit(user.id)
        return usage

    async def drain(self) -> None:
        """Wait for cancellation bookkeeping and pending notifications."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
        await self.notifier.drain()

    # Public API

    async def dispatch(self, request: GenerationRequest) -> ToolResponse:
        """
        Run one tool invocation.

        Args:
            request: Tool id, identity and free-form input

        Returns:
            ToolResponse; generation-path failures resolve to fallback content

        Raises:
            RateLimitedError: Identity or global limiter exhausted
            UnknownToolError: No such tool
            AuthenticationRequiredError: No user id on the request
            UserNotFoundError: User id does not resolve
            TrialExpiredError: Trial elapsed with no paid plan
            ToolNotAvailableError: Tool outside the user's plan
            InvalidInputError: A required input field is missing
        """
        start = time.monotonic()
        logger.info(f"📋 [Dispatcher] Received {request.tool_id} for {request.identity_key}")

        self._check_limits(request)
        tool = self.registry.get(request.tool_id)
        user = await self._resolve_user(request.user_id)
        self.entitlement.check_access(user, tool.tool_id)
        missing_fields = tool.missing_required_fields(request.input)
        if missing_fields:
            raise InvalidInputError(tool.tool_id, missing_fields)

        try:
            outcome = await self._generate(tool, request, start)
        except asyncio.CancelledError:
            logger.warning(f"🛑 [Dispatcher] {tool.tool_id} cancelled for user={user.id}; recording attempt")
            self._track(self._record_cancelled(request, tool, start))
            raise

        # Accounting finishes even if the caller goes away now
        usage = await asyncio.shield(self._track(self._finalize(request, tool, outcome, user)))

        logger.info(
            f"✅ [Dispatcher] {tool.tool_id} finished: status={outcome.status.value}, "
            f"aiGenerated={outcome.ai_generated}, {outcome.processing_time_ms}ms"
        )
        return ToolResponse(
            output=outcome.payload,
            processing_time_ms=outcome.processing_time_ms,
            ai_generated=outcome.ai_generated,
            usage=usage,
        )

    async def list_tools(self, user_id: Optional[str], now: datetime | None = None) -> ToolListing:
        """
        Catalogue view with per-tool access for one user.

        Raises:
            AuthenticationRequiredError: No user id
            UserNotFoundError: User id does not resolve
        """
        user = await self._resolve_user(user_id)
        now = now or datetime.now(timezone.utc)
        allowed = set(self.entitlement.available_tools(user, now))
        subscription = user.subscription
        return ToolListing(
            tools=[
                ToolSummary(
                    id=d.id,
                    name=d.name,
                    description=d.description,
                    category=d.category,
                    included_in_trial=d.included_in_trial,
                    has_access=d.id in allowed,
                )
                for d in self.registry.definitions()
            ],
            subscription=SubscriptionSummary(plan=subscription.plan.value, status=subscription.status.value),
            trial_days_remaining=subscription.trial_days_remaining(now) if subscription.status is SubscriptionStatus.TRIAL else None,
        )
