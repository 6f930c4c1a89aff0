"""Best-effort usage accounting for dispatch attempts."""

import logging
from typing import Any

from contentengine.interfaces import UsageStore, UserStore
from contentengine.models.requests import GenerationRequest
from contentengine.models.responses import GenerationOutcome, OutcomeStatus, UsageSummary
from contentengine.models.tools import ToolDefinition
from contentengine.models.usage import UsageRecord, UsageStatus, UserUsageCounters
from contentengine.services.retry_service import STORAGE_RETRY_CONFIG, STORAGE_TIMEOUT_SECONDS, retry_with_backoff

logger = logging.getLogger(__name__)


class UsageRecorder:
    """Writes one usage record per attempt and bumps counters for non-empty payloads."""

    def __init__(
        self,
        usage_store: UsageStore,
        user_store: UserStore,
        retry_config: dict[str, Any] | None = None,
        timeout_seconds: float = STORAGE_TIMEOUT_SECONDS,
    ):
        """
        Initialize usage recorder.

        Args:
            usage_store: Append-only record store
            user_store: Store exposing ``increment_usage``
            retry_config: Tenacity config for storage writes (defaults to short waits)
            timeout_seconds: Per-attempt limit so a hung store cannot hold the response
        """
        self._usage_store = usage_store
        self._user_store = user_store
        self._retry_config = retry_config or STORAGE_RETRY_CONFIG
        self._timeout_seconds = timeout_seconds

    def build_record(
        self,
        request: GenerationRequest,
        definition: ToolDefinition,
        outcome: GenerationOutcome,
    ) -> UsageRecord:
        metadata: dict[str, Any] = {}
        if outcome.model_used:
            metadata["model"] = outcome.model_used
        if outcome.status is OutcomeStatus.DEGRADED and outcome.error_kind:
            metadata["degradedReason"] = outcome.error_kind.value
        if outcome.patched_sections:
            metadata["patchedSections"] = list(outcome.patched_sections)

        return UsageRecord(
            user_id=request.user_id or request.identity_key,
            tool_id=definition.id,
            tool_name=definition.name,
            input=request.input,
            output=outcome.payload or None,
            processing_time_ms=outcome.processing_time_ms,
            status=UsageStatus.SUCCESS if outcome.has_payload else UsageStatus.ERROR,
            error_kind=outcome.error_kind,
            error_message=outcome.error_message,
            metadata=metadata,
        )

    async def record(
        self,
        request: GenerationRequest,
        definition: ToolDefinition,
        outcome: GenerationOutcome,
        current: UserUsageCounters | None = None,
    ) -> UsageSummary:
        """
        Record an attempt. Never raises for storage failures.

        Args:
            request: The dispatched request
            definition: Tool that handled it
            outcome: How the attempt resolved
            current: Counters as last read, reported if the update fails

        Returns:
            UsageSummary with the counters the caller should see
        """
        record = self.build_record(request, definition, outcome)
        try:
            await retry_with_backoff(
                self._usage_store.append,
                record,
                retry_config=self._retry_config,
                timeout_seconds=self._timeout_seconds,
            )
        except Exception as e:
            logger.warning(f"❌ [UsageRecorder] Failed to write usage record for {definition.id}: {str(e)}")

        counters = current
        if outcome.has_payload and request.user_id:
            try:
                counters = await retry_with_backoff(
                    self._user_store.increment_usage,
                    request.user_id,
                    definition.id,
                    definition.name,
                    retry_config=self._retry_config,
                    timeout_seconds=self._timeout_seconds,
                )
            except Exception as e:
                logger.warning(f"❌ [UsageRecorder] Failed to update usage counters for user={request.user_id}: {str(e)}")

        if counters is None:
            return UsageSummary()
        return UsageSummary(
            total_generations=counters.total_generations,
            monthly_generations=counters.monthly_generations,
        )
