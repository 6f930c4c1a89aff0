"""End-to-end tests for tool dispatch, degradation and bookkeeping."""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock

from contentengine.models.config import EngineConfig, LimiterConfig
from contentengine.models.errors import (
    AuthenticationRequiredError,
    ErrorCode,
    InvalidInputError,
    RateLimitedError,
    StorageUnavailableError,
    ToolNotAvailableError,
    TrialExpiredError,
    UnknownToolError,
    UserNotFoundError,
)
from contentengine.models.requests import GenerationRequest
from contentengine.models.usage import UsageStatus
from contentengine.services.dispatch_service import ToolDispatcher
from contentengine.tools.base import FALLBACK_MARKER, FALLBACK_WARNING_KEY

SEO_INPUT = {"url": "https://acmebakery.example.com", "context": "local bakery"}


def _request(tool_id="seo-audit", user_id="pro-user", raw_input=None, client_ip="203.0.113.7"):
    return GenerationRequest(
        tool_id=tool_id,
        user_id=user_id,
        client_ip=client_ip,
        input=SEO_INPUT if raw_input is None else raw_input,
    )


@pytest.mark.asyncio
async def test_successful_generation(
    fake_client, make_dispatcher, valid_payload, usage_store, user_store, notification_service
):
    """A well-formed model reply is returned as AI content and counted once."""
    payload = valid_payload("seo-audit", SEO_INPUT)
    client = fake_client(response_text=json.dumps(payload))
    dispatcher = make_dispatcher(client)

    response = await dispatcher.dispatch(_request())
    await dispatcher.drain()

    assert response.success is True
    assert response.ai_generated is True
    assert response.output == payload
    assert FALLBACK_MARKER not in response.output
    assert response.usage.total_generations == 1
    assert response.usage.monthly_generations == 1
    assert client.call_count == 1

    records = usage_store.get_all()
    assert len(records) == 1
    assert records[0].status == UsageStatus.SUCCESS
    assert records[0].error_kind is None
    assert records[0].metadata["model"] == "gpt-4o"

    user = await user_store.find_user("pro-user")
    assert user.usage.usage_for("seo-audit") == 1
    assert "Subscription Activated!" in [n.title for n in notification_service.for_user("pro-user")]


@pytest.mark.asyncio
async def test_prompt_carries_schema_and_options(fake_client, make_dispatcher, valid_payload):
    """The client receives the tool's strict schema and configured options."""
    client = fake_client(response_text=json.dumps(valid_payload("seo-audit")))
    dispatcher = make_dispatcher(client)

    await dispatcher.dispatch(_request())

    instruction, schema_hint, options = client.calls[0]
    assert instruction.tool_id == "seo-audit"
    assert schema_hint == instruction.output_schema
    assert options.model == "gpt-4o"
    assert options.timeout_seconds == 45.0
    assert "https://acmebakery.example.com" in instruction.user_prompt


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "code",
    [
        ErrorCode.UPSTREAM_TRANSIENT,
        ErrorCode.UPSTREAM_QUOTA_EXCEEDED,
        ErrorCode.UPSTREAM_UNAUTHORIZED,
        ErrorCode.UPSTREAM_UNKNOWN,
    ],
)
async def test_upstream_failure_degrades_to_fallback(
    fake_client, make_dispatcher, upstream_failure, registry, usage_store, code
):
    """Upstream failures return marked fallback content, still counted as usage."""
    client = fake_client(error=upstream_failure(code))
    dispatcher = make_dispatcher(client)

    response = await dispatcher.dispatch(_request())

    assert response.ai_generated is False
    assert response.output[FALLBACK_MARKER] is False
    assert FALLBACK_WARNING_KEY in response.output
    assert response.output == registry.synthesize("seo-audit", SEO_INPUT)
    assert response.usage.total_generations == 1

    record = usage_store.get_all()[0]
    assert record.status == UsageStatus.SUCCESS
    assert record.error_kind == code
    assert record.metadata["degradedReason"] == code.value


@pytest.mark.asyncio
async def test_unclassified_client_exception_degrades(fake_client, make_dispatcher, usage_store):
    """Any other client exception degrades as UPSTREAM_UNKNOWN."""
    dispatcher = make_dispatcher(fake_client(error=RuntimeError("socket exploded")))

    response = await dispatcher.dispatch(_request())

    assert response.ai_generated is False
    assert usage_store.get_all()[0].error_kind == ErrorCode.UPSTREAM_UNKNOWN


@pytest.mark.asyncio
async def test_missing_credential_degrades_without_network(user_store, usage_store, notification_service, registry):
    """With no API key every call degrades to fallback content."""
    dispatcher = ToolDispatcher.from_config(
        EngineConfig(openai_api_key=None),
        user_store=user_store,
        usage_store=usage_store,
        notification_service=notification_service,
    )

    response = await dispatcher.dispatch(_request())

    assert dispatcher.client.is_configured is False
    assert response.ai_generated is False
    assert response.output == registry.synthesize("seo-audit", SEO_INPUT)
    assert usage_store.get_all()[0].error_kind == ErrorCode.UPSTREAM_UNAUTHORIZED


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "reply",
    [
        "",
        "I'm sorry, I can't produce that report.",
        "[1, 2, 3]",
        "{}",
        '{"somethingElse": true}',
    ],
)
async def test_unusable_reply_degrades(fake_client, make_dispatcher, usage_store, reply):
    """Empty, non-JSON or section-less replies resolve to fallback content."""
    dispatcher = make_dispatcher(fake_client(response_text=reply))

    response = await dispatcher.dispatch(_request())

    assert response.ai_generated is False
    assert response.output[FALLBACK_MARKER] is False
    assert usage_store.get_all()[0].error_kind == ErrorCode.MALFORMED_OUTPUT


@pytest.mark.asyncio
async def test_reply_wrapped_in_prose_is_recovered(fake_client, make_dispatcher, valid_payload):
    """A JSON object inside surrounding text is still used as AI content."""
    payload = valid_payload("seo-audit", SEO_INPUT)
    reply = f"Here is the audit you asked for:\n{json.dumps(payload)}\nLet me know if you need more."
    dispatcher = make_dispatcher(fake_client(response_text=reply))

    response = await dispatcher.dispatch(_request())

    assert response.ai_generated is True
    assert response.output == payload


@pytest.mark.asyncio
async def test_missing_sections_are_patched(fake_client, make_dispatcher, valid_payload, registry, usage_store):
    """A reply missing some sections keeps its own content and gains fallback sections."""
    payload = valid_payload("seo-audit", SEO_INPUT)
    payload["pageAnalysis"]["title"]["current"] = "Model-written title check"
    del payload["quickWins"]
    payload["recommendations"] = None
    dispatcher = make_dispatcher(fake_client(response_text=json.dumps(payload)))

    response = await dispatcher.dispatch(_request())

    fallback = registry.synthesize("seo-audit", SEO_INPUT)
    assert response.ai_generated is True
    assert response.output["pageAnalysis"]["title"]["current"] == "Model-written title check"
    assert response.output["quickWins"] == fallback["quickWins"]
    assert response.output["recommendations"] == fallback["recommendations"]
    assert FALLBACK_MARKER not in response.output
    assert usage_store.get_all()[0].metadata["patchedSections"] == ["recommendations", "quickWins"]


@pytest.mark.asyncio
@pytest.mark.parametrize("tool_id", ["blog-writing", "ad-copy"])
async def test_discard_policy_tools_degrade_on_missing_section(
    fake_client, make_dispatcher, valid_payload, usage_store, tool_id
):
    """Tools whose sections depend on each other discard partial replies."""
    payload = valid_payload(tool_id)
    payload.pop(next(iter(payload)))
    dispatcher = make_dispatcher(fake_client(response_text=json.dumps(payload)))

    response = await dispatcher.dispatch(_request(tool_id=tool_id, raw_input={}))

    assert response.ai_generated is False
    assert response.output[FALLBACK_MARKER] is False
    assert usage_store.get_all()[0].error_kind == ErrorCode.MALFORMED_OUTPUT


@pytest.mark.asyncio
async def test_reserved_marker_keys_are_stripped_from_model_output(fake_client, make_dispatcher, valid_payload):
    """A model echoing the fallback marker does not make its content look static."""
    payload = valid_payload("seo-audit", SEO_INPUT)
    echoed = {**payload, FALLBACK_MARKER: False, FALLBACK_WARNING_KEY: "copied from the prompt"}
    dispatcher = make_dispatcher(fake_client(response_text=json.dumps(echoed)))

    response = await dispatcher.dispatch(_request())

    assert response.ai_generated is True
    assert response.output == payload


@pytest.mark.asyncio
async def test_expired_trial_is_rejected_before_generation(fake_client, make_dispatcher, usage_store):
    """An expired trial is refused with no model call and no usage written."""
    client = fake_client(response_text="{}")
    dispatcher = make_dispatcher(client)

    with pytest.raises(TrialExpiredError):
        await dispatcher.dispatch(_request(user_id="trial-user"))
    await dispatcher.drain()

    assert client.call_count == 0
    assert usage_store.get_all() == []


@pytest.mark.asyncio
async def test_tool_outside_plan_is_rejected(fake_client, make_dispatcher, usage_store):
    """A starter user asking for a pro tool gets NOT_ENTITLED."""
    client = fake_client()
    dispatcher = make_dispatcher(client)

    with pytest.raises(ToolNotAvailableError) as exc_info:
        await dispatcher.dispatch(_request(tool_id="local-seo", user_id="starter-user", raw_input={}))

    assert exc_info.value.required_plan == "pro"
    assert "ad-copy" in exc_info.value.available_tools
    assert client.call_count == 0
    assert usage_store.get_all() == []


@pytest.mark.asyncio
async def test_identity_limit_rejects_fourth_call_first(fake_client, make_dispatcher, valid_payload, usage_store):
    """The fourth call in a window is rate limited before any other check."""
    client = fake_client(response_text=json.dumps(valid_payload("seo-audit")))
    dispatcher = make_dispatcher(client)

    for _ in range(3):
        await dispatcher.dispatch(_request())
    with pytest.raises(RateLimitedError) as exc_info:
        # Unknown tool too; the limiter answers first
        await dispatcher.dispatch(_request(tool_id="time-machine"))

    assert exc_info.value.scope == "identity"
    assert exc_info.value.retry_after_seconds > 0
    assert client.call_count == 3
    assert len(usage_store.get_all()) == 3


@pytest.mark.asyncio
async def test_rejected_calls_still_consume_identity_slots(fake_client, make_dispatcher):
    """Limiter slots are taken before lookup, so rejected calls count."""
    dispatcher = make_dispatcher(fake_client())

    for _ in range(3):
        with pytest.raises(UserNotFoundError):
            await dispatcher.dispatch(_request(user_id="ghost"))
    with pytest.raises(RateLimitedError):
        await dispatcher.dispatch(_request(user_id="ghost"))


@pytest.mark.asyncio
async def test_global_limit_spans_identities(fake_client, make_dispatcher, valid_payload, user_store):
    """The global limiter caps upstream attempts across all users."""
    config = EngineConfig(
        identity_limiter=LimiterConfig(max_count=5),
        global_limiter=LimiterConfig(max_count=2),
    )
    client = fake_client(response_text=json.dumps(valid_payload("seo-audit")))
    dispatcher = make_dispatcher(client, config=config)

    await dispatcher.dispatch(_request(user_id="pro-user"))
    await dispatcher.dispatch(_request(user_id="starter-user"))
    with pytest.raises(RateLimitedError) as exc_info:
        await dispatcher.dispatch(_request(user_id="active-trial-user"))

    assert exc_info.value.scope == "global"


@pytest.mark.asyncio
async def test_anonymous_calls_are_limited_by_ip(fake_client, make_dispatcher):
    """Without a user id the caller IP keys the identity limiter."""
    dispatcher = make_dispatcher(fake_client())

    for _ in range(3):
        with pytest.raises(AuthenticationRequiredError):
            await dispatcher.dispatch(_request(user_id=None))
    with pytest.raises(RateLimitedError):
        await dispatcher.dispatch(_request(user_id=None))
    with pytest.raises(AuthenticationRequiredError):
        await dispatcher.dispatch(_request(user_id=None, client_ip="198.51.100.2"))


@pytest.mark.asyncio
async def test_unknown_tool_is_rejected(fake_client, make_dispatcher):
    """Unknown tool ids are refused with 404."""
    dispatcher = make_dispatcher(fake_client())

    with pytest.raises(UnknownToolError) as exc_info:
        await dispatcher.dispatch(_request(tool_id="time-machine"))

    assert exc_info.value.http_status == 404


@pytest.mark.asyncio
async def test_missing_required_input_is_rejected(fake_client, make_dispatcher, usage_store):
    """The landing page tool needs a URL before any generation happens."""
    client = fake_client()
    dispatcher = make_dispatcher(client)

    with pytest.raises(InvalidInputError) as exc_info:
        await dispatcher.dispatch(_request(tool_id="landing-page", raw_input={"productName": "Acme"}))

    assert exc_info.value.missing_fields == ["url"]
    assert client.call_count == 0
    assert usage_store.get_all() == []


@pytest.mark.asyncio
async def test_cancellation_is_recorded_without_counting(fake_client, make_dispatcher, usage_store, user_store):
    """A caller hanging up mid-generation leaves an error record and untouched counters."""
    client = fake_client(block=True)
    dispatcher = make_dispatcher(client)

    task = asyncio.create_task(dispatcher.dispatch(_request()))
    await asyncio.wait_for(client.started.wait(), timeout=1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    await dispatcher.drain()

    records = usage_store.get_all()
    assert len(records) == 1
    assert records[0].status == UsageStatus.ERROR
    assert records[0].error_kind == ErrorCode.CANCELLED
    assert records[0].output is None
    assert (await user_store.find_user("pro-user")).usage.total_generations == 0


@pytest.mark.asyncio
async def test_storage_failure_does_not_fail_the_call(fake_client, make_dispatcher, valid_payload):
    """A usage store outage is logged while the caller still gets content."""
    broken_store = AsyncMock()
    broken_store.append = AsyncMock(side_effect=StorageUnavailableError("db down"))
    dispatcher = make_dispatcher(
        fake_client(response_text=json.dumps(valid_payload("seo-audit"))), usage_store=broken_store
    )

    response = await dispatcher.dispatch(_request())

    assert response.ai_generated is True
    assert response.usage.total_generations == 1
    assert broken_store.append.await_count == 3


@pytest.mark.asyncio
async def test_hung_storage_does_not_hold_the_response(fake_client, make_dispatcher, engine_config, valid_payload):
    """Usage store calls that never return time out and the caller still gets content."""

    async def never_returns(record):
        await asyncio.Event().wait()

    hung_store = AsyncMock()
    hung_store.append = AsyncMock(side_effect=never_returns)
    payload = valid_payload("seo-audit", SEO_INPUT)
    config = engine_config.model_copy(update={"storage_timeout_seconds": 0.05})
    dispatcher = make_dispatcher(fake_client(response_text=json.dumps(payload)), config=config, usage_store=hung_store)

    response = await asyncio.wait_for(dispatcher.dispatch(_request()), timeout=2)

    assert response.ai_generated is True
    assert response.output == payload
    assert response.usage.total_generations == 1
    assert hung_store.append.await_count == 3


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_call(fake_client, make_dispatcher, valid_payload):
    """A failing notification collaborator never reaches the caller."""
    broken_notifications = AsyncMock()
    broken_notifications.regenerate = AsyncMock(side_effect=RuntimeError("queue full"))
    dispatcher = make_dispatcher(
        fake_client(response_text=json.dumps(valid_payload("seo-audit"))),
        notification_service=broken_notifications,
    )

    response = await dispatcher.dispatch(_request())
    await dispatcher.drain()

    assert response.ai_generated is True
    broken_notifications.regenerate.assert_awaited_once_with("pro-user")


@pytest.mark.asyncio
async def test_list_tools_marks_access(fake_client, make_dispatcher):
    """The catalogue view flags which tools the user may call."""
    dispatcher = make_dispatcher(fake_client())

    listing = await dispatcher.list_tools("active-trial-user")

    access = {tool.id: tool.has_access for tool in listing.tools}
    assert len(access) == 13
    assert [tool_id for tool_id, allowed in access.items() if allowed] == ["seo-audit", "social-media"]
    assert listing.subscription.plan == "free_trial"
    assert listing.trial_days_remaining == 5
