"""Tests for the HTTP boundary."""

import json
from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient

from contentengine.api import create_app


@pytest.fixture
def make_client(engine_config, user_store, usage_store, notification_service):
    """Factory for started TestClients around an app sharing the fixture stores."""
    with ExitStack() as stack:

        def _make(generation_client, raise_server_exceptions: bool = True) -> TestClient:
            app = create_app(
                engine_config,
                user_store=user_store,
                usage_store=usage_store,
                notification_service=notification_service,
                client=generation_client,
            )
            return stack.enter_context(TestClient(app, raise_server_exceptions=raise_server_exceptions))

        yield _make


def test_generate_returns_tool_response(make_client, fake_client, valid_payload):
    """POST generate returns the camelCase tool response."""
    payload = valid_payload("seo-audit")
    client = make_client(fake_client(response_text=json.dumps(payload)))

    response = client.post(
        "/api/tools/seo-audit/generate",
        json={"input": {"url": "https://example.com"}},
        headers={"X-User-Id": "pro-user"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["aiGenerated"] is True
    assert body["output"] == payload
    assert body["usage"] == {"totalGenerations": 1, "monthlyGenerations": 1}
    assert isinstance(body["processingTimeMs"], int)


def test_degraded_response_is_still_200(make_client, fake_client, upstream_failure):
    """Fallback content is a normal 200 response flagged as not AI generated."""
    client = make_client(fake_client(error=upstream_failure()))

    response = client.post(
        "/api/tools/social-media/generate",
        json={"input": {"businessName": "Acme"}},
        headers={"X-User-Id": "pro-user"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["aiGenerated"] is False
    assert body["output"]["_aiGenerated"] is False


def test_expired_trial_returns_403(make_client, fake_client):
    """An expired trial is rendered as 403 with the trialExpired flag."""
    client = make_client(fake_client())

    response = client.post(
        "/api/tools/seo-audit/generate",
        json={"input": {}},
        headers={"X-User-Id": "trial-user"},
    )

    assert response.status_code == 403
    assert response.json() == {
        "message": "Free trial has expired. Please upgrade to continue using AI tools.",
        "error": "TRIAL_EXPIRED",
        "trialExpired": True,
    }


def test_not_entitled_returns_403_with_available_tools(make_client, fake_client):
    """A tool outside the plan is rendered with the allowed tool list."""
    client = make_client(fake_client())

    response = client.post(
        "/api/tools/local-seo/generate",
        json={"input": {}},
        headers={"X-User-Id": "active-trial-user"},
    )

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "NOT_ENTITLED"
    assert body["availableTools"] == ["seo-audit", "social-media"]
    assert body["requiredPlan"] == "pro"


def test_rate_limit_returns_429_with_retry_after(make_client, fake_client, valid_payload):
    """The fourth call in a minute gets 429 and a Retry-After header."""
    client = make_client(fake_client(response_text=json.dumps(valid_payload("seo-audit"))))
    headers = {"X-User-Id": "pro-user"}

    for _ in range(3):
        assert client.post("/api/tools/seo-audit/generate", json={"input": {}}, headers=headers).status_code == 200
    response = client.post("/api/tools/seo-audit/generate", json={"input": {}}, headers=headers)

    assert response.status_code == 429
    assert response.json()["error"] == "RATE_LIMITED"
    assert int(response.headers["Retry-After"]) >= 1


@pytest.mark.parametrize(
    "path,headers,body,status,code",
    [
        ("/api/tools/time-machine/generate", {"X-User-Id": "pro-user"}, {"input": {}}, 404, "UNKNOWN_TOOL"),
        ("/api/tools/seo-audit/generate", {}, {"input": {}}, 401, "AUTHENTICATION_REQUIRED"),
        ("/api/tools/seo-audit/generate", {"X-User-Id": "ghost"}, {"input": {}}, 404, "USER_NOT_FOUND"),
        ("/api/tools/landing-page/generate", {"X-User-Id": "pro-user"}, {"input": {}}, 400, "INVALID_INPUT"),
    ],
)
def test_rejections_map_to_status_codes(make_client, fake_client, path, headers, body, status, code):
    """Each rejection kind has its own status and error code."""
    client = make_client(fake_client())

    response = client.post(path, json=body, headers=headers)

    assert response.status_code == status
    assert response.json()["error"] == code


def test_missing_body_defaults_to_empty_input(make_client, fake_client, valid_payload):
    """A body without an input field is treated as empty input."""
    client = make_client(fake_client(response_text=json.dumps(valid_payload("seo-audit"))))

    response = client.post("/api/tools/seo-audit/generate", json={}, headers={"X-User-Id": "pro-user"})

    assert response.status_code == 200


def test_list_tools(make_client, fake_client):
    """GET /api/tools lists every tool with per-user access."""
    client = make_client(fake_client())

    response = client.get("/api/tools", headers={"X-User-Id": "starter-user"})

    assert response.status_code == 200
    body = response.json()
    assert len(body["tools"]) == 13
    allowed = [tool["id"] for tool in body["tools"] if tool["hasAccess"]]
    assert allowed == ["seo-audit", "social-media", "blog-writing", "email-marketing", "ad-copy"]
    assert body["subscription"] == {"plan": "starter", "status": "active"}
    assert body["trialDaysRemaining"] is None


def test_health_reports_upstream_configuration(make_client, fake_client):
    """Health shows whether the generation client has a usable credential."""
    assert make_client(fake_client()).get("/api/tools/health").json() == {
        "status": "ok",
        "upstreamConfigured": True,
    }
    assert make_client(fake_client(configured=False)).get("/api/tools/health").json()["upstreamConfigured"] is False


def test_unexpected_error_returns_500(make_client, fake_client):
    """Unhandled exceptions render as a generic INTERNAL_ERROR body."""
    client = make_client(fake_client(), raise_server_exceptions=False)
    client.app.state.dispatcher.list_tools = None  # calling None raises TypeError

    response = client.get("/api/tools", headers={"X-User-Id": "pro-user"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "INTERNAL_ERROR"
    assert body["message"] == "Internal server error"
    assert "errorId" in body
