"""Tool endpoints."""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from contentengine.api.deps import ClientIpDep, DispatcherDep, UserIdDep
from contentengine.models.requests import GenerationRequest

logger = logging.getLogger(__name__)

router = APIRouter()


class GenerateBody(BaseModel):
    """Request body for a tool invocation."""

    input: dict[str, Any] = Field(default_factory=dict, description="Tool-specific input values")


@router.get("")
async def list_tools(dispatcher: DispatcherDep, user_id: UserIdDep) -> dict[str, Any]:
    """List every tool with the caller's access to it."""
    listing = await dispatcher.list_tools(user_id)
    return listing.model_dump(by_alias=True, mode="json")


@router.get("/health")
async def health(dispatcher: DispatcherDep) -> dict[str, Any]:
    """Liveness plus whether a model credential is configured."""
    return {"status": "ok", "upstreamConfigured": dispatcher.client.is_configured}


@router.post("/{tool_id}/generate")
async def generate(
    tool_id: str,
    body: GenerateBody,
    dispatcher: DispatcherDep,
    user_id: UserIdDep,
    client_ip: ClientIpDep,
) -> dict[str, Any]:
    """Run a tool. Rejections are rendered by the exception handlers."""
    request = GenerationRequest(tool_id=tool_id, user_id=user_id, client_ip=client_ip, input=body.input)
    response = await dispatcher.dispatch(request)
    return response.model_dump(by_alias=True, mode="json")
