"""FastAPI dependencies."""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from contentengine.services.dispatch_service import ToolDispatcher


def get_dispatcher(request: Request) -> ToolDispatcher:
    """Dispatcher created at application startup."""
    return request.app.state.dispatcher


def get_user_id(x_user_id: Annotated[Optional[str], Header()] = None) -> Optional[str]:
    """Authenticated user id, forwarded by the auth layer in ``X-User-Id``."""
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def get_client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


DispatcherDep = Annotated[ToolDispatcher, Depends(get_dispatcher)]
UserIdDep = Annotated[Optional[str], Depends(get_user_id)]
ClientIpDep = Annotated[Optional[str], Depends(get_client_ip)]
