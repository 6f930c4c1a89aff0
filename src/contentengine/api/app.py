"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from contentengine.api.exception_handlers import setup_exception_handlers
from contentengine.api.routes import router
from contentengine.interfaces import GenerationClient, NotificationService, UsageStore, UserStore
from contentengine.models.config import EngineConfig
from contentengine.services.dispatch_service import ToolDispatcher
from contentengine.services.memory_store import InMemoryUsageStore, InMemoryUserStore
from contentengine.services.notification_service import InMemoryNotificationService

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[EngineConfig] = None,
    *,
    user_store: Optional[UserStore] = None,
    usage_store: Optional[UsageStore] = None,
    notification_service: Optional[NotificationService] = None,
    client: Optional[GenerationClient] = None,
) -> FastAPI:
    """
    Build the HTTP app around a single dispatcher.

    Args:
        config: Engine settings (defaults to ``EngineConfig.from_env()``)
        user_store: User store (defaults to in-memory)
        usage_store: Usage store (defaults to in-memory)
        notification_service: Notification collaborator (defaults to in-memory)
        client: Generation client (defaults to the OpenAI client)

    Returns:
        Configured FastAPI application
    """
    config = config or EngineConfig.from_env()
    user_store = user_store or InMemoryUserStore()
    usage_store = usage_store or InMemoryUsageStore()
    notification_service = notification_service or InMemoryNotificationService(user_store)

    dispatcher = ToolDispatcher.from_config(
        config,
        user_store=user_store,
        usage_store=usage_store,
        notification_service=notification_service,
        client=client,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"🚀 [API] Content engine ready with {len(dispatcher.registry)} tools")
        yield
        await dispatcher.drain()
        logger.info("👋 [API] Background work drained")

    app = FastAPI(title="Content Engine", version="0.1.0", lifespan=lifespan)
    app.state.dispatcher = dispatcher
    setup_exception_handlers(app)
    app.include_router(router, prefix="/api/tools", tags=["tools"])
    return app
