"""
Gym Presence Hub - Backend API
"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from gymhub.config import Config

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from gymhub.training.records import (  # noqa: E402
    InMemoryTrainingRecordSource,
    SqlTrainingRecordSource,
    TrainingRecordSource,
)
from gymhub.ws.hub import PresenceHub  # noqa: E402


def build_record_source() -> TrainingRecordSource:
    """Pick the training records backend from configuration."""
    if Config.TRAINING_SOURCE == "memory":
        logger.info("Using in-memory training records")
        return InMemoryTrainingRecordSource()

    from gymhub.db.session import init_db
    init_db()
    return SqlTrainingRecordSource()


def create_app(
    hub: Optional[PresenceHub] = None,
    records: Optional[TrainingRecordSource] = None,
) -> FastAPI:
    """
    Build the application. The hub is created at startup (unless one is
    passed in), shared through app.state and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Config.log_config()
        app.state.hub = hub or PresenceHub(records or build_record_source())
        logger.info("Presence hub started")
        try:
            yield
        finally:
            await app.state.hub.close()

    app = FastAPI(
        title="Gym Presence Hub",
        description="Real-time presence, training level and notification service",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from gymhub.ws.router import router as ws_router
    from gymhub.api.presence import router as presence_router
    from gymhub.api.notifications import router as notifications_router

    # Include WebSocket router
    app.include_router(ws_router)

    # Include presence and notification routers
    app.include_router(presence_router)
    app.include_router(notifications_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "gymhub"}

    @app.get("/")
    async def root():
        """Root endpoint with API overview."""
        return {
            "message": "Gym Presence Hub API",
            "version": "0.1.0",
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "presence": "/api/presence/users",
                "active_users": "/api/presence/active",
                "notifications": "/api/notifications",
                "websocket": "/ws/presence?userId={user_id}",
            },
        }

    @app.get("/ws/docs")
    async def websocket_docs():
        """WebSocket API documentation (since WebSockets don't appear in OpenAPI/Swagger)."""
        return {
            "title": "WebSocket API Documentation",
            "endpoint": "/ws/presence?userId={user_id}",
            "description": "Presence, training level and notification push channel",
            "connection": {
                "url": "ws://localhost:8000/ws/presence?userId={user_id}",
                "rejected_when": "userId is missing (close code 1008)",
            },
            "server_to_client_events": {
                "ONLINE_USERS_UPDATE": "Full presence snapshot {users: [...]}, sent to everyone",
                "training:level": "{level, progress} for the connected user",
                "notification": "Application-defined payload for targeted users",
                "pong": "Reply to ping",
                "error": "Inbound message could not be processed",
            },
            "client_to_server_messages": {
                "presence:join": {
                    "description": "Announce presence; name defaults to 'User <first 4 chars of id>'",
                    "example": {"type": "presence:join", "userId": "u1", "name": "Alex"},
                },
                "presence:status": {
                    "description": "Change status",
                    "example": {"type": "presence:status", "status": "away"},
                },
                "ping": {
                    "description": "Keepalive ping",
                    "example": {"type": "ping", "ts": 1705532400000},
                },
            },
        }

    return app


app = create_app()
