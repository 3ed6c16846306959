from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nutrition_alerts.application.notifications import (
    NotificationEngineRegistry,
    build_notification_engine,
)
from nutrition_alerts.application.notifications.registry import EngineFactory
from nutrition_alerts.config import get_settings
from nutrition_alerts.infrastructure.database import engine, initialize_database
from nutrition_alerts.interfaces.api.routes import register_routes


def create_app(engine_factory: EngineFactory = build_notification_engine) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the cache tables, then stop every engine on shutdown."""

        initialize_database()
        app.state.notification_engines = NotificationEngineRegistry(engine_factory)
        yield
        await app.state.notification_engines.close_all()
        engine.dispose()

    app = FastAPI(title="Nutrition Alerts", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
