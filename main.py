import logging
from collections.abc import Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from app.config import get_settings
from app.infrastructure.database import SessionLocal, engine, initialize_database
from app.infrastructure.notifications import (
    DeliveryChannel,
    NotificationPublisher,
    build_delivery_channel,
)
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Apply the configured log level to the root logger."""

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise the database on startup and release resources on shutdown."""

    initialize_database()
    yield
    await app.state.notification_publisher.drain()
    engine.dispose()


def create_app(
    channel: DeliveryChannel | None = None,
    *,
    session_factory: Callable[[], Session] | None = None,
) -> FastAPI:
    """Create the FastAPI application and its realtime delivery objects.

    ``channel`` replaces the configured delivery channel, e.g. with a test double.
    ``session_factory`` backs the websocket handler and the unread aggregation.
    """

    settings = get_settings()
    app = FastAPI(title="Crowdwork Notifications", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    delivery_channel = channel or build_delivery_channel(settings)
    app.state.delivery_channel = delivery_channel
    app.state.session_factory = session_factory or SessionLocal
    app.state.notification_publisher = NotificationPublisher(
        delivery_channel, timeout=settings.realtime_push_timeout_seconds
    )
    logger.info("Delivery channel: %s", type(delivery_channel).__name__)

    register_routes(app)
    return app


configure_logging()
app = create_app()
