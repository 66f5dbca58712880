"""FastAPI application entrypoint."""

import random
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from armory.api.catalog import router as catalog_router
from armory.api.characters import router as characters_router
from armory.api.health import router as health_router
from armory.config import settings
from armory.core.event_bus import EventBus
from armory.core.item.registry import AffixRegistry, TemplateRegistry
from armory.core.logging import get_logger, setup_logging
from armory.db.database import SessionLocal, engine as db_engine
from armory.db.models import Base
from armory.services.activity_log import ActivityLogService
from armory.services.character_service import CharacterService

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)

    logger.info("Loading item catalog...")
    template_registry = TemplateRegistry()
    template_registry.load_from_json(settings.ITEM_TEMPLATES_PATH)
    affix_registry = AffixRegistry()
    affix_registry.load_from_json(settings.AFFIXES_PATH)

    app.state.template_registry = template_registry
    app.state.affix_registry = affix_registry
    app.state.event_bus = EventBus()
    app.state.activity_log = ActivityLogService(SessionLocal, app.state.event_bus)
    app.state.rng = random.Random(settings.RNG_SEED)

    db_session = SessionLocal()
    try:
        CharacterService(
            db=db_session,
            event_bus=app.state.event_bus,
            registry=template_registry,
        ).sync_templates_to_db()
    finally:
        db_session.close()
    logger.info("Catalog ready (%d templates).", template_registry.count())

    yield

    logger.info("Shutting down...")
    app.state.activity_log.close()


app = FastAPI(title="Armory", lifespan=lifespan)

app.include_router(health_router)
app.include_router(characters_router)
app.include_router(catalog_router)
