"""Shared test fixtures."""

import random
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from armory.core.event_bus import EventBus
from armory.core.item.registry import AffixRegistry, TemplateRegistry
from armory.db.database import get_db
from armory.db.models import Base
from armory.main import app
from armory.services.activity_log import ActivityLogService

ITEM_TEMPLATES_PATH = Path("armory/data/item_templates.json")
AFFIXES_PATH = Path("armory/data/affixes.json")

TEST_ENGINE = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


class FixedRandom(random.Random):
    """random() always returns the same value; forces probabilistic branches."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def _fresh_schema():
    """Every test starts from empty tables."""
    Base.metadata.create_all(TEST_ENGINE)
    yield
    Base.metadata.drop_all(TEST_ENGINE)


@pytest.fixture()
def make_rng():
    """Factory for a forced random source: make_rng(0.0) always rolls lowest."""
    return FixedRandom


@pytest.fixture()
def template_registry() -> TemplateRegistry:
    registry = TemplateRegistry()
    registry.load_from_json(ITEM_TEMPLATES_PATH)
    return registry


@pytest.fixture()
def client(template_registry: TemplateRegistry) -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database.

    Upgrade/disenchant rolls always take the lowest value (upgrade succeeds).
    """
    affix_registry = AffixRegistry()
    affix_registry.load_from_json(AFFIXES_PATH)
    bus = EventBus()

    app.state.template_registry = template_registry
    app.state.affix_registry = affix_registry
    app.state.event_bus = bus
    app.state.activity_log = ActivityLogService(TestSession, bus)
    app.state.rng = FixedRandom(0.0)
    return TestClient(app)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()
