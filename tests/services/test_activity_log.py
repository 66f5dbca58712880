"""ActivityLogService: EventBus subscriber persisting character history"""

import pytest
from sqlalchemy.orm import sessionmaker

from armory.core.character.models import Race
from armory.core.event_bus import EventBus, GameEvent
from armory.core.event_types import CHARACTER_EVENTS, EventTypes
from armory.db.models import CharacterEventModel
from armory.services.activity_log import ActivityLogService
from armory.services.character_service import CharacterService


@pytest.fixture()
def setup(db_session, template_registry, make_rng):
    bus = EventBus()
    session_factory = sessionmaker(bind=db_session.get_bind())
    log = ActivityLogService(session_factory, bus)
    service = CharacterService(db_session, bus, template_registry, rng=make_rng(0.0))
    return service, log, bus, db_session


class TestRecording:
    def test_subscribes_to_every_character_event(self, setup) -> None:
        service, log, bus, db = setup
        assert bus.handler_count == len(CHARACTER_EVENTS)

    def test_actions_are_recorded(self, setup) -> None:
        service, log, bus, db = setup
        cid = service.create_character("Hilde", Race.DWARF).character_id
        cap = service.grant_item(cid, "leather_cap").item
        service.equip(cid, cap.unique_id)

        rows = db.query(CharacterEventModel).order_by(CharacterEventModel.event_id).all()
        assert [r.event_type for r in rows] == [
            EventTypes.CHARACTER_CREATED,
            EventTypes.ITEM_GRANTED,
            EventTypes.ITEM_EQUIPPED,
        ]
        assert all(r.character_id == cid for r in rows)
        assert rows[2].data["slot"] == "head"
        assert rows[0].source == "character_service"

    def test_rejected_action_not_recorded(self, setup) -> None:
        service, log, bus, db = setup
        cid = service.create_character("Hilde", Race.DWARF).character_id
        service.grant_item(cid, "no_such_template")
        assert [e["event_type"] for e in log.history(cid)] == [EventTypes.CHARACTER_CREATED]

    def test_event_without_character_skipped(self, setup) -> None:
        service, log, bus, db = setup
        bus.emit(GameEvent(EventTypes.ITEM_GRANTED, {"unique_id": "x"}, source="admin"))
        assert db.query(CharacterEventModel).count() == 0

    def test_close_unsubscribes(self, setup) -> None:
        service, log, bus, db = setup
        log.close()
        assert bus.handler_count == 0

        service.create_character("Hilde", Race.DWARF)
        assert db.query(CharacterEventModel).count() == 0


class TestHistory:
    def test_newest_first(self, setup) -> None:
        service, log, bus, db = setup
        cid = service.create_character("Hilde", Race.DWARF, stat_points=1).character_id
        service.allocate_attributes(cid, {"strength": 1})
        service.reset_attributes(cid)

        history = log.history(cid)
        assert [e["event_type"] for e in history] == [
            EventTypes.ATTRIBUTES_RESET,
            EventTypes.ATTRIBUTES_ALLOCATED,
            EventTypes.CHARACTER_CREATED,
        ]
        assert history[0]["data"]["refunded"] == 1
        assert history[0]["created_at"]

    def test_limit(self, setup) -> None:
        service, log, bus, db = setup
        cid = service.create_character("Hilde", Race.DWARF).character_id
        for _ in range(3):
            service.grant_item(cid, "leather_cap")
        assert len(log.history(cid, limit=2)) == 2

    def test_scoped_to_character(self, setup) -> None:
        service, log, bus, db = setup
        first = service.create_character("Hilde", Race.DWARF).character_id
        second = service.create_character("Bria", Race.GNOME).character_id
        service.grant_item(second, "leather_cap")

        assert len(log.history(first)) == 1
        assert len(log.history(second)) == 2
