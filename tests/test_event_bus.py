"""EventBus tests"""

from armory.core.event_bus import EventBus, GameEvent, MAX_DEPTH
from armory.core.event_types import EventTypes


def _event(event_type: str = EventTypes.ITEM_UPGRADED, source: str = "test") -> GameEvent:
    return GameEvent(event_type=event_type, data={"unique_id": "sword-1"}, source=source)


class TestSubscribeEmit:
    def test_basic_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_UPGRADED, received.append)
        bus.emit(_event())
        assert len(received) == 1
        assert received[0].data["unique_id"] == "sword-1"

    def test_handlers_run_in_subscription_order(self):
        bus = EventBus()
        results = []
        bus.subscribe(EventTypes.ITEM_EQUIPPED, lambda e: results.append("audit"))
        bus.subscribe(EventTypes.ITEM_EQUIPPED, lambda e: results.append("cache"))
        bus.emit(_event(EventTypes.ITEM_EQUIPPED))
        assert results == ["audit", "cache"]

    def test_no_handlers(self):
        bus = EventBus()
        bus.emit(_event(EventTypes.ITEM_DISENCHANTED))

    def test_only_matching_type_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_DESTROYED, received.append)
        bus.emit(_event(EventTypes.ITEM_UPGRADED))
        assert received == []

    def test_unsubscribe(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_GRANTED, received.append)
        bus.unsubscribe(EventTypes.ITEM_GRANTED, received.append)
        bus.emit(_event(EventTypes.ITEM_GRANTED))
        assert received == []

    def test_unsubscribe_unknown_handler(self):
        """Warns only"""
        bus = EventBus()
        bus.subscribe(EventTypes.ITEM_GRANTED, lambda e: None)
        bus.unsubscribe(EventTypes.ITEM_GRANTED, lambda e: None)
        assert bus.handler_count == 1


class TestDepthLimit:
    def test_max_depth_stops_runaway_chain(self):
        bus = EventBus()
        call_count = 0

        def relay(event: GameEvent):
            nonlocal call_count
            call_count += 1
            # distinct source per hop so only the depth guard applies
            bus.emit(_event("chain", source=f"relay_{call_count}"))

        bus.subscribe("chain", relay)
        bus.emit(_event("chain", source="origin"))

        assert call_count == MAX_DEPTH


class TestDuplicatePrevention:
    def test_same_source_same_event_blocked(self):
        bus = EventBus()
        count = 0

        def handler(event: GameEvent):
            nonlocal count
            count += 1
            bus.emit(_event(source="character_service"))

        bus.subscribe(EventTypes.ITEM_UPGRADED, handler)
        bus.emit(_event(source="character_service"))
        assert count == 1

    def test_different_source_allowed(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_UPGRADED, lambda e: received.append(e.source))
        bus.emit(_event(source="character_service"))
        bus.emit(_event(source="admin"))
        assert received == ["character_service", "admin"]


class TestResetChain:
    def test_reset_allows_re_emit(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.ITEM_EQUIPPED, received.append)
        bus.emit(_event(EventTypes.ITEM_EQUIPPED))
        bus.reset_chain()
        bus.emit(_event(EventTypes.ITEM_EQUIPPED))
        assert len(received) == 2


class TestHandlerError:
    def test_handler_exception_doesnt_stop_others(self):
        bus = EventBus()
        results = []

        def bad_handler(e):
            raise ValueError("boom")

        bus.subscribe(EventTypes.ITEM_DESTROYED, bad_handler)
        bus.subscribe(EventTypes.ITEM_DESTROYED, lambda e: results.append("ok"))
        bus.emit(_event(EventTypes.ITEM_DESTROYED))
        assert results == ["ok"]


class TestClear:
    def test_clear_removes_all(self):
        bus = EventBus()
        bus.subscribe(EventTypes.ITEM_GRANTED, lambda e: None)
        bus.subscribe(EventTypes.ITEM_EQUIPPED, lambda e: None)
        assert bus.handler_count == 2
        bus.clear()
        assert bus.handler_count == 0
