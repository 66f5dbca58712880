"""EventBus - event delivery between services

Rules:
- services never import each other; they talk through events
- events carry identifiers, not heavy objects
- propagation depth is limited to MAX_DEPTH
- the same source may not emit the same event twice in one chain
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Set

from armory.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # max propagation depth within one player action


@dataclass
class GameEvent:
    """Event payload

    Args:
        event_type: event name (e.g. "item_upgraded")
        data: event data (ids and small values only)
        source: emitting service
    """

    event_type: str
    data: Dict[str, Any]
    source: str

    # internal tracking, not set by callers
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """Synchronous event bus

    Usage:
        bus = EventBus()
        bus.subscribe("item_upgraded", audit_log.on_item_upgraded)
        bus.emit(GameEvent(event_type="item_upgraded", data={"unique_id": "abc"}, source="character_service"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()  # "source:event_type"

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus subscribe: {event_type} → {handler.__qualname__}")

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    f"EventBus unsubscribe: {event_type} → {handler.__qualname__}"
                )
            except ValueError:
                logger.warning(
                    f"Handler not registered: {event_type} → {handler.__qualname__}"
                )

    def emit(self, event: GameEvent) -> None:
        """Deliver an event to its handlers synchronously.

        Guards:
        1. ignored beyond MAX_DEPTH
        2. ignored if the same source already emitted this type in the chain
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus depth exceeded ({MAX_DEPTH}): "
                f"{event.source}:{event.event_type} dropped"
            )
            return

        chain_key = f"{event.source}:{event.event_type}"
        if chain_key in self._emitted_in_chain:
            logger.warning(f"EventBus duplicate event blocked: {chain_key}")
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = self._handlers.get(event.event_type, [])
        if not handlers:
            logger.debug(f"EventBus: no subscribers for {event.event_type}")
            return

        logger.info(
            f"EventBus emit: {event.event_type} (source={event.source}, "
            f"depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus handler error: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """Called when a player action completes. Clears duplicate tracking."""
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """Drop all subscriptions (tests)"""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
