"""Activity log — persists every character event delivered by the EventBus

One instance lives for the whole application (registered at startup).
Handlers run inside the emitting request, so each write opens its own
short session from the injected factory.
"""

from typing import Any, Callable

from sqlalchemy.orm import Session

from armory.core.event_bus import EventBus, GameEvent
from armory.core.event_types import CHARACTER_EVENTS
from armory.core.logging import get_logger
from armory.db.models import CharacterEventModel

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class ActivityLogService:
    """EventBus subscriber + history queries"""

    def __init__(self, session_factory: Callable[[], Session], event_bus: EventBus):
        self._session_factory = session_factory
        self._bus = event_bus
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        for event_type in CHARACTER_EVENTS:
            self._bus.subscribe(event_type, self._on_character_event)

    def close(self) -> None:
        """Stop listening (shutdown)."""
        for event_type in CHARACTER_EVENTS:
            self._bus.unsubscribe(event_type, self._on_character_event)

    # === Handlers ===

    def _on_character_event(self, event: GameEvent) -> None:
        character_id = event.data.get("character_id")
        if character_id is None:
            logger.warning("Event without character_id skipped: %s", event.event_type)
            return

        db = self._session_factory()
        try:
            db.add(
                CharacterEventModel(
                    character_id=character_id,
                    event_type=event.event_type,
                    source=event.source,
                    data=event.data,
                )
            )
            db.commit()
        finally:
            db.close()

    # === Queries ===

    def history(
        self, character_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[dict[str, Any]]:
        """Most recent events first."""
        db = self._session_factory()
        try:
            rows = (
                db.query(CharacterEventModel)
                .filter(CharacterEventModel.character_id == character_id)
                .order_by(CharacterEventModel.event_id.desc())
                .limit(limit)
                .all()
            )
            return [
                {
                    "event_type": row.event_type,
                    "source": row.source,
                    "data": row.data,
                    "created_at": row.created_at.isoformat(),
                }
                for row in rows
            ]
        finally:
            db.close()
