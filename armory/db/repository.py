"""Character persistence — the engine's only I/O boundary"""

from typing import Optional

from sqlalchemy.orm import Session

from armory.core.character.models import Character
from armory.core.character.serialization import character_from_dict, character_to_dict
from armory.core.logging import get_logger
from armory.db.models import CharacterModel

logger = get_logger(__name__)


class CharacterRepository:
    """Load/store characters as JSON documents.

    save() returns the stored copy read back from the database; callers
    must continue from that value, not from the one they passed in.
    """

    def __init__(self, db: Session):
        self._db = db

    def get(self, character_id: str) -> Optional[Character]:
        orm = self._db.get(CharacterModel, character_id)
        if orm is None:
            return None
        return character_from_dict(orm.data)

    def name_taken(self, name: str) -> bool:
        return (
            self._db.query(CharacterModel).filter(CharacterModel.name == name).first()
            is not None
        )

    def save(self, character: Character) -> Character:
        orm = self._db.get(CharacterModel, character.character_id)
        data = character_to_dict(character)
        if orm is None:
            orm = CharacterModel(
                character_id=character.character_id,
                name=character.name,
                data=data,
            )
            self._db.add(orm)
        else:
            orm.name = character.name
            orm.data = data
            orm.version = orm.version + 1
        self._db.commit()
        self._db.refresh(orm)

        logger.debug("Saved character %s (v%d)", orm.character_id, orm.version)
        return character_from_dict(orm.data)
