"""Character Service — Core ↔ DB wiring, EventBus notifications

Every player action follows the same path:
load → pure Core transition → clamp vitals → save → emit event.
The saved (authoritative) character replaces the one Core produced.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, replace
from typing import Optional, TypeVar

from sqlalchemy.orm import Session

from armory.config import settings
from armory.core.character.attributes import (
    AllocationResult,
    allocate_attributes,
    reset_attributes,
)
from armory.core.character.equipment import (
    EquipResult,
    equip,
    load_loadout,
    rename_loadout,
    save_loadout,
    unequip,
)
from armory.core.character.models import Attributes, Character, Race, Resources
from armory.core.character.stats import DerivedCharacter, clamp_vitals, derive_stats
from armory.core.event_bus import EventBus, GameEvent
from armory.core.event_types import EventTypes
from armory.core.failures import FailureReason
from armory.core.item.economy import DisenchantResult, UpgradeResult, disenchant, upgrade
from armory.core.item.models import EquipmentSlot, ItemInstance, RolledAffixStats
from armory.core.item.registry import AffixRegistry, TemplateRegistry, template_to_dict
from armory.core.logging import get_logger
from armory.db.models import GameDataModel
from armory.db.repository import CharacterRepository

logger = get_logger(__name__)

SOURCE = "character_service"

R = TypeVar("R", EquipResult, UpgradeResult, DisenchantResult, AllocationResult)


class CharacterNotFoundError(LookupError):
    """No stored character with the requested id."""


@dataclass(frozen=True)
class GrantResult:
    success: bool
    character: Optional[Character] = None
    failure: Optional[FailureReason] = None
    item: Optional[ItemInstance] = None


class CharacterService:
    """Character actions + persistence"""

    def __init__(
        self,
        db: Session,
        event_bus: EventBus,
        registry: TemplateRegistry,
        rng: Optional[random.Random] = None,
        max_inventory: int = settings.MAX_INVENTORY,
        max_upgrade_level: int = settings.MAX_UPGRADE_LEVEL,
        affixes: Optional[AffixRegistry] = None,
    ):
        self._db = db
        self._repo = CharacterRepository(db)
        self._bus = event_bus
        self._registry = registry
        self._affixes = affixes
        self._rng = rng if rng is not None else random.Random(settings.RNG_SEED)
        self._max_inventory = max_inventory
        self._max_upgrade_level = max_upgrade_level

    # === Catalog ===

    def sync_templates_to_db(self) -> int:
        """Registry → game_data table. Called at startup. Returns template count."""
        records = [template_to_dict(t) for t in self._registry.get_all()]
        row = self._db.get(GameDataModel, "itemTemplates")
        if row is None:
            self._db.add(GameDataModel(key="itemTemplates", data=records))
        else:
            row.data = records
        self._db.commit()
        logger.info("Synced %d item templates to DB", len(records))
        return len(records)

    # === Queries ===

    def get_character(self, character_id: str) -> Optional[Character]:
        return self._repo.get(character_id)

    def get_derived_stats(self, character_id: str) -> DerivedCharacter:
        return derive_stats(self._load(character_id), self._registry.get)

    def display_name(self, item: ItemInstance) -> str:
        """"Sharp Rusty Sword of the Bear"; template id when the template is gone."""
        template = self._registry.get(item.template_id)
        base_name = template.name if template is not None else item.template_id
        if self._affixes is None:
            return base_name
        return self._affixes.display_name(base_name, item.prefix_id, item.suffix_id)

    # === Lifecycle ===

    def create_character(
        self,
        name: str,
        race: Race,
        attributes: Optional[Attributes] = None,
        stat_points: int = 0,
        gold: int = 0,
    ) -> Character:
        """First spawn. Vitals start full. Raises ValueError on a taken name."""
        if self._repo.name_taken(name):
            raise ValueError(f"Character name already taken: {name}")

        character = Character(
            character_id=str(uuid.uuid4()),
            name=name,
            race=race,
            attributes=attributes or Attributes(),
            stat_points=stat_points,
            resources=Resources(gold=gold),
        )
        saved = self._repo.save(character)
        self._emit(
            EventTypes.CHARACTER_CREATED,
            {"character_id": saved.character_id, "race": race.value},
        )
        logger.info("Created character %s (%s)", saved.name, saved.character_id)
        return saved

    def grant_item(
        self,
        character_id: str,
        template_id: str,
        upgrade_level: int = 0,
        rolled_prefix: Optional[RolledAffixStats] = None,
        rolled_suffix: Optional[RolledAffixStats] = None,
        prefix_id: Optional[str] = None,
        suffix_id: Optional[str] = None,
    ) -> GrantResult:
        """Put a freshly generated item into the inventory (loot, trader, admin).

        Affix ids are checked against the affix catalog when one is configured.
        """
        character = self._load(character_id)
        if self._registry.get(template_id) is None:
            return GrantResult(success=False, failure=FailureReason.TEMPLATE_NOT_FOUND)
        if not 0 <= upgrade_level <= self._max_upgrade_level:
            return GrantResult(success=False, failure=FailureReason.INVALID_UPGRADE_LEVEL)
        if self._affixes is not None and any(
            affix_id is not None and self._affixes.get(affix_id) is None
            for affix_id in (prefix_id, suffix_id)
        ):
            return GrantResult(success=False, failure=FailureReason.AFFIX_NOT_FOUND)
        if len(character.inventory) >= self._max_inventory:
            return GrantResult(success=False, failure=FailureReason.INVENTORY_FULL)

        item = ItemInstance(
            unique_id=str(uuid.uuid4()),
            template_id=template_id,
            upgrade_level=upgrade_level,
            prefix_id=prefix_id,
            suffix_id=suffix_id,
            rolled_prefix=rolled_prefix,
            rolled_suffix=rolled_suffix,
        )
        saved = self._commit(replace(character, inventory=character.inventory + (item,)))
        self._emit(
            EventTypes.ITEM_GRANTED,
            {
                "character_id": character_id,
                "unique_id": item.unique_id,
                "template_id": template_id,
            },
        )
        return GrantResult(success=True, character=saved, item=item)

    # === Equipment ===

    def equip(self, character_id: str, unique_id: str) -> EquipResult:
        result = equip(
            self._load(character_id),
            unique_id,
            self._registry.get,
            capacity=self._max_inventory,
        )
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.ITEM_EQUIPPED,
                {
                    "character_id": character_id,
                    "unique_id": unique_id,
                    "slot": result.slot.value,
                    "displaced": [i.unique_id for i in result.displaced],
                },
            )
        return result

    def unequip(
        self, character_id: str, unique_id: str, slot: EquipmentSlot
    ) -> EquipResult:
        result = unequip(
            self._load(character_id), unique_id, slot, capacity=self._max_inventory
        )
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.ITEM_UNEQUIPPED,
                {"character_id": character_id, "unique_id": unique_id, "slot": slot.value},
            )
        return result

    # === Loadouts ===

    def save_loadout(
        self, character_id: str, loadout_id: int, name: Optional[str] = None
    ) -> EquipResult:
        result = save_loadout(self._load(character_id), loadout_id, name)
        result = self._persist(result)
        self._emit(
            EventTypes.LOADOUT_SAVED,
            {"character_id": character_id, "loadout_id": loadout_id},
        )
        return result

    def rename_loadout(
        self, character_id: str, loadout_id: int, name: str
    ) -> EquipResult:
        result = rename_loadout(self._load(character_id), loadout_id, name)
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.LOADOUT_RENAMED,
                {"character_id": character_id, "loadout_id": loadout_id, "name": name},
            )
        return result

    def load_loadout(self, character_id: str, loadout_id: int) -> EquipResult:
        result = load_loadout(
            self._load(character_id), loadout_id, capacity=self._max_inventory
        )
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.LOADOUT_LOADED,
                {"character_id": character_id, "loadout_id": loadout_id},
            )
        return result

    # === Blacksmith ===

    def upgrade(self, character_id: str, unique_id: str) -> UpgradeResult:
        result = upgrade(
            self._load(character_id),
            unique_id,
            self._registry.get,
            self._rng,
            max_level=self._max_upgrade_level,
        )
        if result.success:
            result = self._persist(result)
            event_type = (
                EventTypes.ITEM_UPGRADED if result.upgraded else EventTypes.ITEM_DESTROYED
            )
            self._emit(
                event_type,
                {
                    "character_id": character_id,
                    "unique_id": unique_id,
                    "level": result.new_level,
                    "gold_cost": result.gold_cost,
                },
            )
        return result

    def disenchant(self, character_id: str, unique_id: str) -> DisenchantResult:
        result = disenchant(
            self._load(character_id), unique_id, self._registry.get, self._rng
        )
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.ITEM_DISENCHANTED,
                {
                    "character_id": character_id,
                    "unique_id": unique_id,
                    "essence_type": result.essence_type.value,
                    "amount": result.amount,
                },
            )
        return result

    # === Attributes ===

    def allocate_attributes(
        self, character_id: str, points: dict[str, int]
    ) -> AllocationResult:
        result = allocate_attributes(self._load(character_id), points)
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.ATTRIBUTES_ALLOCATED,
                {"character_id": character_id, "spent": result.spent},
            )
        return result

    def reset_attributes(self, character_id: str) -> AllocationResult:
        result = reset_attributes(self._load(character_id))
        if result.success:
            result = self._persist(result)
            self._emit(
                EventTypes.ATTRIBUTES_RESET,
                {
                    "character_id": character_id,
                    "refunded": result.refunded,
                    "gold_cost": result.gold_cost,
                },
            )
        return result

    # === Internals ===

    def _load(self, character_id: str) -> Character:
        character = self._repo.get(character_id)
        if character is None:
            raise CharacterNotFoundError(f"Character not found: {character_id}")
        return character

    def _commit(self, character: Character) -> Character:
        """Clamp vitals to the new maxima, then store. Returns the stored copy."""
        derived = derive_stats(character, self._registry.get)
        return self._repo.save(clamp_vitals(character, derived))

    def _persist(self, result: R) -> R:
        return replace(result, character=self._commit(result.character))

    def _emit(self, event_type: str, data: dict) -> None:
        self._bus.emit(GameEvent(event_type=event_type, data=data, source=SOURCE))
        # one player action = one event chain
        self._bus.reset_chain()
