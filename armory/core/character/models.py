"""Character domain models

Immutable values: every engine operation returns a new Character built
with dataclasses.replace, so a caller's snapshot is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from armory.core.item.models import EquipmentSlot, EssenceType, ItemInstance


class Race(str, Enum):
    HUMAN = "Human"
    ELF = "Elf"
    ORC = "Orc"
    GNOME = "Gnome"
    DWARF = "Dwarf"


class CharacterClass(str, Enum):
    MAGE = "Mage"
    WARRIOR = "Warrior"
    ROGUE = "Rogue"
    WIZARD = "Wizard"
    HUNTER = "Hunter"
    DRUID = "Druid"
    SHAMAN = "Shaman"
    BERSERKER = "Berserker"
    BLACKSMITH = "Blacksmith"
    DUNGEON_HUNTER = "DungeonHunter"
    THIEF = "Thief"
    ENGINEER = "Engineer"


PRIMARY_ATTRIBUTES: tuple[str, ...] = (
    "strength",
    "agility",
    "accuracy",
    "stamina",
    "intelligence",
    "energy",
)

_ESSENCE_FIELDS: dict[EssenceType, str] = {
    EssenceType.COMMON: "common_essence",
    EssenceType.UNCOMMON: "uncommon_essence",
    EssenceType.RARE: "rare_essence",
    EssenceType.EPIC: "epic_essence",
    EssenceType.LEGENDARY: "legendary_essence",
}


@dataclass(frozen=True)
class Attributes:
    """Six allocatable base attributes"""

    strength: int = 1
    agility: int = 1
    accuracy: int = 1
    stamina: int = 1
    intelligence: int = 1
    energy: int = 1

    def get(self, name: str) -> int:
        if name not in PRIMARY_ATTRIBUTES:
            return 0
        return getattr(self, name)

    def as_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in PRIMARY_ATTRIBUTES}


@dataclass(frozen=True)
class Resources:
    """Gold + five essence tiers"""

    gold: int = 0
    common_essence: int = 0
    uncommon_essence: int = 0
    rare_essence: int = 0
    epic_essence: int = 0
    legendary_essence: int = 0

    def essence(self, essence_type: EssenceType) -> int:
        return getattr(self, _ESSENCE_FIELDS[essence_type])

    def add_essence(self, essence_type: EssenceType, amount: int) -> Resources:
        field_name = _ESSENCE_FIELDS[essence_type]
        return replace(self, **{field_name: getattr(self, field_name) + amount})

    def add_gold(self, amount: int) -> Resources:
        return replace(self, gold=self.gold + amount)


def empty_equipment() -> dict[EquipmentSlot, Optional[ItemInstance]]:
    return {slot: None for slot in EquipmentSlot}


@dataclass(frozen=True)
class Loadout:
    """A saved equipment set: slot → unique_id of the item worn there."""

    loadout_id: int
    name: str
    equipment: dict[EquipmentSlot, Optional[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class Character:
    """Persisted character state.

    current_* vitals of None mean "full" and resolve to the derived maximum.
    equipment always carries every EquipmentSlot key; a character without
    it is a caller bug, not a runtime case.
    """

    character_id: str
    name: str
    race: Race
    level: int = 1
    experience: int = 0
    character_class: Optional[CharacterClass] = None

    attributes: Attributes = field(default_factory=Attributes)
    stat_points: int = 0

    current_health: Optional[int] = None
    current_mana: Optional[int] = None
    current_energy: Optional[int] = None

    equipment: dict[EquipmentSlot, Optional[ItemInstance]] = field(
        default_factory=empty_equipment
    )
    inventory: tuple[ItemInstance, ...] = ()
    resources: Resources = field(default_factory=Resources)

    loadouts: tuple[Loadout, ...] = ()
    resets_used: int = 0

    def inventory_index(self, unique_id: str) -> Optional[int]:
        for i, item in enumerate(self.inventory):
            if item.unique_id == unique_id:
                return i
        return None

    def locate_item(
        self, unique_id: str
    ) -> Optional[tuple[Optional[EquipmentSlot], ItemInstance]]:
        """Find an owned item. Inventory is searched before equipment.

        Returns (slot, item); slot is None for inventory items.
        """
        index = self.inventory_index(unique_id)
        if index is not None:
            return None, self.inventory[index]
        for slot in EquipmentSlot:
            item = self.equipment.get(slot)
            if item is not None and item.unique_id == unique_id:
                return slot, item
        return None

    def equipped_items(self) -> list[tuple[EquipmentSlot, ItemInstance]]:
        return [(slot, item) for slot, item in self.equipment.items() if item is not None]

    def loadout_index(self, loadout_id: int) -> Optional[int]:
        for i, loadout in enumerate(self.loadouts):
            if loadout.loadout_id == loadout_id:
                return i
        return None
