"""Item domain models (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ItemRarity(str, Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


class ItemCategory(str, Enum):
    WEAPON = "Weapon"
    ARMOR = "Armor"
    JEWELRY = "Jewelry"
    CONSUMABLE = "Consumable"


class EquipmentSlot(str, Enum):
    HEAD = "head"
    NECK = "neck"
    CHEST = "chest"
    HANDS = "hands"
    WAIST = "waist"
    LEGS = "legs"
    FEET = "feet"
    RING_1 = "ring1"
    RING_2 = "ring2"
    MAIN_HAND = "mainHand"
    OFF_HAND = "offHand"
    TWO_HAND = "twoHand"


# Template slot values that are not a concrete EquipmentSlot
RING_SLOT = "ring"
CONSUMABLE_SLOT = "consumable"


class EssenceType(str, Enum):
    COMMON = "commonEssence"
    UNCOMMON = "uncommonEssence"
    RARE = "rareEssence"
    EPIC = "epicEssence"
    LEGENDARY = "legendaryEssence"


ESSENCE_BY_RARITY: dict[ItemRarity, EssenceType] = {
    ItemRarity.COMMON: EssenceType.COMMON,
    ItemRarity.UNCOMMON: EssenceType.UNCOMMON,
    ItemRarity.RARE: EssenceType.RARE,
    ItemRarity.EPIC: EssenceType.EPIC,
    ItemRarity.LEGENDARY: EssenceType.LEGENDARY,
}


class AffixType(str, Enum):
    PREFIX = "Prefix"
    SUFFIX = "Suffix"


@dataclass(frozen=True)
class ItemTemplate:
    """Catalog entry. Immutable, loaded from item_templates.json."""

    template_id: str  # "iron_sword"
    name: str
    slot: str  # EquipmentSlot value, "ring" or "consumable"
    category: ItemCategory
    rarity: ItemRarity
    value: int  # base trade value, drives upgrade/disenchant costs

    # Requirements
    required_level: int = 1
    required_stats: dict[str, int] = field(default_factory=dict)

    # Bonuses scaled by upgrade level
    stats_bonus: dict[str, int] = field(default_factory=dict)
    damage_min: int = 0
    damage_max: int = 0
    magic_damage_min: int = 0
    magic_damage_max: int = 0
    armor_bonus: int = 0
    max_health_bonus: int = 0
    crit_chance_bonus: float = 0.0  # percent, scaled without rounding

    # Bonuses added at face value
    crit_damage_modifier_bonus: int = 0
    armor_penetration_percent: int = 0
    armor_penetration_flat: int = 0
    life_steal_percent: int = 0
    life_steal_flat: int = 0
    mana_steal_percent: int = 0
    mana_steal_flat: int = 0
    dodge_chance_bonus: float = 0.0

    # Weapon behaviour
    attacks_per_round: Optional[float] = None
    is_magical: bool = False
    is_ranged: bool = False
    mana_cost_min: int = 0
    mana_cost_max: int = 0

    description: str = ""


@dataclass(frozen=True)
class RolledAffixStats:
    """A concrete affix roll, snapshotted onto an item when it is generated."""

    stats_bonus: dict[str, int] = field(default_factory=dict)
    damage_min: int = 0
    damage_max: int = 0
    magic_damage_min: int = 0
    magic_damage_max: int = 0
    armor_bonus: int = 0
    max_health_bonus: int = 0
    crit_chance_bonus: float = 0.0
    crit_damage_modifier_bonus: int = 0
    attacks_per_round_bonus: float = 0.0
    dodge_chance_bonus: float = 0.0
    armor_penetration_percent: int = 0
    armor_penetration_flat: int = 0
    life_steal_percent: int = 0
    life_steal_flat: int = 0
    mana_steal_percent: int = 0
    mana_steal_flat: int = 0


@dataclass(frozen=True)
class ItemInstance:
    """An owned item. Stores only what differs from its template."""

    unique_id: str  # UUID, unique within a character
    template_id: str  # ItemTemplate.template_id
    upgrade_level: int = 0  # 0~10

    prefix_id: Optional[str] = None
    suffix_id: Optional[str] = None
    rolled_prefix: Optional[RolledAffixStats] = None
    rolled_suffix: Optional[RolledAffixStats] = None

    # Guild armory loans cannot be upgraded or disenchanted
    is_borrowed: bool = False
    crafter_name: Optional[str] = None


@dataclass(frozen=True)
class Affix:
    """Affix catalog entry. Display metadata only; rolls live on the instance."""

    affix_id: str
    name: str
    affix_type: AffixType
    required_level: int = 0
