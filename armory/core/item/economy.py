"""Blacksmith economy — upgrade and disenchant

Every random draw goes through the injected rng's random(), so callers
(and tests) control both outcome branches.

Both actions consume their costs regardless of outcome:
- a failed upgrade destroys the item, costs are still paid
- a legendary disenchant can yield nothing, gold and item are still consumed
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, replace
from typing import Callable, Optional

from armory.core.character.models import Character, CharacterClass
from armory.core.character.stats import round_half_up
from armory.core.failures import FailureReason

from .models import (
    ESSENCE_BY_RARITY,
    EquipmentSlot,
    EssenceType,
    ItemInstance,
    ItemRarity,
    ItemTemplate,
)

logger = logging.getLogger(__name__)

TemplateLookup = Callable[[str], Optional[ItemTemplate]]

MAX_UPGRADE_LEVEL = 10
DISENCHANT_COST_RATE = 0.1
UPGRADE_COST_RATE = 0.5

RARITY_COST_MULTIPLIER: dict[ItemRarity, float] = {
    ItemRarity.COMMON: 1,
    ItemRarity.UNCOMMON: 1.5,
    ItemRarity.RARE: 2.5,
    ItemRarity.EPIC: 4,
    ItemRarity.LEGENDARY: 8,
}

LEGENDARY_YIELD_CHANCE = 0.5
ENGINEER_DOUBLE_CHANCE = 0.5


@dataclass(frozen=True)
class DisenchantResult:
    success: bool
    character: Optional[Character] = None
    failure: Optional[FailureReason] = None
    essence_type: Optional[EssenceType] = None
    amount: int = 0  # 0 = the roll produced nothing
    gold_cost: int = 0


@dataclass(frozen=True)
class UpgradeResult:
    """success means the attempt was paid for; upgraded is the roll outcome."""

    success: bool
    character: Optional[Character] = None
    failure: Optional[FailureReason] = None
    upgraded: bool = False
    new_level: int = 0
    gold_cost: int = 0
    essence_type: Optional[EssenceType] = None
    slot: Optional[EquipmentSlot] = None  # None = inventory


# ── Pricing ───────────────────────────────────────────────────


def disenchant_cost(template: ItemTemplate) -> int:
    return round_half_up(template.value * DISENCHANT_COST_RATE)


def upgrade_cost(template: ItemTemplate, next_level: int) -> int:
    """floor(value * 0.5 * next_level * rarity multiplier)"""
    multiplier = RARITY_COST_MULTIPLIER.get(template.rarity, 1)
    return math.floor(template.value * UPGRADE_COST_RATE * next_level * multiplier)


def upgrade_success_chance(current_level: int) -> int:
    """Percent. 100 at +0, -10 per level, never below 10."""
    return max(10, 100 - current_level * 10)


def roll_essence_yield(rarity: ItemRarity, rng: random.Random) -> int:
    """Essence units produced by disenchanting an item of `rarity`."""
    if rarity == ItemRarity.COMMON:
        return int(rng.random() * 4) + 1
    if rarity in (ItemRarity.UNCOMMON, ItemRarity.RARE):
        return int(rng.random() * 2) + 1
    if rarity == ItemRarity.EPIC:
        return 1
    if rarity == ItemRarity.LEGENDARY:
        return 1 if rng.random() < LEGENDARY_YIELD_CHANCE else 0
    return 0


# ── Disenchant ────────────────────────────────────────────────


def disenchant(
    character: Character,
    unique_id: str,
    get_template: TemplateLookup,
    rng: random.Random,
) -> DisenchantResult:
    """Destroy an inventory item for essence of its rarity tier."""
    index = character.inventory_index(unique_id)
    if index is None:
        return DisenchantResult(success=False, failure=FailureReason.ITEM_NOT_FOUND)
    item = character.inventory[index]
    if item.is_borrowed:
        return DisenchantResult(success=False, failure=FailureReason.ITEM_BORROWED)

    template = get_template(item.template_id)
    if template is None:
        return DisenchantResult(success=False, failure=FailureReason.TEMPLATE_NOT_FOUND)

    essence_type = ESSENCE_BY_RARITY.get(template.rarity)
    if essence_type is None:
        return DisenchantResult(success=False, failure=FailureReason.NO_ESSENCE_TIER)

    cost = disenchant_cost(template)
    if character.resources.gold < cost:
        return DisenchantResult(
            success=False, failure=FailureReason.INSUFFICIENT_CURRENCY
        )

    amount = roll_essence_yield(template.rarity, rng)
    if (
        character.character_class == CharacterClass.ENGINEER
        and rng.random() < ENGINEER_DOUBLE_CHANCE
    ):
        amount *= 2

    resources = character.resources.add_gold(-cost)
    if amount > 0:
        resources = resources.add_essence(essence_type, amount)

    updated = replace(
        character,
        inventory=character.inventory[:index] + character.inventory[index + 1 :],
        resources=resources,
    )

    logger.info(
        "Disenchanted %s (%s): %d x %s for %d gold",
        unique_id,
        template.rarity.value,
        amount,
        essence_type.value,
        cost,
    )
    return DisenchantResult(
        success=True,
        character=updated,
        essence_type=essence_type,
        amount=amount,
        gold_cost=cost,
    )


# ── Upgrade ───────────────────────────────────────────────────


def _put_item(
    character: Character, slot: Optional[EquipmentSlot], item: Optional[ItemInstance], unique_id: str
) -> Character:
    """Replace (or remove, when item is None) the owned item `unique_id`."""
    if slot is None:
        if item is None:
            inventory = tuple(i for i in character.inventory if i.unique_id != unique_id)
        else:
            inventory = tuple(
                item if i.unique_id == unique_id else i for i in character.inventory
            )
        return replace(character, inventory=inventory)

    equipment = dict(character.equipment)
    equipment[slot] = item
    return replace(character, equipment=equipment)


def upgrade(
    character: Character,
    unique_id: str,
    get_template: TemplateLookup,
    rng: random.Random,
    max_level: int = MAX_UPGRADE_LEVEL,
) -> UpgradeResult:
    """Attempt to raise an item's upgrade level by one.

    The item may be in the inventory or equipped. Gold and one essence of
    the item's rarity are paid up front; a failed roll destroys the item.
    """
    located = character.locate_item(unique_id)
    if located is None:
        return UpgradeResult(success=False, failure=FailureReason.ITEM_NOT_FOUND)
    slot, item = located
    if item.is_borrowed:
        return UpgradeResult(success=False, failure=FailureReason.ITEM_BORROWED)

    current_level = item.upgrade_level
    next_level = current_level + 1
    if next_level > max_level:
        return UpgradeResult(success=False, failure=FailureReason.MAX_LEVEL_REACHED)

    template = get_template(item.template_id)
    if template is None:
        return UpgradeResult(success=False, failure=FailureReason.TEMPLATE_NOT_FOUND)

    essence_type = ESSENCE_BY_RARITY.get(template.rarity)
    if essence_type is None:
        return UpgradeResult(success=False, failure=FailureReason.NO_ESSENCE_TIER)

    gold_cost = upgrade_cost(template, next_level)
    resources = character.resources
    if resources.gold < gold_cost or resources.essence(essence_type) < 1:
        return UpgradeResult(success=False, failure=FailureReason.INSUFFICIENT_CURRENCY)

    chance = upgrade_success_chance(current_level)
    upgraded = rng.random() * 100 < chance
    if not upgraded and character.character_class == CharacterClass.BLACKSMITH:
        upgraded = rng.random() * 100 < chance

    paid = replace(
        character,
        resources=resources.add_gold(-gold_cost).add_essence(essence_type, -1),
    )

    if upgraded:
        updated = _put_item(paid, slot, replace(item, upgrade_level=next_level), unique_id)
        logger.info("Upgraded %s to +%d", unique_id, next_level)
    else:
        updated = _put_item(paid, slot, None, unique_id)
        logger.info(
            "Upgrade of %s to +%d failed (chance %d%%), item destroyed",
            unique_id,
            next_level,
            chance,
        )

    return UpgradeResult(
        success=True,
        character=updated,
        upgraded=upgraded,
        new_level=next_level,
        gold_cost=gold_cost,
        essence_type=essence_type,
        slot=slot,
    )
