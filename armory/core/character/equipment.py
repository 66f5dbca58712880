"""Equipment slot state machine — equip / unequip, saved loadouts

Requirements are validated against stats derived from the pre-equip
character, so bonuses from currently worn gear count toward requirements.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from armory.core.failures import FailureReason
from armory.core.item.models import (
    CONSUMABLE_SLOT,
    RING_SLOT,
    EquipmentSlot,
    ItemInstance,
    ItemTemplate,
)

from .models import Character, Loadout, empty_equipment
from .stats import DerivedCharacter, TemplateLookup, derive_stats

logger = logging.getLogger(__name__)

DEFAULT_INVENTORY_CAPACITY = 40

_ONE_HANDED = (EquipmentSlot.MAIN_HAND, EquipmentSlot.OFF_HAND)


@dataclass(frozen=True)
class EquipResult:
    """Outcome of an equip/unequip transition.

    On rejection character is None and the caller's value is untouched.
    """

    success: bool
    character: Optional[Character] = None
    failure: Optional[FailureReason] = None
    slot: Optional[EquipmentSlot] = None
    displaced: tuple[ItemInstance, ...] = ()

    @classmethod
    def rejected(cls, reason: FailureReason) -> EquipResult:
        return cls(success=False, failure=reason)


def check_requirements(
    template: ItemTemplate, derived: DerivedCharacter
) -> Optional[FailureReason]:
    """Level and attribute requirements. None when satisfied."""
    if derived.level < template.required_level:
        return FailureReason.INSUFFICIENT_LEVEL
    for stat, required in template.required_stats.items():
        if derived.attributes.get(stat) < required:
            return FailureReason.INSUFFICIENT_ATTRIBUTE
    return None


def resolve_target_slot(
    template: ItemTemplate, equipment: dict[EquipmentSlot, Optional[ItemInstance]]
) -> Optional[EquipmentSlot]:
    """Map a template slot to an equipment slot. None when both rings are taken."""
    if template.slot == RING_SLOT:
        if equipment.get(EquipmentSlot.RING_1) is None:
            return EquipmentSlot.RING_1
        if equipment.get(EquipmentSlot.RING_2) is None:
            return EquipmentSlot.RING_2
        return None
    return EquipmentSlot(template.slot)


def _slots_to_clear(
    target: EquipmentSlot, equipment: dict[EquipmentSlot, Optional[ItemInstance]]
) -> list[EquipmentSlot]:
    slots: list[EquipmentSlot] = []
    if target == EquipmentSlot.TWO_HAND:
        slots.extend(s for s in _ONE_HANDED if equipment.get(s) is not None)
    elif target in _ONE_HANDED and equipment.get(EquipmentSlot.TWO_HAND) is not None:
        slots.append(EquipmentSlot.TWO_HAND)
    if equipment.get(target) is not None and target not in slots:
        slots.append(target)
    return slots


def equip(
    character: Character,
    unique_id: str,
    get_template: TemplateLookup,
    capacity: int = DEFAULT_INVENTORY_CAPACITY,
) -> EquipResult:
    """Move an inventory item into its equipment slot.

    Displaced items (occupied target slot, two-hand vs one-hand swaps)
    go back to the inventory.
    """
    index = character.inventory_index(unique_id)
    if index is None:
        logger.debug("Equip rejected: %s not in inventory", unique_id)
        return EquipResult.rejected(FailureReason.ITEM_NOT_FOUND)
    item = character.inventory[index]

    template = get_template(item.template_id)
    if template is None:
        logger.warning("Equip rejected: template %s missing", item.template_id)
        return EquipResult.rejected(FailureReason.TEMPLATE_NOT_FOUND)
    if template.slot == CONSUMABLE_SLOT:
        return EquipResult.rejected(FailureReason.NOT_EQUIPPABLE)

    reason = check_requirements(template, derive_stats(character, get_template))
    if reason is not None:
        logger.debug("Equip rejected: %s (%s)", unique_id, reason.value)
        return EquipResult.rejected(reason)

    equipment = character.equipment
    target = resolve_target_slot(template, equipment)
    if target is None:
        return EquipResult.rejected(FailureReason.RING_SLOTS_FULL)

    # Off-hand must be removed by the player first; no automatic swap
    if target == EquipmentSlot.TWO_HAND and equipment.get(EquipmentSlot.OFF_HAND) is not None:
        return EquipResult.rejected(FailureReason.TWO_HANDED_CONFLICT)

    to_clear = _slots_to_clear(target, equipment)
    if len(character.inventory) - 1 + len(to_clear) > capacity:
        return EquipResult.rejected(FailureReason.INVENTORY_FULL)

    new_equipment = dict(equipment)
    displaced = []
    for slot in to_clear:
        displaced.append(new_equipment[slot])
        new_equipment[slot] = None
    new_equipment[target] = item

    remaining = character.inventory[:index] + character.inventory[index + 1 :]
    updated = replace(
        character,
        equipment=new_equipment,
        inventory=remaining + tuple(displaced),
    )

    logger.debug(
        "Equipped %s into %s (displaced %d)", unique_id, target.value, len(displaced)
    )
    return EquipResult(
        success=True,
        character=updated,
        slot=target,
        displaced=tuple(displaced),
    )


def unequip(
    character: Character,
    unique_id: str,
    slot: EquipmentSlot,
    capacity: int = DEFAULT_INVENTORY_CAPACITY,
) -> EquipResult:
    """Move the item in `slot` back to the inventory."""
    item = character.equipment.get(slot)
    if item is None or item.unique_id != unique_id:
        return EquipResult.rejected(FailureReason.ITEM_NOT_FOUND)
    if len(character.inventory) >= capacity:
        return EquipResult.rejected(FailureReason.INVENTORY_FULL)

    new_equipment = dict(character.equipment)
    new_equipment[slot] = None
    updated = replace(
        character,
        equipment=new_equipment,
        inventory=character.inventory + (item,),
    )
    logger.debug("Unequipped %s from %s", unique_id, slot.value)
    return EquipResult(success=True, character=updated, slot=slot)


# ── Loadouts ──────────────────────────────────────────────────


def save_loadout(
    character: Character, loadout_id: int, name: Optional[str] = None
) -> EquipResult:
    """Snapshot the current equipment under `loadout_id`, replacing any
    loadout already stored there. Unnamed loadouts get "Loadout <n>"."""
    snapshot = {
        slot: item.unique_id if item is not None else None
        for slot, item in character.equipment.items()
    }
    loadout = Loadout(
        loadout_id=loadout_id,
        name=name or f"Loadout {loadout_id + 1}",
        equipment=snapshot,
    )

    index = character.loadout_index(loadout_id)
    if index is None:
        loadouts = character.loadouts + (loadout,)
    else:
        loadouts = (
            character.loadouts[:index] + (loadout,) + character.loadouts[index + 1 :]
        )
    logger.debug("Saved loadout %d for %s", loadout_id, character.character_id)
    return EquipResult(success=True, character=replace(character, loadouts=loadouts))


def rename_loadout(character: Character, loadout_id: int, name: str) -> EquipResult:
    index = character.loadout_index(loadout_id)
    if index is None:
        return EquipResult.rejected(FailureReason.LOADOUT_NOT_FOUND)
    renamed = replace(character.loadouts[index], name=name)
    loadouts = character.loadouts[:index] + (renamed,) + character.loadouts[index + 1 :]
    return EquipResult(success=True, character=replace(character, loadouts=loadouts))


def load_loadout(
    character: Character,
    loadout_id: int,
    capacity: int = DEFAULT_INVENTORY_CAPACITY,
) -> EquipResult:
    """Re-equip a saved loadout from everything the character owns.

    Items are matched by unique_id across inventory and equipment. Items
    that no longer exist leave their slot empty, and an item named by two
    slots is only worn in the first. Everything not worn goes to the
    inventory, which must fit `capacity`.
    """
    index = character.loadout_index(loadout_id)
    if index is None:
        return EquipResult.rejected(FailureReason.LOADOUT_NOT_FOUND)
    loadout = character.loadouts[index]

    owned = {item.unique_id: item for item in character.inventory}
    for _, item in character.equipped_items():
        owned.setdefault(item.unique_id, item)

    new_equipment = empty_equipment()
    used: set[str] = set()
    for slot, unique_id in loadout.equipment.items():
        item = owned.get(unique_id) if unique_id else None
        if item is None or unique_id in used:
            continue
        new_equipment[slot] = item
        used.add(unique_id)

    displaced = tuple(
        item for _, item in character.equipped_items() if item.unique_id not in used
    )
    inventory = (
        tuple(i for i in character.inventory if i.unique_id not in used) + displaced
    )
    if len(inventory) > capacity:
        return EquipResult.rejected(FailureReason.INVENTORY_FULL)

    logger.debug(
        "Loaded loadout %d for %s (%d worn)",
        loadout_id,
        character.character_id,
        len(used),
    )
    return EquipResult(
        success=True,
        character=replace(character, equipment=new_equipment, inventory=inventory),
        displaced=displaced,
    )
