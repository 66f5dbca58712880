"""Character ↔ JSON-safe dict

Used by the persistence layer (JSON column) and the HTTP API.
Enums are stored by value, equipment is keyed by slot value.
"""

from __future__ import annotations

from dataclasses import asdict, fields
from typing import Any, Optional

from armory.core.item.models import EquipmentSlot, ItemInstance, RolledAffixStats

from .models import (
    Attributes,
    Character,
    CharacterClass,
    Loadout,
    Race,
    Resources,
    empty_equipment,
)

_AFFIX_FIELDS = {f.name for f in fields(RolledAffixStats)}


def _affix_to_dict(affix: Optional[RolledAffixStats]) -> Optional[dict[str, Any]]:
    if affix is None:
        return None
    # Only non-default values are stored
    defaults = RolledAffixStats()
    return {
        k: v for k, v in asdict(affix).items() if v != getattr(defaults, k)
    }


def _affix_from_dict(raw: Optional[dict[str, Any]]) -> Optional[RolledAffixStats]:
    if raw is None:
        return None
    return RolledAffixStats(**{k: v for k, v in raw.items() if k in _AFFIX_FIELDS})


def item_to_dict(item: ItemInstance) -> dict[str, Any]:
    return {
        "unique_id": item.unique_id,
        "template_id": item.template_id,
        "upgrade_level": item.upgrade_level,
        "prefix_id": item.prefix_id,
        "suffix_id": item.suffix_id,
        "rolled_prefix": _affix_to_dict(item.rolled_prefix),
        "rolled_suffix": _affix_to_dict(item.rolled_suffix),
        "is_borrowed": item.is_borrowed,
        "crafter_name": item.crafter_name,
    }


def item_from_dict(raw: dict[str, Any]) -> ItemInstance:
    return ItemInstance(
        unique_id=raw["unique_id"],
        template_id=raw["template_id"],
        upgrade_level=int(raw.get("upgrade_level") or 0),
        prefix_id=raw.get("prefix_id"),
        suffix_id=raw.get("suffix_id"),
        rolled_prefix=_affix_from_dict(raw.get("rolled_prefix")),
        rolled_suffix=_affix_from_dict(raw.get("rolled_suffix")),
        is_borrowed=bool(raw.get("is_borrowed", False)),
        crafter_name=raw.get("crafter_name"),
    )


def _loadout_to_dict(loadout: Loadout) -> dict[str, Any]:
    return {
        "loadout_id": loadout.loadout_id,
        "name": loadout.name,
        "equipment": {slot.value: uid for slot, uid in loadout.equipment.items()},
    }


def _loadout_from_dict(raw: dict[str, Any]) -> Loadout:
    return Loadout(
        loadout_id=int(raw["loadout_id"]),
        name=raw["name"],
        equipment={EquipmentSlot(k): v for k, v in raw.get("equipment", {}).items()},
    )


def character_to_dict(character: Character) -> dict[str, Any]:
    return {
        "character_id": character.character_id,
        "name": character.name,
        "race": character.race.value,
        "character_class": (
            character.character_class.value if character.character_class else None
        ),
        "level": character.level,
        "experience": character.experience,
        "attributes": character.attributes.as_dict(),
        "stat_points": character.stat_points,
        "current_health": character.current_health,
        "current_mana": character.current_mana,
        "current_energy": character.current_energy,
        "equipment": {
            slot.value: item_to_dict(item) if item is not None else None
            for slot, item in character.equipment.items()
        },
        "inventory": [item_to_dict(item) for item in character.inventory],
        "resources": asdict(character.resources),
        "loadouts": [_loadout_to_dict(loadout) for loadout in character.loadouts],
        "resets_used": character.resets_used,
    }


def character_from_dict(raw: dict[str, Any]) -> Character:
    """Inverse of character_to_dict. Missing slots are filled with None."""
    equipment = empty_equipment()
    for slot_value, item_raw in raw.get("equipment", {}).items():
        equipment[EquipmentSlot(slot_value)] = (
            item_from_dict(item_raw) if item_raw is not None else None
        )

    character_class = raw.get("character_class")
    return Character(
        character_id=raw["character_id"],
        name=raw["name"],
        race=Race(raw["race"]),
        level=int(raw.get("level", 1)),
        experience=int(raw.get("experience", 0)),
        character_class=CharacterClass(character_class) if character_class else None,
        attributes=Attributes(**raw.get("attributes", {})),
        stat_points=int(raw.get("stat_points", 0)),
        current_health=raw.get("current_health"),
        current_mana=raw.get("current_mana"),
        current_energy=raw.get("current_energy"),
        equipment=equipment,
        inventory=tuple(item_from_dict(i) for i in raw.get("inventory", [])),
        resources=Resources(**raw.get("resources", {})),
        loadouts=tuple(_loadout_from_dict(entry) for entry in raw.get("loadouts", [])),
        resets_used=int(raw.get("resets_used", 0)),
    )
