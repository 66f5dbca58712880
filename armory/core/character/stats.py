"""Stat aggregation — base attributes + equipment + race → combat statline

Pure functions, no I/O. Template lookup is injected by the caller
(Core does not know about the DB).

Scaling rules:
- Template bonuses scale with upgrade level: base + round(base * level * 0.1).
  Crit chance is a percentage and is scaled without rounding.
- Crit damage, penetration, steal and dodge bonuses never scale.
- Rolled affixes are added at face value.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from armory.core.item.models import (
    EquipmentSlot,
    ItemInstance,
    ItemTemplate,
    RolledAffixStats,
)

from .models import PRIMARY_ATTRIBUTES, Attributes, Character, Race

logger = logging.getLogger(__name__)

TemplateLookup = Callable[[str], Optional[ItemTemplate]]

UPGRADE_STEP = 0.1

BASE_HEALTH = 50
BASE_ENERGY = 10
BASE_MANA = 20
BASE_MIN_DAMAGE = 1
BASE_MAX_DAMAGE = 2
BASE_CRIT_DAMAGE_MODIFIER = 200


@dataclass(frozen=True)
class RacialModifier:
    """Flat additive bonuses granted by race."""

    armor: int = 0
    mana_regen: int = 0
    dodge_chance: float = 0.0


RACIAL_MODIFIERS: dict[Race, RacialModifier] = {
    Race.DWARF: RacialModifier(armor=5),
    Race.ELF: RacialModifier(mana_regen=10),
    Race.GNOME: RacialModifier(dodge_chance=10.0),
}


def round_half_up(value: float) -> int:
    """Game rounding: .5 always goes up (round(2.5) == 3, round(-2.5) == -2)."""
    return math.floor(value + 0.5)


@dataclass(frozen=True)
class DerivedCharacter:
    """Read-only combat statline. Recomputed on every read, never stored."""

    character: Character
    attributes: Attributes  # base + item/affix stat bonuses

    max_health: int
    max_mana: int
    max_energy: int
    current_health: int
    current_mana: int
    current_energy: int

    min_damage: int
    max_damage: int
    magic_damage_min: int
    magic_damage_max: int

    armor: int
    crit_chance: float
    crit_damage_modifier: int
    attacks_per_round: float
    dodge_chance: float
    mana_regen: int

    armor_penetration_percent: int
    armor_penetration_flat: int
    life_steal_percent: int
    life_steal_flat: int
    mana_steal_percent: int
    mana_steal_flat: int

    @property
    def level(self) -> int:
        return self.character.level

    def as_dict(self) -> dict:
        data = {
            k: getattr(self, k)
            for k in self.__dataclass_fields__
            if k not in ("character", "attributes")
        }
        data.update(self.attributes.as_dict())
        data["level"] = self.level
        return data


@dataclass
class _Accumulator:
    """Running totals while walking the equipment."""

    attributes: dict[str, int] = field(default_factory=dict)
    damage_min: int = 0
    damage_max: int = 0
    magic_damage_min: int = 0
    magic_damage_max: int = 0
    armor: int = 0
    max_health: int = 0
    crit_chance: float = 0.0
    crit_damage_modifier: int = 0
    attacks_per_round: float = 0.0
    dodge_chance: float = 0.0
    armor_penetration_percent: int = 0
    armor_penetration_flat: int = 0
    life_steal_percent: int = 0
    life_steal_flat: int = 0
    mana_steal_percent: int = 0
    mana_steal_flat: int = 0

    def add_stats(self, bonus: dict[str, int], factor: float) -> None:
        for name, value in bonus.items():
            if name not in self.attributes:
                # Only the six primary attributes are tracked
                continue
            base = int(value or 0)
            self.attributes[name] += base + round_half_up(base * factor)

    def add_template(self, template: ItemTemplate, upgrade_level: int) -> None:
        factor = upgrade_level * UPGRADE_STEP

        def scaled(base: int) -> int:
            return base + round_half_up(base * factor)

        self.add_stats(template.stats_bonus, factor)
        self.damage_min += scaled(template.damage_min)
        self.damage_max += scaled(template.damage_max)
        self.magic_damage_min += scaled(template.magic_damage_min)
        self.magic_damage_max += scaled(template.magic_damage_max)
        self.armor += scaled(template.armor_bonus)
        self.max_health += scaled(template.max_health_bonus)
        self.crit_chance += template.crit_chance_bonus + template.crit_chance_bonus * factor

        self.crit_damage_modifier += template.crit_damage_modifier_bonus
        self.armor_penetration_percent += template.armor_penetration_percent
        self.armor_penetration_flat += template.armor_penetration_flat
        self.life_steal_percent += template.life_steal_percent
        self.life_steal_flat += template.life_steal_flat
        self.mana_steal_percent += template.mana_steal_percent
        self.mana_steal_flat += template.mana_steal_flat
        self.dodge_chance += template.dodge_chance_bonus

    def add_affix(self, affix: RolledAffixStats) -> None:
        self.add_stats(affix.stats_bonus, 0.0)
        self.damage_min += affix.damage_min
        self.damage_max += affix.damage_max
        self.magic_damage_min += affix.magic_damage_min
        self.magic_damage_max += affix.magic_damage_max
        self.armor += affix.armor_bonus
        self.max_health += affix.max_health_bonus
        self.crit_chance += affix.crit_chance_bonus
        self.crit_damage_modifier += affix.crit_damage_modifier_bonus
        self.attacks_per_round += affix.attacks_per_round_bonus
        self.dodge_chance += affix.dodge_chance_bonus
        self.armor_penetration_percent += affix.armor_penetration_percent
        self.armor_penetration_flat += affix.armor_penetration_flat
        self.life_steal_percent += affix.life_steal_percent
        self.life_steal_flat += affix.life_steal_flat
        self.mana_steal_percent += affix.mana_steal_percent
        self.mana_steal_flat += affix.mana_steal_flat


def _main_hand_template(
    character: Character, get_template: TemplateLookup
) -> Optional[ItemTemplate]:
    item: Optional[ItemInstance] = character.equipment.get(
        EquipmentSlot.MAIN_HAND
    ) or character.equipment.get(EquipmentSlot.TWO_HAND)
    if item is None:
        return None
    return get_template(item.template_id)


def _clamp(current: Optional[int], maximum: int) -> int:
    if current is None:
        return maximum
    return min(current, maximum)


def derive_stats(
    character: Character,
    get_template: TemplateLookup,
    racial_modifiers: Optional[dict[Race, RacialModifier]] = None,
) -> DerivedCharacter:
    """Resolve the full combat statline of a character.

    Total for any structurally valid character: equipped items whose
    template cannot be resolved contribute nothing.
    """
    if racial_modifiers is None:
        racial_modifiers = RACIAL_MODIFIERS

    acc = _Accumulator(attributes=character.attributes.as_dict())

    for slot, item in character.equipped_items():
        template = get_template(item.template_id)
        if template is None:
            logger.debug(
                "Template %s not found for %s in %s, skipped",
                item.template_id,
                item.unique_id,
                slot.value,
            )
            continue
        acc.add_template(template, item.upgrade_level)
        if item.rolled_prefix is not None:
            acc.add_affix(item.rolled_prefix)
        if item.rolled_suffix is not None:
            acc.add_affix(item.rolled_suffix)

    attrs = acc.attributes
    weapon = _main_hand_template(character, get_template)

    base_attacks = (weapon.attacks_per_round if weapon else None) or 1
    attacks_per_round = round(base_attacks + acc.attacks_per_round, 2)

    max_health = BASE_HEALTH + attrs["stamina"] * 10 + acc.max_health
    if max_health < 1:
        max_health = BASE_HEALTH
    max_energy = BASE_ENERGY + attrs["energy"] // 2
    max_mana = max(0, BASE_MANA + attrs["intelligence"] * 10)

    if weapon is not None and weapon.is_magical:
        min_damage = BASE_MIN_DAMAGE + acc.damage_min
        max_damage = BASE_MAX_DAMAGE + acc.damage_max
    else:
        scaling = attrs["agility"] if weapon is not None and weapon.is_ranged else attrs["strength"]
        min_damage = BASE_MIN_DAMAGE + scaling + acc.damage_min
        max_damage = BASE_MAX_DAMAGE + scaling * 2 + acc.damage_max

    intelligence_bonus = math.floor(attrs["intelligence"] * 1.5)
    magic_min = acc.magic_damage_min + intelligence_bonus if acc.magic_damage_min > 0 else 0
    magic_max = acc.magic_damage_max + intelligence_bonus if acc.magic_damage_max > 0 else 0

    racial = racial_modifiers.get(character.race, RacialModifier())

    return DerivedCharacter(
        character=character,
        attributes=Attributes(**{name: attrs[name] for name in PRIMARY_ATTRIBUTES}),
        max_health=max_health,
        max_mana=max_mana,
        max_energy=max_energy,
        current_health=_clamp(character.current_health, max_health),
        current_mana=_clamp(character.current_mana, max_mana),
        current_energy=_clamp(character.current_energy, max_energy),
        min_damage=min_damage,
        max_damage=max_damage,
        magic_damage_min=magic_min,
        magic_damage_max=magic_max,
        armor=acc.armor + racial.armor,
        crit_chance=attrs["accuracy"] * 0.5 + acc.crit_chance,
        crit_damage_modifier=BASE_CRIT_DAMAGE_MODIFIER + acc.crit_damage_modifier,
        attacks_per_round=attacks_per_round,
        dodge_chance=attrs["agility"] * 0.1 + acc.dodge_chance + racial.dodge_chance,
        mana_regen=attrs["intelligence"] * 2 + racial.mana_regen,
        armor_penetration_percent=acc.armor_penetration_percent,
        armor_penetration_flat=acc.armor_penetration_flat,
        life_steal_percent=acc.life_steal_percent,
        life_steal_flat=acc.life_steal_flat,
        mana_steal_percent=acc.mana_steal_percent,
        mana_steal_flat=acc.mana_steal_flat,
    )


def clamp_vitals(character: Character, derived: DerivedCharacter) -> Character:
    """Cap stored current vitals at the derived maxima (never raises them)."""
    updates = {}
    for name, maximum in (
        ("current_health", derived.max_health),
        ("current_mana", derived.max_mana),
        ("current_energy", derived.max_energy),
    ):
        current = getattr(character, name)
        if current is not None and current > maximum:
            updates[name] = maximum
    if not updates:
        return character
    return replace(character, **updates)


# ── Experience ────────────────────────────────────────────────


def experience_for_level(level: int) -> int:
    """XP needed to advance from `level` to the next one."""
    return math.floor(100 * math.pow(level, 1.3))


def calculate_total_experience(level: int, experience: int) -> int:
    """Lifetime XP: current progress plus every completed level."""
    return experience + sum(experience_for_level(i) for i in range(1, level))
