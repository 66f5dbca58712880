"""Character dict conversion used by persistence and the API"""

from armory.core.character.models import (
    Attributes,
    Character,
    CharacterClass,
    Loadout,
    Race,
    Resources,
    empty_equipment,
)
from armory.core.character.serialization import (
    character_from_dict,
    character_to_dict,
    item_from_dict,
    item_to_dict,
)
from armory.core.item.models import EquipmentSlot, ItemInstance, RolledAffixStats


def _make_character() -> Character:
    equipment = empty_equipment()
    equipment[EquipmentSlot.RING_2] = ItemInstance(
        unique_id="r1",
        template_id="copper_ring",
        upgrade_level=2,
        rolled_suffix=RolledAffixStats(stats_bonus={"stamina": 3}, dodge_chance_bonus=1.5),
    )
    return Character(
        character_id="c1",
        name="Bria",
        race=Race.GNOME,
        level=7,
        experience=120,
        character_class=CharacterClass.ENGINEER,
        attributes=Attributes(agility=9),
        stat_points=2,
        current_health=40,
        equipment=equipment,
        inventory=(ItemInstance(unique_id="s1", template_id="rusty_sword", is_borrowed=True),),
        resources=Resources(gold=250, rare_essence=3),
        loadouts=(
            Loadout(
                loadout_id=0,
                name="Jewelry",
                equipment={EquipmentSlot.RING_2: "r1", EquipmentSlot.HEAD: None},
            ),
        ),
        resets_used=2,
    )


class TestCharacterDict:
    def test_round_trip(self) -> None:
        character = _make_character()
        assert character_from_dict(character_to_dict(character)) == character

    def test_enums_stored_by_value(self) -> None:
        data = character_to_dict(_make_character())
        assert data["race"] == "Gnome"
        assert data["character_class"] == "Engineer"
        assert "ring2" in data["equipment"]
        assert data["resources"]["rare_essence"] == 3
        assert data["loadouts"][0]["equipment"] == {"ring2": "r1", "head": None}
        assert data["resets_used"] == 2

    def test_missing_slots_filled(self) -> None:
        data = character_to_dict(_make_character())
        data["equipment"] = {"ring2": data["equipment"]["ring2"]}
        restored = character_from_dict(data)

        assert set(restored.equipment) == set(EquipmentSlot)
        assert restored.equipment[EquipmentSlot.HEAD] is None
        assert restored.equipment[EquipmentSlot.RING_2].unique_id == "r1"

    def test_minimal_record(self) -> None:
        restored = character_from_dict(
            {"character_id": "c2", "name": "Min", "race": "Orc"}
        )
        assert restored.level == 1
        assert restored.character_class is None
        assert restored.attributes == Attributes()
        assert restored.inventory == ()
        assert restored.loadouts == ()
        assert restored.resets_used == 0


class TestItemDict:
    def test_affix_stores_only_non_defaults(self) -> None:
        item = ItemInstance(
            unique_id="x",
            template_id="t",
            rolled_prefix=RolledAffixStats(damage_min=2, damage_max=4),
        )
        assert item_to_dict(item)["rolled_prefix"] == {"damage_min": 2, "damage_max": 4}

    def test_unknown_affix_keys_ignored(self) -> None:
        item = item_from_dict(
            {
                "unique_id": "x",
                "template_id": "t",
                "rolled_prefix": {"armor_bonus": 3, "glow": True},
            }
        )
        assert item.rolled_prefix == RolledAffixStats(armor_bonus=3)
        assert item.upgrade_level == 0
        assert item.is_borrowed is False
