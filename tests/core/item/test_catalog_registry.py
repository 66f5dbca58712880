"""Template and affix registries"""

import json
from pathlib import Path

from armory.core.item.models import (
    Affix,
    AffixType,
    ItemCategory,
    ItemRarity,
    ItemTemplate,
)
from armory.core.item.registry import (
    AffixRegistry,
    TemplateRegistry,
    template_from_dict,
    template_to_dict,
)

ITEM_TEMPLATES_PATH = Path("armory/data/item_templates.json")
AFFIXES_PATH = Path("armory/data/affixes.json")


def _write(tmp_path, records):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


# ── TemplateRegistry ──────────────────────────────────────────


class TestTemplateRegistry:
    def test_load_seed_catalog(self) -> None:
        registry = TemplateRegistry()
        assert registry.load_from_json(ITEM_TEMPLATES_PATH) == 14

        sword = registry.get("rusty_sword")
        assert sword is not None
        assert sword.rarity == ItemRarity.COMMON
        assert sword.category == ItemCategory.WEAPON

        bow = registry.get("hunter_bow")
        assert bow.is_ranged
        assert bow.required_stats == {"agility": 6}

    def test_bad_records_skipped(self, tmp_path) -> None:
        path = _write(
            tmp_path,
            [
                {"id": "ok", "name": "Ok", "slot": "head", "category": "Armor",
                 "rarity": "Common", "value": 5},
                {"id": "bad_slot", "name": "X", "slot": "tail", "category": "Armor",
                 "rarity": "Common", "value": 5},
                {"id": "bad_rarity", "name": "X", "slot": "head", "category": "Armor",
                 "rarity": "Mythic", "value": 5},
                {"name": "no id", "slot": "head", "category": "Armor",
                 "rarity": "Common", "value": 5},
            ],
        )
        registry = TemplateRegistry()
        assert registry.load_from_json(path) == 1
        assert registry.get("ok") is not None
        assert registry.get("bad_slot") is None

    def test_register_overwrites(self) -> None:
        registry = TemplateRegistry()
        first = ItemTemplate("t", "First", "head", ItemCategory.ARMOR, ItemRarity.COMMON, 1)
        second = ItemTemplate("t", "Second", "head", ItemCategory.ARMOR, ItemRarity.COMMON, 2)
        registry.register(first)
        registry.register(second)
        assert registry.get("t").name == "Second"
        assert registry.count() == 1

    def test_search_by_slot(self, template_registry) -> None:
        rings = {t.template_id for t in template_registry.search_by_slot("ring")}
        assert rings == {"copper_ring", "ruby_ring"}

    def test_missing_template(self, template_registry) -> None:
        assert template_registry.get("nonexistent") is None

    def test_dict_round_trip(self, template_registry) -> None:
        for template in template_registry.get_all():
            assert template_from_dict(template_to_dict(template)) == template


# ── AffixRegistry ─────────────────────────────────────────────


class TestAffixRegistry:
    def test_load_seed_affixes(self) -> None:
        registry = AffixRegistry()
        assert registry.load_from_json(AFFIXES_PATH) == 6
        assert registry.get("of_the_bear").affix_type == AffixType.SUFFIX

    def test_display_name(self) -> None:
        registry = AffixRegistry()
        registry.register(Affix("sharp", "Sharp", AffixType.PREFIX))
        registry.register(Affix("of_the_bear", "of the Bear", AffixType.SUFFIX))

        assert registry.display_name("Axe", "sharp", "of_the_bear") == "Sharp Axe of the Bear"
        assert registry.display_name("Axe", None, "of_the_bear") == "Axe of the Bear"
        assert registry.display_name("Axe", "unknown", None) == "Axe"

    def test_bad_affix_skipped(self, tmp_path) -> None:
        path = _write(
            tmp_path,
            [
                {"id": "a", "name": "A", "type": "Prefix"},
                {"id": "b", "name": "B", "type": "Infix"},
            ],
        )
        registry = AffixRegistry()
        assert registry.load_from_json(path) == 1
