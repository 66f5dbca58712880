"""Catalog registries — JSON load + dynamic registration"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, fields
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from .models import (
    CONSUMABLE_SLOT,
    RING_SLOT,
    Affix,
    AffixType,
    EquipmentSlot,
    ItemCategory,
    ItemRarity,
    ItemTemplate,
)

logger = logging.getLogger(__name__)

_TEMPLATE_FIELDS = {f.name for f in fields(ItemTemplate)}
_VALID_SLOTS = {s.value for s in EquipmentSlot} | {RING_SLOT, CONSUMABLE_SLOT}


def template_from_dict(raw: dict[str, Any]) -> ItemTemplate:
    """Build an ItemTemplate from a catalog record.

    The record uses "id" for template_id; every other key matches a
    field name. Unknown keys are ignored. Raises KeyError/ValueError on
    malformed records.
    """
    slot = raw["slot"]
    if slot not in _VALID_SLOTS:
        raise ValueError(f"Unknown slot: {slot}")

    extra = {
        k: v
        for k, v in raw.items()
        if k in _TEMPLATE_FIELDS
        and k not in ("template_id", "slot", "category", "rarity", "value")
    }
    extra["required_stats"] = dict(raw.get("required_stats", {}))
    extra["stats_bonus"] = dict(raw.get("stats_bonus", {}))

    return ItemTemplate(
        template_id=raw["id"],
        slot=slot,
        category=ItemCategory(raw["category"]),
        rarity=ItemRarity(raw["rarity"]),
        value=int(raw["value"]),
        **extra,
    )


def template_to_dict(template: ItemTemplate) -> dict[str, Any]:
    """ItemTemplate → JSON-safe catalog record (inverse of template_from_dict)."""
    data = asdict(template)
    data["id"] = data.pop("template_id")
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}


class TemplateRegistry:
    """
    Item template store.
    Seed data (JSON) + templates registered at runtime (admin grants, tests).
    """

    def __init__(self) -> None:
        self._templates: dict[str, ItemTemplate] = {}

    def load_from_json(self, path: str | Path) -> int:
        """Load item_templates.json. Returns the number of templates loaded.

        Malformed records are logged and skipped.
        """
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                template = template_from_dict(raw)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(
                    "Failed to load template: %s: %s", raw.get("id", "?"), e
                )
                continue
            self._templates[template.template_id] = template
            count += 1

        logger.info("Loaded %d item templates from %s", count, path)
        return count

    def register(self, template: ItemTemplate) -> None:
        """Overwrites an existing template_id with a warning."""
        if template.template_id in self._templates:
            logger.warning("Overwriting existing template: %s", template.template_id)
        self._templates[template.template_id] = template

    def get(self, template_id: str) -> Optional[ItemTemplate]:
        """O(1) lookup. None when missing."""
        return self._templates.get(template_id)

    def get_all(self) -> list[ItemTemplate]:
        return list(self._templates.values())

    def search_by_slot(self, slot: str) -> list[ItemTemplate]:
        return [t for t in self._templates.values() if t.slot == slot]

    def count(self) -> int:
        return len(self._templates)


class AffixRegistry:
    """Affix display metadata. Aggregation never reads this."""

    def __init__(self) -> None:
        self._affixes: dict[str, Affix] = {}

    def load_from_json(self, path: str | Path) -> int:
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                affix = Affix(
                    affix_id=raw["id"],
                    name=raw["name"],
                    affix_type=AffixType(raw["type"]),
                    required_level=int(raw.get("required_level", 0)),
                )
            except (KeyError, ValueError) as e:
                logger.warning("Failed to load affix: %s: %s", raw.get("id", "?"), e)
                continue
            self._affixes[affix.affix_id] = affix
            count += 1

        logger.info("Loaded %d affixes from %s", count, path)
        return count

    def register(self, affix: Affix) -> None:
        self._affixes[affix.affix_id] = affix

    def get(self, affix_id: str) -> Optional[Affix]:
        return self._affixes.get(affix_id)

    def display_name(self, base_name: str, prefix_id: Optional[str], suffix_id: Optional[str]) -> str:
        """"<prefix> <base> <suffix>", skipping unknown or absent affixes."""
        parts = []
        prefix = self.get(prefix_id) if prefix_id else None
        suffix = self.get(suffix_id) if suffix_id else None
        if prefix is not None:
            parts.append(prefix.name)
        parts.append(base_name)
        if suffix is not None:
            parts.append(suffix.name)
        return " ".join(parts)

    def count(self) -> int:
        return len(self._affixes)
