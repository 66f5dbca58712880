"""Item catalog + blacksmith economy"""

from .models import (
    Affix,
    AffixType,
    EquipmentSlot,
    EssenceType,
    ItemCategory,
    ItemInstance,
    ItemRarity,
    ItemTemplate,
    RolledAffixStats,
)
from .registry import AffixRegistry, TemplateRegistry

__all__ = [
    "Affix",
    "AffixType",
    "EquipmentSlot",
    "EssenceType",
    "ItemCategory",
    "ItemInstance",
    "ItemRarity",
    "ItemTemplate",
    "RolledAffixStats",
    "AffixRegistry",
    "TemplateRegistry",
]
