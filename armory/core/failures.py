"""Rejection reasons shared by the equipment resolver and the economy.

Expected rejections are returned, never raised; callers map them to
user-facing messages.
"""

from enum import Enum


class FailureReason(str, Enum):
    INSUFFICIENT_LEVEL = "insufficient_level"
    INSUFFICIENT_ATTRIBUTE = "insufficient_attribute"
    RING_SLOTS_FULL = "ring_slots_full"
    TWO_HANDED_CONFLICT = "two_handed_conflict"
    INVENTORY_FULL = "inventory_full"
    INSUFFICIENT_CURRENCY = "insufficient_currency"
    ITEM_NOT_FOUND = "item_not_found"
    MAX_LEVEL_REACHED = "max_level_reached"
    NO_ESSENCE_TIER = "no_essence_tier"

    TEMPLATE_NOT_FOUND = "template_not_found"
    NOT_EQUIPPABLE = "not_equippable"
    ITEM_BORROWED = "item_borrowed"

    INSUFFICIENT_STAT_POINTS = "insufficient_stat_points"
    INVALID_ALLOCATION = "invalid_allocation"

    LOADOUT_NOT_FOUND = "loadout_not_found"
    INVALID_UPGRADE_LEVEL = "invalid_upgrade_level"
    AFFIX_NOT_FOUND = "affix_not_found"
