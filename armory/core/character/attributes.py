"""Stat points: spending them on base attributes and buying them back"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from armory.core.failures import FailureReason

from .models import PRIMARY_ATTRIBUTES, Character

logger = logging.getLogger(__name__)

RESET_COST_PER_POINT = 1000  # gold per refunded point, first reset free


@dataclass(frozen=True)
class AllocationResult:
    success: bool
    character: Optional[Character] = None
    failure: Optional[FailureReason] = None
    spent: int = 0
    refunded: int = 0
    gold_cost: int = 0


def allocate_attributes(character: Character, points: dict[str, int]) -> AllocationResult:
    """Add `points` to the named attributes, paid from stat_points.

    All-or-nothing: any unknown attribute or negative amount rejects the
    whole request.
    """
    for name, amount in points.items():
        if name not in PRIMARY_ATTRIBUTES or amount < 0:
            return AllocationResult(success=False, failure=FailureReason.INVALID_ALLOCATION)

    spent = sum(points.values())
    if spent > character.stat_points:
        return AllocationResult(
            success=False, failure=FailureReason.INSUFFICIENT_STAT_POINTS
        )

    current = character.attributes
    new_attributes = replace(
        current, **{name: current.get(name) + amount for name, amount in points.items()}
    )
    updated = replace(
        character,
        attributes=new_attributes,
        stat_points=character.stat_points - spent,
    )
    logger.debug("Allocated %d points for %s", spent, character.character_id)
    return AllocationResult(success=True, character=updated, spent=spent)


def reset_cost(character: Character, refunded: int) -> int:
    if character.resets_used == 0:
        return 0
    return refunded * RESET_COST_PER_POINT


def reset_attributes(character: Character) -> AllocationResult:
    """Lower every attribute above 1 to 1 and refund the difference as stat points.

    Costs RESET_COST_PER_POINT gold per refunded point, except the very
    first reset. Counts toward resets_used even when nothing is refunded.
    """
    attrs = character.attributes
    refunded = sum(max(0, attrs.get(name) - 1) for name in PRIMARY_ATTRIBUTES)
    cost = reset_cost(character, refunded)
    if character.resources.gold < cost:
        return AllocationResult(success=False, failure=FailureReason.INSUFFICIENT_CURRENCY)

    updated = replace(
        character,
        attributes=replace(
            attrs, **{name: 1 for name in PRIMARY_ATTRIBUTES if attrs.get(name) > 1}
        ),
        stat_points=character.stat_points + refunded,
        resources=character.resources.add_gold(-cost),
        resets_used=character.resets_used + 1,
    )
    logger.info(
        "Reset attributes of %s: %d points refunded for %d gold",
        character.character_id,
        refunded,
        cost,
    )
    return AllocationResult(
        success=True, character=updated, refunded=refunded, gold_cost=cost
    )
