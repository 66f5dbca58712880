"""Item catalog endpoints."""

from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Request

from armory.core.item.models import CONSUMABLE_SLOT, RING_SLOT, EquipmentSlot
from armory.core.item.registry import template_to_dict

router = APIRouter(prefix="/catalog", tags=["catalog"])

_SLOTS = {s.value for s in EquipmentSlot} | {RING_SLOT, CONSUMABLE_SLOT}


@router.get("/templates")
def list_templates(request: Request, slot: Optional[str] = None) -> dict[str, Any]:
    """All item templates, or only those for one slot kind."""
    registry = request.app.state.template_registry
    if slot is None:
        templates = registry.get_all()
    elif slot not in _SLOTS:
        raise HTTPException(status_code=422, detail=f"Unknown slot: {slot}")
    else:
        templates = registry.search_by_slot(slot)
    return {"templates": [template_to_dict(t) for t in templates]}
