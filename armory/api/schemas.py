"""API request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from armory.core.character.models import Race
from armory.core.item.models import EquipmentSlot


# === Request Schemas ===


class CreateCharacterRequest(BaseModel):
    """Character creation request"""

    name: str = Field(..., min_length=1, max_length=50)
    race: Race
    attributes: dict[str, int] = Field(default_factory=dict)
    stat_points: int = Field(0, ge=0)
    gold: int = Field(0, ge=0)


class GrantItemRequest(BaseModel):
    """Loot/admin item grant"""

    template_id: str
    upgrade_level: int = Field(0, ge=0)
    prefix_id: Optional[str] = None
    suffix_id: Optional[str] = None


class ItemActionRequest(BaseModel):
    """equip / upgrade / disenchant target"""

    unique_id: str


class UnequipRequest(BaseModel):
    unique_id: str
    slot: EquipmentSlot


class AllocateRequest(BaseModel):
    points: dict[str, int]


class SaveLoadoutRequest(BaseModel):
    """Snapshot the worn gear under loadout_id"""

    loadout_id: int = Field(..., ge=0)
    name: Optional[str] = Field(None, min_length=1, max_length=50)


class RenameLoadoutRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


# === Response Schemas ===


class CharacterResponse(BaseModel):
    """Character + derived statline"""

    character: dict[str, Any]
    stats: dict[str, Any]


class ActionResponse(BaseModel):
    """Result of a character action"""

    success: bool
    action: str
    character: dict[str, Any]
    stats: dict[str, Any]
    data: Optional[dict[str, Any]] = None


class RejectionDetail(BaseModel):
    """400 body: categorical rejection"""

    reason: str
    action: str
