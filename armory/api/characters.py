"""Character API endpoints."""

from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from armory.api.schemas import (
    ActionResponse,
    AllocateRequest,
    CharacterResponse,
    CreateCharacterRequest,
    GrantItemRequest,
    ItemActionRequest,
    RenameLoadoutRequest,
    SaveLoadoutRequest,
    UnequipRequest,
)
from armory.core.character.models import Attributes, Character
from armory.core.character.serialization import character_to_dict, item_to_dict
from armory.core.logging import get_logger
from armory.db.database import get_db
from armory.services.activity_log import DEFAULT_HISTORY_LIMIT
from armory.services.character_service import CharacterNotFoundError, CharacterService

logger = get_logger(__name__)

router = APIRouter(prefix="/characters", tags=["characters"])


def get_character_service(
    request: Request, db: Session = Depends(get_db)
) -> CharacterService:
    """CharacterService bound to the request's DB session (dependency injection)"""
    return CharacterService(
        db=db,
        event_bus=request.app.state.event_bus,
        registry=request.app.state.template_registry,
        rng=request.app.state.rng,
        affixes=getattr(request.app.state, "affix_registry", None),
    )


def _call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a service call, mapping an unknown character to 404."""
    try:
        return fn(*args, **kwargs)
    except CharacterNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _character_payload(service: CharacterService, character: Character) -> dict[str, Any]:
    """character_to_dict plus a display_name on every owned item."""
    payload = character_to_dict(character)
    for item, raw in zip(character.inventory, payload["inventory"]):
        raw["display_name"] = service.display_name(item)
    for slot, item in character.equipment.items():
        if item is not None:
            payload["equipment"][slot.value]["display_name"] = service.display_name(item)
    return payload


def _action_response(
    action: str,
    result: Any,
    service: CharacterService,
    data: Optional[dict[str, Any]] = None,
) -> ActionResponse:
    if not result.success:
        logger.info("%s rejected: %s", action, result.failure.value)
        raise HTTPException(
            status_code=400,
            detail={"reason": result.failure.value, "action": action},
        )
    character = result.character
    return ActionResponse(
        success=True,
        action=action,
        character=_character_payload(service, character),
        stats=service.get_derived_stats(character.character_id).as_dict(),
        data=data,
    )


@router.post(
    "", response_model=CharacterResponse, status_code=status.HTTP_201_CREATED
)
def create_character(
    body: CreateCharacterRequest,
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    try:
        attributes = Attributes(**body.attributes)
    except TypeError:
        raise HTTPException(status_code=422, detail="Unknown attribute")
    try:
        character = service.create_character(
            name=body.name,
            race=body.race,
            attributes=attributes,
            stat_points=body.stat_points,
            gold=body.gold,
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CharacterResponse(
        character=_character_payload(service, character),
        stats=service.get_derived_stats(character.character_id).as_dict(),
    )


@router.get("/{character_id}", response_model=CharacterResponse)
def get_character(
    character_id: str,
    service: CharacterService = Depends(get_character_service),
) -> CharacterResponse:
    character = service.get_character(character_id)
    if character is None:
        raise HTTPException(status_code=404, detail=f"Character not found: {character_id}")
    return CharacterResponse(
        character=_character_payload(service, character),
        stats=service.get_derived_stats(character_id).as_dict(),
    )


@router.get("/{character_id}/stats")
def get_stats(
    character_id: str,
    service: CharacterService = Depends(get_character_service),
) -> dict[str, Any]:
    derived = _call(service.get_derived_stats, character_id)
    return derived.as_dict()


@router.get("/{character_id}/events")
def get_events(
    character_id: str,
    request: Request,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    service: CharacterService = Depends(get_character_service),
) -> dict[str, Any]:
    """Activity log, newest first."""
    if service.get_character(character_id) is None:
        raise HTTPException(status_code=404, detail=f"Character not found: {character_id}")
    events = request.app.state.activity_log.history(character_id, limit=limit)
    return {"character_id": character_id, "events": events}


@router.post("/{character_id}/items", response_model=ActionResponse)
def grant_item(
    character_id: str,
    body: GrantItemRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(
        service.grant_item,
        character_id,
        body.template_id,
        body.upgrade_level,
        prefix_id=body.prefix_id,
        suffix_id=body.suffix_id,
    )
    data = None
    if result.success:
        data = {
            "item": {
                **item_to_dict(result.item),
                "display_name": service.display_name(result.item),
            }
        }
    return _action_response("grant", result, service, data)


@router.post("/{character_id}/equip", response_model=ActionResponse)
def equip_item(
    character_id: str,
    body: ItemActionRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.equip, character_id, body.unique_id)
    data = (
        {"slot": result.slot.value, "displaced": [i.unique_id for i in result.displaced]}
        if result.success
        else None
    )
    return _action_response("equip", result, service, data)


@router.post("/{character_id}/unequip", response_model=ActionResponse)
def unequip_item(
    character_id: str,
    body: UnequipRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.unequip, character_id, body.unique_id, body.slot)
    return _action_response("unequip", result, service)


@router.post("/{character_id}/loadouts", response_model=ActionResponse)
def save_loadout(
    character_id: str,
    body: SaveLoadoutRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.save_loadout, character_id, body.loadout_id, body.name)
    return _action_response("save_loadout", result, service, {"loadout_id": body.loadout_id})


@router.put("/{character_id}/loadouts/{loadout_id}", response_model=ActionResponse)
def rename_loadout(
    character_id: str,
    loadout_id: int,
    body: RenameLoadoutRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.rename_loadout, character_id, loadout_id, body.name)
    return _action_response("rename_loadout", result, service, {"loadout_id": loadout_id})


@router.post("/{character_id}/loadouts/{loadout_id}/load", response_model=ActionResponse)
def load_loadout(
    character_id: str,
    loadout_id: int,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.load_loadout, character_id, loadout_id)
    data = (
        {"loadout_id": loadout_id, "displaced": [i.unique_id for i in result.displaced]}
        if result.success
        else None
    )
    return _action_response("load_loadout", result, service, data)


@router.post("/{character_id}/upgrade", response_model=ActionResponse)
def upgrade_item(
    character_id: str,
    body: ItemActionRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.upgrade, character_id, body.unique_id)
    data = (
        {
            "upgraded": result.upgraded,
            "level": result.new_level,
            "gold_cost": result.gold_cost,
        }
        if result.success
        else None
    )
    return _action_response("upgrade", result, service, data)


@router.post("/{character_id}/disenchant", response_model=ActionResponse)
def disenchant_item(
    character_id: str,
    body: ItemActionRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.disenchant, character_id, body.unique_id)
    data = (
        {
            "essence_type": result.essence_type.value,
            "amount": result.amount,
            "gold_cost": result.gold_cost,
        }
        if result.success
        else None
    )
    return _action_response("disenchant", result, service, data)


@router.post("/{character_id}/attributes", response_model=ActionResponse)
def allocate(
    character_id: str,
    body: AllocateRequest,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.allocate_attributes, character_id, body.points)
    return _action_response("allocate", result, service, {"spent": result.spent})


@router.post("/{character_id}/attributes/reset", response_model=ActionResponse)
def reset(
    character_id: str,
    service: CharacterService = Depends(get_character_service),
) -> ActionResponse:
    result = _call(service.reset_attributes, character_id)
    return _action_response(
        "reset_attributes",
        result,
        service,
        {"refunded": result.refunded, "gold_cost": result.gold_cost},
    )
