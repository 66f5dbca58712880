"""Event type constants"""


class EventTypes:
    """Event type string constants"""

    # character
    CHARACTER_CREATED = "character_created"
    ATTRIBUTES_ALLOCATED = "attributes_allocated"
    ATTRIBUTES_RESET = "attributes_reset"

    # equipment
    ITEM_EQUIPPED = "item_equipped"
    ITEM_UNEQUIPPED = "item_unequipped"
    LOADOUT_SAVED = "loadout_saved"
    LOADOUT_RENAMED = "loadout_renamed"
    LOADOUT_LOADED = "loadout_loaded"

    # item lifecycle
    ITEM_GRANTED = "item_granted"
    ITEM_UPGRADED = "item_upgraded"
    ITEM_DESTROYED = "item_destroyed"
    ITEM_DISENCHANTED = "item_disenchanted"


# Every character-scoped event; all carry data["character_id"]
CHARACTER_EVENTS: tuple[str, ...] = (
    EventTypes.CHARACTER_CREATED,
    EventTypes.ATTRIBUTES_ALLOCATED,
    EventTypes.ATTRIBUTES_RESET,
    EventTypes.ITEM_EQUIPPED,
    EventTypes.ITEM_UNEQUIPPED,
    EventTypes.LOADOUT_SAVED,
    EventTypes.LOADOUT_RENAMED,
    EventTypes.LOADOUT_LOADED,
    EventTypes.ITEM_GRANTED,
    EventTypes.ITEM_UPGRADED,
    EventTypes.ITEM_DESTROYED,
    EventTypes.ITEM_DISENCHANTED,
)
