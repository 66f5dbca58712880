"""Character build resolution — stats, equipment, attribute points"""

from .models import Attributes, Character, CharacterClass, Loadout, Race, Resources
from .stats import DerivedCharacter, derive_stats

__all__ = [
    "Attributes",
    "Character",
    "CharacterClass",
    "Loadout",
    "Race",
    "Resources",
    "DerivedCharacter",
    "derive_stats",
]
