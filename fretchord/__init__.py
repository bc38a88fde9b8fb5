"""fretchord: algorithmic chord diagrams for fretted instruments."""

from fretchord.chord_generator import can_generate_chord, generate_chord, parse_chord_name
from fretchord.chord_models import BarrePosition, ChordDefinition, ChordFingering

__version__ = "0.1.0"

__all__ = [
    "BarrePosition",
    "ChordDefinition",
    "ChordFingering",
    "can_generate_chord",
    "generate_chord",
    "parse_chord_name",
]
