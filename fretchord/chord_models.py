"""Data models returned to callers of the chord generator."""

from dataclasses import dataclass, field
from typing import Literal

ChordDifficulty = Literal["easy", "intermediate", "advanced"]

ChordQuality = Literal[
    "major", "minor", "diminished", "augmented", "dominant", "suspended", "add"
]


@dataclass(frozen=True)
class BarrePosition:
    """One finger pressing *fret* across strings from_string..to_string (inclusive)."""

    fret: int
    from_string: int
    to_string: int


@dataclass(frozen=True)
class ChordFingering:
    """Display-ready projection of a ranked voicing."""

    id: str
    name: str
    frets: tuple[int | None, ...]
    difficulty: ChordDifficulty
    barres: tuple[BarrePosition, ...] | None = None
    base_fret: int | None = None

    @property
    def tab(self) -> str:
        """Compact tab notation, e.g. ``x02210``; frets above 9 are comma separated."""
        symbols = ["x" if fret is None else str(fret) for fret in self.frets]
        separator = "," if any(len(symbol) > 1 for symbol in symbols) else ""
        return separator.join(symbols)


@dataclass(frozen=True)
class ChordDefinition:
    """A chord with its ranked fingerings; the first voicing is the default."""

    canonical: str
    display: str
    root: str
    quality: ChordQuality
    notes: tuple[str, ...]
    voicings: tuple[ChordFingering, ...]
    is_partial: bool = False
    omitted_notes: tuple[str, ...] = field(default_factory=tuple)
