"""Fretboard model: maps pitch classes onto the strings and frets of a tuned instrument."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property, lru_cache
from types import MappingProxyType
from typing import Final

import numpy as np

from fretchord.music_theory import NOTES, SEMITONES_PER_OCTAVE, NoteName, get_note_index

# ── Instrument constants ────────────────────────────────────────────────────
STRING_COUNT = 6     # Six-string guitar
MAX_FRET = 15        # Highest fret considered for chord shapes
MAX_FRET_SPAN = 4    # Comfortable stretch for one hand, in frets

#: A voicing: one entry per string, low to high. None = muted, 0 = open.
Frets = Sequence[int | None]


@dataclass(frozen=True)
class Tuning:
    """
    Open-string pitches of an instrument, lowest string first.

    Attributes:
        name:  Short identifier, e.g. ``"guitar"``.
        notes: Open-string note names; ``notes[0]`` is string 0.
    """

    name: str
    notes: tuple[NoteName, ...]

    @property
    def string_count(self) -> int:
        return len(self.notes)

    @cached_property
    def open_indices(self) -> tuple[int, ...]:
        """Chromatic index of every open string."""
        return tuple(get_note_index(note) for note in self.notes)


#: Standard guitar tuning, low E (string 0) to high E (string 5).
STANDARD_TUNING: Final[Tuning] = Tuning("guitar", ("E", "A", "D", "G", "B", "E"))

INSTRUMENT_TUNINGS: Final[dict[str, Tuning]] = {
    "guitar": STANDARD_TUNING,
    "bass": Tuning("bass", ("E", "A", "D", "G")),
    "ukulele": Tuning("ukulele", ("G", "C", "E", "A")),
}


@dataclass(frozen=True)
class FretPosition:
    """One physical location on the fretboard and the pitch class it sounds."""

    string: int
    fret: int
    note: NoteName


# ── Note lookup ─────────────────────────────────────────────────────────────

def get_note_at_position(string: int, fret: int, tuning: Tuning = STANDARD_TUNING) -> NoteName:
    """Return the pitch class sounded by *string* stopped at *fret*."""
    return NOTES[(tuning.open_indices[string] + fret) % SEMITONES_PER_OCTAVE]


def _pitch_grid(tuning: Tuning, max_fret: int) -> np.ndarray:
    """Pitch-class index for every (string, fret) cell, shape (strings, max_fret + 1)."""
    open_indices = np.asarray(tuning.open_indices, dtype=np.int64)
    frets = np.arange(max_fret + 1, dtype=np.int64)
    return (open_indices[:, np.newaxis] + frets[np.newaxis, :]) % SEMITONES_PER_OCTAVE


def find_note_positions(
    note: str,
    max_fret: int = MAX_FRET,
    tuning: Tuning = STANDARD_TUNING,
) -> list[FretPosition]:
    """
    Scan every string and fret up to *max_fret* for positions sounding *note*.

    Positions are ordered by string, then by fret.
    """
    target = get_note_index(note)
    grid = _pitch_grid(tuning, max_fret)
    return [
        FretPosition(string=int(string), fret=int(fret), note=NOTES[target])
        for string, fret in np.argwhere(grid == target)
    ]


@lru_cache(maxsize=None)
def _build_map(tuning: Tuning, max_fret: int) -> Mapping[NoteName, tuple[FretPosition, ...]]:
    grid = _pitch_grid(tuning, max_fret)
    return MappingProxyType({
        note: tuple(
            FretPosition(string=int(string), fret=int(fret), note=note)
            for string, fret in np.argwhere(grid == index)
        )
        for index, note in enumerate(NOTES)
    })


def fretboard_map(
    tuning: Tuning = STANDARD_TUNING,
    max_fret: int = MAX_FRET,
) -> Mapping[NoteName, tuple[FretPosition, ...]]:
    """
    Return the full note → positions map for a tuning.

    The map is read-only, computed once per ``(tuning, max_fret)`` and shared
    by every caller; ``clear_fretboard_cache()`` forces a rebuild.
    """
    return _build_map(tuning, max_fret)


def clear_fretboard_cache() -> None:
    _build_map.cache_clear()


def get_positions_for_note(note: str, tuning: Tuning = STANDARD_TUNING) -> tuple[FretPosition, ...]:
    """Cached equivalent of ``find_note_positions(note)`` over the full fret range."""
    return fretboard_map(tuning)[NOTES[get_note_index(note)]]


def get_chord_positions_on_string(
    string: int,
    chord_notes: Iterable[str],
    max_fret: int = MAX_FRET,
    tuning: Tuning = STANDARD_TUNING,
) -> list[FretPosition]:
    """
    List the frets on one string whose pitch belongs to the chord.

    Args:
        string:      String index (0 = lowest).
        chord_notes: Chord tones in any accepted spelling.
        max_fret:    Highest fret to consider (inclusive).
        tuning:      Instrument tuning.

    Returns:
        Chord-tone positions on *string*, fret-ascending (open string first).
    """
    chord_indices = {get_note_index(note) for note in chord_notes}
    open_index = tuning.open_indices[string]
    positions: list[FretPosition] = []
    for fret in range(max_fret + 1):
        index = (open_index + fret) % SEMITONES_PER_OCTAVE
        if index in chord_indices:
            positions.append(FretPosition(string=string, fret=fret, note=NOTES[index]))
    return positions


# ── Voicing queries ─────────────────────────────────────────────────────────

def _fretted(frets: Frets) -> list[int]:
    """Frets that are actually pressed (not open, not muted)."""
    return [fret for fret in frets if fret is not None and fret > 0]


def calculate_fret_span(frets: Frets) -> int:
    """
    Distance between the lowest and highest pressed fret.

    Open and muted strings are ignored; fewer than two pressed frets give 0.
    """
    fretted = _fretted(frets)
    if len(fretted) < 2:
        return 0
    return max(fretted) - min(fretted)


def is_playable(frets: Frets, max_span: int = MAX_FRET_SPAN) -> bool:
    """True if the voicing fits within *max_span* frets."""
    return calculate_fret_span(frets) <= max_span


def get_bass_note(frets: Frets, tuning: Tuning = STANDARD_TUNING) -> NoteName | None:
    """Pitch class of the lowest sounding string, or None if all are muted."""
    for string, fret in enumerate(frets):
        if fret is not None:
            return get_note_at_position(string, fret, tuning)
    return None


def count_played_strings(frets: Frets) -> int:
    return sum(1 for fret in frets if fret is not None)


def count_muted_strings(frets: Frets) -> int:
    return sum(1 for fret in frets if fret is None)


def count_open_strings(frets: Frets) -> int:
    return sum(1 for fret in frets if fret == 0)


def get_base_fret(frets: Frets) -> int:
    """Lowest pressed fret, or 1 when every string is open or muted."""
    fretted = _fretted(frets)
    return min(fretted) if fretted else 1


def is_open_string_chord_tone(
    string: int,
    chord_notes: Iterable[str],
    tuning: Tuning = STANDARD_TUNING,
) -> bool:
    """True if the unfretted *string* already sounds one of the chord tones."""
    open_index = tuning.open_indices[string]
    return any(get_note_index(note) == open_index for note in chord_notes)
