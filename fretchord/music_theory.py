"""Music theory primitives: pitch-class arithmetic and chord formula lookup."""

from typing import Final

SEMITONES_PER_OCTAVE = 12

#: Chromatic pitch class names (index 0 = C). Internal spelling is always sharp.
NOTES: Final[tuple[str, ...]] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)

NoteName = str

#: Flat and double-sharp spellings mapped to their sharp equivalents.
ENHARMONIC_MAP: Final[dict[str, str]] = {
    "Db": "C#",
    "Eb": "D#",
    "Fb": "E",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
    "Cb": "B",
    "E#": "F",
    "B#": "C",
    "C##": "D",
    "D##": "E",
    "E##": "F#",
    "F##": "G",
    "G##": "A",
    "A##": "B",
    "B##": "C#",
}

_UNICODE_ACCIDENTALS: Final[dict[str, str]] = {"♯": "#", "♭": "b"}


# ── Chord formulas ──────────────────────────────────────────────────────────
# Semitone offsets from the root. Offsets above 12 are compound intervals
# (14 = major 9th, 17 = perfect 11th, 21 = major 13th) and collapse mod 12.

CHORD_FORMULAS: Final[dict[str, tuple[int, ...]]] = {
    # Triads
    "major": (0, 4, 7),
    "minor": (0, 3, 7),
    "diminished": (0, 3, 6),
    "augmented": (0, 4, 8),
    # Power chord
    "5": (0, 7),
    # Suspended
    "sus2": (0, 2, 7),
    "sus4": (0, 5, 7),
    # Sevenths
    "7": (0, 4, 7, 10),
    "maj7": (0, 4, 7, 11),
    "m7": (0, 3, 7, 10),
    "mMaj7": (0, 3, 7, 11),
    "dim7": (0, 3, 6, 9),
    "m7b5": (0, 3, 6, 10),
    "aug7": (0, 4, 8, 10),
    "7sus2": (0, 2, 7, 10),
    "7sus4": (0, 5, 7, 10),
    # Sixths
    "6": (0, 4, 7, 9),
    "m6": (0, 3, 7, 9),
    # Added tones
    "add9": (0, 4, 7, 14),
    "add11": (0, 4, 7, 17),
    "madd9": (0, 3, 7, 14),
    # Extended
    "9": (0, 4, 7, 10, 14),
    "maj9": (0, 4, 7, 11, 14),
    "m9": (0, 3, 7, 10, 14),
    "11": (0, 4, 7, 10, 14, 17),
    "m11": (0, 3, 7, 10, 14, 17),
    "13": (0, 4, 7, 10, 14, 21),
    # Altered
    "7#9": (0, 4, 7, 10, 15),
    "7b9": (0, 4, 7, 10, 13),
    "7#5": (0, 4, 8, 10),
    "7b5": (0, 4, 6, 10),
    "7#5#9": (0, 4, 8, 10, 15),
    "7b5b9": (0, 4, 6, 10, 13),
}

#: Quality spellings found in chord symbols, mapped to a CHORD_FORMULAS key.
#: Formula keys resolve to themselves and need no entry here.
QUALITY_ALIASES: Final[dict[str, str]] = {
    "": "major",
    "maj": "major",
    "M": "major",
    "m": "minor",
    "min": "minor",
    "-": "minor",
    "dim": "diminished",
    "o": "diminished",
    "°": "diminished",
    "aug": "augmented",
    "+": "augmented",
    "sus": "sus4",
    "dom7": "7",
    "M7": "maj7",
    "Maj7": "maj7",
    "min7": "m7",
    "-7": "m7",
    "mM7": "mMaj7",
    "minmaj7": "mMaj7",
    "o7": "dim7",
    "°7": "dim7",
    "ø": "m7b5",
    "ø7": "m7b5",
    "+7": "aug7",
    "7sus": "7sus4",
    "M9": "maj9",
    "min9": "m9",
    "min6": "m6",
    "min11": "m11",
}

#: Labels for the (octave-collapsed) intervals a chord can contain.
INTERVAL_NAMES: Final[dict[int, str]] = {
    0: "root",
    1: "b9th",
    2: "9th",
    3: "3rd",
    4: "3rd",
    5: "11th",
    6: "b5th",
    7: "5th",
    8: "#5th",
    9: "6th",
    10: "7th",
    11: "7th",
}


def normalize_note(note: str) -> NoteName:
    """
    Translate any accepted spelling of a pitch class to its sharp name.

    Accepts upper or lower case letters, ``#``/``b``, the unicode ``♯``/``♭``
    signs and double sharps (``F##`` → ``G``).

    Raises:
        ValueError: If *note* does not spell a pitch class.
    """
    cleaned = note.strip()
    for symbol, ascii_symbol in _UNICODE_ACCIDENTALS.items():
        cleaned = cleaned.replace(symbol, ascii_symbol)
    if not cleaned:
        raise ValueError("Empty note name.")

    spelled = cleaned[0].upper() + cleaned[1:]
    if spelled in ENHARMONIC_MAP:
        return ENHARMONIC_MAP[spelled]
    if spelled in NOTES:
        return spelled
    raise ValueError(f"Unknown note: '{note}'. Valid notes are: {', '.join(NOTES)}")


def get_note_index(note: str) -> int:
    """Return the chromatic index (0=C … 11=B) of a note name."""
    return NOTES.index(normalize_note(note))


def transpose_note(note: str, semitones: int) -> NoteName:
    """Shift *note* by any number of semitones, wrapping modulo the octave."""
    return NOTES[(get_note_index(note) + semitones) % SEMITONES_PER_OCTAVE]


def resolve_formula_key(quality: str) -> str | None:
    """Map a quality spelling (``"m"``, ``"M7"``, ``"maj7"``) to its formula key."""
    key = QUALITY_ALIASES.get(quality, quality)
    return key if key in CHORD_FORMULAS else None


def get_chord_formula(quality: str) -> tuple[int, ...] | None:
    """Return the semitone offsets for *quality*, or None if it is unknown."""
    key = resolve_formula_key(quality)
    return CHORD_FORMULAS[key] if key is not None else None


def get_chord_notes(root: str, quality: str) -> list[NoteName]:
    """
    Return the distinct pitch classes of a chord, root first.

    Compound intervals are folded into one octave and duplicates removed, so
    ``C9`` yields ``['C', 'E', 'G', 'A#', 'D']``.

    Args:
        root:    Root note in any accepted spelling.
        quality: Quality spelling or formula key.

    Returns:
        The chord tones, or an empty list if *quality* is not recognised.
    """
    formula = get_chord_formula(quality)
    if formula is None:
        return []
    notes = [transpose_note(root, interval % SEMITONES_PER_OCTAVE) for interval in formula]
    return list(dict.fromkeys(notes))


def interval_name(semitones: int) -> str:
    """Short label for an interval above the root, e.g. 7 → ``'5th'``."""
    return INTERVAL_NAMES[semitones % SEMITONES_PER_OCTAVE]
