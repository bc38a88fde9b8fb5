"""Chord generator: turns a chord name into ranked, display-ready fingerings."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from fretchord.chord_models import (
    BarrePosition,
    ChordDefinition,
    ChordDifficulty,
    ChordFingering,
    ChordQuality,
)
from fretchord.fretboard import STANDARD_TUNING, Tuning, count_open_strings
from fretchord.music_theory import (
    ENHARMONIC_MAP,
    SEMITONES_PER_OCTAVE,
    NoteName,
    get_chord_notes,
    get_note_index,
    interval_name,
    resolve_formula_key,
)
from fretchord.voicing_generator import (
    PERFECT_FIFTH,
    detect_barres,
    generate_voicings_with_fallback,
)
from fretchord.voicing_scorer import RankedVoicing, rank_voicings

logger = logging.getLogger(__name__)

#: Longer input is rejected rather than parsed.
MAX_CHORD_NAME_LENGTH = 50

#: Four fingers can press four strings; more than that with a shared fret needs a barre.
MAX_SINGLE_FINGERED_STRINGS = 4

_ROOT_RE: Final[re.Pattern[str]] = re.compile(r"^([A-Ga-g])([#b]?)")
_UNICODE_ACCIDENTALS: Final[dict[str, str]] = {"♯": "#", "♭": "b"}

#: Shorthand used in canonical names; other formula keys are used verbatim.
_CANONICAL_SUFFIXES: Final[dict[str, str]] = {
    "major": "",
    "minor": "m",
    "diminished": "dim",
    "augmented": "aug",
}

_DOMINANT_QUALITIES: Final[frozenset[str]] = frozenset({"7", "9", "11", "13"})


@dataclass(frozen=True)
class ParsedChord:
    """
    A chord name split into its parts.

    Attributes:
        root:    Root note in sharp spelling.
        quality: Formula key, e.g. ``"minor"`` or ``"7sus4"``.
        display: The name exactly as the caller passed it.
    """

    root: NoteName
    quality: str
    display: str


# ------------------------------------------------------------------
# Parsing
# ------------------------------------------------------------------

def parse_chord_name(chord_name: str) -> ParsedChord | None:
    """
    Split a chord name into root and quality.

    Flats are converted to sharps (``Bb7sus4`` → ``A#`` + ``7sus4``). A
    quality suffix that matches no known formula is guessed: ``minor`` if it
    contains ``m`` but not ``maj``, otherwise ``major``.

    Returns:
        The parsed chord, or None for empty or overlong input and input that
        does not start with a note letter. Never raises.
    """
    if not isinstance(chord_name, str):
        return None
    text = chord_name.strip()
    if not text:
        return None
    if len(text) > MAX_CHORD_NAME_LENGTH:
        logger.debug("Chord name too long (%d chars)", len(text))
        return None

    for symbol, ascii_symbol in _UNICODE_ACCIDENTALS.items():
        text = text.replace(symbol, ascii_symbol)

    match = _ROOT_RE.match(text)
    if match is None:
        logger.debug("Invalid chord root in %r", chord_name)
        return None

    letter, accidental = match.groups()
    spelled = letter.upper() + accidental
    root = ENHARMONIC_MAP.get(spelled, spelled)

    suffix = text[match.end():]
    quality = resolve_formula_key(suffix)
    if quality is None:
        quality = "minor" if "m" in suffix and "maj" not in suffix else "major"

    return ParsedChord(root=root, quality=quality, display=chord_name)


def can_generate_chord(chord_name: str) -> bool:
    """True if the name parses and its quality has a known formula."""
    parsed = parse_chord_name(chord_name)
    return parsed is not None and resolve_formula_key(parsed.quality) is not None


# ------------------------------------------------------------------
# Conversion helpers
# ------------------------------------------------------------------

def reduce_chord_notes(notes: Sequence[str], root: str) -> tuple[list[NoteName], list[str]]:
    """
    Thin out a chord that has no playable voicing.

    The fifth goes first; failing that, everything beyond the first four
    chord tones is dropped.

    Returns:
        (remaining notes, labels of the omitted intervals)
    """
    notes = list(notes)
    if len(notes) <= 3:
        return notes, []

    root_index = get_note_index(root)
    fifth_index = (root_index + PERFECT_FIFTH) % SEMITONES_PER_OCTAVE
    without_fifth = [note for note in notes if get_note_index(note) != fifth_index]
    if len(without_fifth) != len(notes) and len(without_fifth) >= 3:
        return without_fifth, [interval_name(PERFECT_FIFTH)]

    if len(notes) > 4:
        omitted = [interval_name(get_note_index(note) - root_index) for note in notes[4:]]
        return notes[:4], omitted

    return notes, []


def quality_category(quality: str) -> ChordQuality:
    """Coarse family of a formula key, e.g. ``"m7b5"`` → ``"minor"``."""
    if "dim" in quality:
        return "diminished"
    if "aug" in quality or quality == "+":
        return "augmented"
    if "sus" in quality:
        return "suspended"
    if "add" in quality:
        return "add"
    if quality in _DOMINANT_QUALITIES:
        return "dominant"
    if "m" in quality and "maj" not in quality and quality != "major":
        return "minor"
    return "major"


def canonical_name(root: str, quality: str) -> str:
    """Normalised lookup key, e.g. ``("A#", "minor")`` → ``"A#m"``."""
    return root + _CANONICAL_SUFFIXES.get(quality, quality)


def needs_barre(ranked: RankedVoicing, barres: list[BarrePosition]) -> bool:
    """True if a barre run exists and too many strings are pressed to finger them singly."""
    pressed = sum(1 for fret in ranked.candidate.frets if fret is not None and fret > 0)
    return bool(barres) and pressed > MAX_SINGLE_FINGERED_STRINGS


def _difficulty(ranked: RankedVoicing, barre: bool) -> ChordDifficulty:
    total = ranked.score.total
    span = ranked.candidate.fret_span
    if total >= 70 and span <= 2 and not barre:
        return "easy"
    if total < 50 or span >= 4 or barre:
        return "advanced"
    return "intermediate"


def _voicing_name(ranked: RankedVoicing, barre: bool) -> str:
    candidate = ranked.candidate
    if candidate.base_fret > 3:
        return f"Position {candidate.base_fret}"
    if barre:
        return "Barre"
    if count_open_strings(candidate.frets) >= 3:
        return "Open"
    return "Standard"


def to_fingering(ranked: RankedVoicing, index: int) -> ChordFingering:
    """Project a ranked candidate onto the caller-facing fingering model."""
    candidate = ranked.candidate
    barres = detect_barres(candidate.frets)
    barre = needs_barre(ranked, barres)
    return ChordFingering(
        id=f"gen-{index}",
        name=_voicing_name(ranked, barre),
        frets=candidate.frets,
        difficulty=_difficulty(ranked, barre),
        barres=tuple(barres) if barres else None,
        base_fret=candidate.base_fret if candidate.base_fret > 1 else None,
    )


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def generate_chord(
    chord_name: str,
    max_voicings: int = 5,
    *,
    tuning: Tuning = STANDARD_TUNING,
) -> ChordDefinition | None:
    """
    Generate ranked fingerings for any chord name.

    Args:
        chord_name:   Chord symbol such as ``"Am"``, ``"C#maj7"`` or ``"Bb7sus4"``.
        max_voicings: Maximum number of fingerings to return.
        tuning:       Instrument tuning.

    Returns:
        ChordDefinition with the best fingering first, or None if the name
        cannot be parsed, the quality is unknown, or no voicing exists even
        after every relaxation.
    """
    parsed = parse_chord_name(chord_name)
    if parsed is None:
        return None

    chord_notes = get_chord_notes(parsed.root, parsed.quality)
    if not chord_notes:
        return None

    notes_used: list[NoteName] = chord_notes
    omitted: list[str] = []
    candidates = generate_voicings_with_fallback(chord_notes, parsed.root, tuning=tuning)

    if not candidates and len(chord_notes) > 3:
        reduced, reduced_omitted = reduce_chord_notes(chord_notes, parsed.root)
        logger.debug("Retrying %s without %s", parsed.display, ", ".join(reduced_omitted))
        candidates = generate_voicings_with_fallback(reduced, parsed.root, tuning=tuning)
        if candidates:
            notes_used, omitted = reduced, reduced_omitted

    if not candidates:
        logger.warning(
            "No playable voicing for %r (%s) on %s",
            parsed.display, "-".join(chord_notes), tuning.name,
        )
        return None

    ranked = rank_voicings(candidates, notes_used, max_voicings)
    return ChordDefinition(
        canonical=canonical_name(parsed.root, parsed.quality),
        display=parsed.display,
        root=parsed.root,
        quality=quality_category(parsed.quality),
        notes=tuple(chord_notes),
        voicings=tuple(to_fingering(entry, index) for index, entry in enumerate(ranked)),
        is_partial=bool(omitted),
        omitted_notes=tuple(omitted),
    )
