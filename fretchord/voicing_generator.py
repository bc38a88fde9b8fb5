"""VoicingGenerator: enumerates playable chord fingerings by recursive backtracking."""

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, replace
from itertools import groupby
from typing import Final

from fretchord.chord_models import BarrePosition
from fretchord.fretboard import (
    MAX_FRET_SPAN,
    STANDARD_TUNING,
    Frets,
    Tuning,
    calculate_fret_span,
    count_muted_strings,
    count_played_strings,
    get_bass_note,
    get_base_fret,
    get_chord_positions_on_string,
    get_note_at_position,
    is_open_string_chord_tone,
)
from fretchord.music_theory import SEMITONES_PER_OCTAVE, NoteName, get_note_index

logger = logging.getLogger(__name__)

MINOR_THIRD = 3    # semitones above root
MAJOR_THIRD = 4
PERFECT_FIFTH = 7


@dataclass(frozen=True)
class GeneratorConstraints:
    """
    Limits applied while searching for voicings.

    Attributes:
        max_fret_span:       Widest allowed distance between pressed frets.
        require_root:        Lowest sounding string must play the root.
        min_strings:         Minimum number of sounding strings.
        max_muted_strings:   Maximum number of muted strings.
        max_fret:            Highest fret the search may use.
        require_third:       A minor or major third must sound.
        prefer_low_position: Hint for callers; the search itself ignores it.
    """

    max_fret_span: int = MAX_FRET_SPAN
    require_root: bool = True
    min_strings: int = 4
    max_muted_strings: int = 2
    max_fret: int = 12
    require_third: bool = True
    prefer_low_position: bool = True


DEFAULT_CONSTRAINTS: Final[GeneratorConstraints] = GeneratorConstraints()


@dataclass(frozen=True)
class VoicingCandidate:
    """
    A complete string-by-string assignment that sounds only chord tones.

    Attributes:
        frets:          One entry per string, low to high (None = muted).
        notes_played:   Pitch class of every sounding string, low to high.
        bass_note:      Pitch class of the lowest sounding string.
        fret_span:      Distance between the lowest and highest pressed fret.
        base_fret:      Lowest pressed fret (1 if none are pressed).
        played_strings: Number of sounding strings.
        muted_strings:  Number of muted strings.
        has_root:       The root sounds somewhere.
        has_third:      A minor or major third above the root sounds.
        has_fifth:      A perfect fifth above the root sounds.
    """

    frets: tuple[int | None, ...]
    notes_played: tuple[NoteName, ...]
    bass_note: NoteName | None
    fret_span: int
    base_fret: int
    played_strings: int
    muted_strings: int
    has_root: bool
    has_third: bool
    has_fifth: bool

    @classmethod
    def from_frets(cls, frets: Frets, root: str, tuning: Tuning = STANDARD_TUNING) -> "VoicingCandidate":
        """Derive every attribute of a candidate from a complete fret assignment."""
        if len(frets) != tuning.string_count:
            raise ValueError(
                f"Expected {tuning.string_count} frets for {tuning.name}, got {len(frets)}."
            )
        notes_played = tuple(
            get_note_at_position(string, fret, tuning)
            for string, fret in enumerate(frets)
            if fret is not None
        )
        root_index = get_note_index(root)
        played_indices = {get_note_index(note) for note in notes_played}
        return cls(
            frets=tuple(frets),
            notes_played=notes_played,
            bass_note=get_bass_note(frets, tuning),
            fret_span=calculate_fret_span(frets),
            base_fret=get_base_fret(frets),
            played_strings=count_played_strings(frets),
            muted_strings=count_muted_strings(frets),
            has_root=root_index in played_indices,
            has_third=bool(played_indices & _third_indices(root_index)),
            has_fifth=(root_index + PERFECT_FIFTH) % SEMITONES_PER_OCTAVE in played_indices,
        )

    @property
    def distinct_notes(self) -> tuple[NoteName, ...]:
        """Sounding pitch classes without repeats, in order of first appearance."""
        return tuple(dict.fromkeys(self.notes_played))


def _third_indices(root_index: int) -> set[int]:
    return {
        (root_index + MINOR_THIRD) % SEMITONES_PER_OCTAVE,
        (root_index + MAJOR_THIRD) % SEMITONES_PER_OCTAVE,
    }


# ── Search ──────────────────────────────────────────────────────────────────

def generate_voicings(
    chord_notes: Sequence[str],
    root: str,
    constraints: GeneratorConstraints | None = None,
    tuning: Tuning = STANDARD_TUNING,
) -> list[VoicingCandidate]:
    """
    Enumerate every voicing of a chord that satisfies *constraints*.

    The search walks the strings from lowest to highest. On each string it
    tries, in order: muting it, every chord-tone fret on it, and finally the
    open string if that is a chord tone not already tried. A branch is cut as
    soon as its pressed frets stretch wider than ``max_fret_span``; complete
    assignments are then checked against the string-count, root and third
    rules.

    Args:
        chord_notes: Chord tones (any spelling).
        root:        Chord root.
        constraints: Search limits; defaults to DEFAULT_CONSTRAINTS.
        tuning:      Instrument tuning.

    Returns:
        Valid candidates in generation order, without duplicates.
    """
    opts = constraints if constraints is not None else DEFAULT_CONSTRAINTS
    string_count = tuning.string_count
    open_indices = tuning.open_indices
    root_index = get_note_index(root)
    third_indices = _third_indices(root_index)

    positions_by_string = [
        get_chord_positions_on_string(string, chord_notes, opts.max_fret, tuning)
        for string in range(string_count)
    ]
    open_chord_tones = [
        is_open_string_chord_tone(string, chord_notes, tuning) for string in range(string_count)
    ]

    candidates: list[VoicingCandidate] = []
    frets: list[int | None] = []

    def accept_leaf(muted: int) -> None:
        played = string_count - muted
        if played < opts.min_strings or muted > opts.max_muted_strings:
            return

        sounding = [
            (open_indices[string] + fret) % SEMITONES_PER_OCTAVE
            for string, fret in enumerate(frets)
            if fret is not None
        ]
        if not sounding:
            return
        if opts.require_root and sounding[0] != root_index:
            return
        if root_index not in sounding:
            return
        if opts.require_third and not third_indices.intersection(sounding):
            return

        candidates.append(VoicingCandidate.from_frets(frets, root, tuning))

    def build(string: int, pressed: list[int], muted: int) -> None:
        if string == string_count:
            accept_leaf(muted)
            return

        # (a) mute
        if muted < opts.max_muted_strings:
            frets.append(None)
            build(string + 1, pressed, muted + 1)
            frets.pop()

        # (b) every chord tone on this string
        positions = positions_by_string[string]
        for position in positions:
            if position.fret > opts.max_fret:
                continue
            chosen = pressed + [position.fret] if position.fret > 0 else pressed
            if chosen and max(chosen) - min(chosen) > opts.max_fret_span:
                continue
            frets.append(position.fret)
            build(string + 1, chosen, muted)
            frets.pop()

        # (c) open string, if (b) did not already cover it
        if open_chord_tones[string] and not any(p.fret == 0 for p in positions):
            frets.append(0)
            build(string + 1, pressed, muted)
            frets.pop()

    build(0, [], 0)
    return candidates


# ── Relaxation ladder ───────────────────────────────────────────────────────
# Each step loosens the constraints left by the previous one and never
# tightens a value the caller had already set looser.

def _root_anywhere(opts: GeneratorConstraints) -> GeneratorConstraints:
    return replace(opts, require_root=False)


def _fewer_strings(opts: GeneratorConstraints) -> GeneratorConstraints:
    return replace(
        opts,
        max_muted_strings=max(opts.max_muted_strings, 3),
        min_strings=min(opts.min_strings, 3),
    )


def _wider_span(opts: GeneratorConstraints) -> GeneratorConstraints:
    return replace(opts, max_fret_span=max(opts.max_fret_span, 5))


def _third_optional(opts: GeneratorConstraints) -> GeneratorConstraints:
    return replace(opts, require_third=False)


RELAXATION_LADDER: Final[tuple[tuple[str, Callable[[GeneratorConstraints], GeneratorConstraints]], ...]] = (
    ("root anywhere", _root_anywhere),
    ("fewer strings", _fewer_strings),
    ("wider span", _wider_span),
    ("third optional", _third_optional),
)


def relaxation_steps(
    constraints: GeneratorConstraints | None = None,
) -> Iterator[tuple[str, GeneratorConstraints]]:
    """Yield the strict constraint set, then each cumulative relaxation of it."""
    opts = constraints if constraints is not None else DEFAULT_CONSTRAINTS
    yield "strict", opts
    for label, relax in RELAXATION_LADDER:
        opts = relax(opts)
        yield label, opts


def generate_voicings_with_fallback(
    chord_notes: Sequence[str],
    root: str,
    constraints: GeneratorConstraints | None = None,
    tuning: Tuning = STANDARD_TUNING,
) -> list[VoicingCandidate]:
    """
    Like ``generate_voicings``, but relax the constraints until something is found.

    Returns:
        Candidates from the first ladder step that yields any, or an empty
        list if even the loosest step finds nothing.
    """
    for label, opts in relaxation_steps(constraints):
        candidates = generate_voicings(chord_notes, root, opts, tuning)
        logger.debug(
            "Voicing search for %s (%s): %d candidate(s)",
            "-".join(chord_notes), label, len(candidates),
        )
        if candidates:
            return candidates
    return []


# ── Barres ──────────────────────────────────────────────────────────────────

def detect_barres(frets: Frets) -> list[BarrePosition]:
    """
    Find every run of two or more adjacent strings pressed at the same fret.

    Open and muted strings never form a barre; disjoint runs are all reported,
    lowest string first.
    """
    barres: list[BarrePosition] = []
    string = 0
    for fret, run in groupby(frets):
        length = len(list(run))
        if fret is not None and fret > 0 and length >= 2:
            barres.append(BarrePosition(fret=fret, from_string=string, to_string=string + length - 1))
        string += length
    return barres
