"""VoicingScorer: rates voicing candidates for playability and musical completeness."""

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import combinations
from typing import Final

from fretchord.fretboard import Frets, count_open_strings
from fretchord.music_theory import get_note_index
from fretchord.voicing_generator import VoicingCandidate

#: Canonical open-position shapes. Only the muted / open / fretted pattern of
#: each string is compared, so these also stand for their movable barre forms.
COMMON_SHAPES: Final[dict[str, tuple[int | None, ...]]] = {
    "E": (0, 2, 2, 1, 0, 0),
    "A": (None, 0, 2, 2, 2, 0),
    "C": (None, 3, 2, 0, 1, 0),
    "G": (3, 2, 0, 0, 0, 3),
    "D": (None, None, 0, 2, 3, 2),
    "Am": (None, 0, 2, 2, 1, 0),
    "Em": (0, 2, 2, 0, 0, 0),
    "Dm": (None, None, 0, 2, 3, 1),
}


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    The five independently scored aspects of a voicing.

    Attributes:
        playability:   0-30. Compact span, open strings, low position, no awkward stretch.
        voice_leading: -15-30. Root in the bass, third present (critical), fifth present.
        ergonomics:    0-20. Resemblance to familiar shapes, clean muting.
        completeness:  2-25. Share of the chord tones that actually sound.
        sonority:      0-10. Number of strings and how widely they are spread.
    """

    playability: float
    voice_leading: int
    ergonomics: int
    completeness: int
    sonority: int


@dataclass(frozen=True)
class VoicingScore:
    """Score of one voicing; ``total`` is always the sum of the breakdown."""

    breakdown: ScoreBreakdown

    @property
    def total(self) -> float:
        b = self.breakdown
        return b.playability + b.voice_leading + b.ergonomics + b.completeness + b.sonority


@dataclass(frozen=True)
class RankedVoicing:
    """A candidate paired with its score."""

    candidate: VoicingCandidate
    score: VoicingScore


# ── Helpers ─────────────────────────────────────────────────────────────────

def shape_match_score(frets: Frets) -> float:
    """
    Best fraction (0-1) of strings whose muted/open/fretted state matches a common shape.

    Voicings for instruments with a different string count never match.
    """
    best = 0.0
    for shape in COMMON_SHAPES.values():
        if len(shape) != len(frets):
            continue
        matches = 0
        for fret, shape_fret in zip(frets, shape):
            if fret is None or shape_fret is None:
                if fret is None and shape_fret is None:
                    matches += 1
            elif (fret == 0) == (shape_fret == 0):
                matches += 1
        best = max(best, matches / len(shape))
    return best


def has_string_skips(frets: Frets) -> bool:
    """True if a muted string sits between two sounding strings."""
    played = [string for string, fret in enumerate(frets) if fret is not None]
    return any(upper - lower > 1 for lower, upper in zip(played, played[1:]))


def stretch_difficulty(frets: Frets) -> float:
    """
    Worst fret distance per string distance among pressed strings.

    Only pairs more than two frets apart count; a large gap over few strings
    means the fingers have to spread or cross.
    """
    pressed = [(string, fret) for string, fret in enumerate(frets) if fret is not None and fret > 0]
    worst = 0.0
    for (string_a, fret_a), (string_b, fret_b) in combinations(pressed, 2):
        fret_diff = abs(fret_a - fret_b)
        string_diff = abs(string_a - string_b)
        if string_diff > 0 and fret_diff > 2:
            worst = max(worst, fret_diff / string_diff)
    return worst


def _playability(candidate: VoicingCandidate) -> float:
    points: float = 0
    if candidate.fret_span <= 2:
        points += 15
    elif candidate.fret_span <= 3:
        points += 10
    elif candidate.fret_span <= 4:
        points += 5

    points += min(count_open_strings(candidate.frets) * 2, 6)

    if candidate.base_fret <= 3:
        points += 6
    elif candidate.base_fret <= 5:
        points += 4
    elif candidate.base_fret <= 7:
        points += 2

    points -= min(stretch_difficulty(candidate.frets) * 2, 6)
    return max(0, points)


def _voice_leading(candidate: VoicingCandidate, chord_notes: Sequence[str]) -> int:
    points = 0
    if candidate.has_root and candidate.bass_note is not None:
        if get_note_index(candidate.bass_note) == get_note_index(chord_notes[0]):
            points += 15
        else:
            points += 8

    # Without its third a chord loses its major/minor identity.
    points += 10 if candidate.has_third else -15

    if candidate.has_fifth:
        points += 5
    return points


def _ergonomics(candidate: VoicingCandidate) -> int:
    frets = candidate.frets
    points = round(shape_match_score(frets) * 12)
    if not has_string_skips(frets):
        points += 5
    if len(frets) >= 4:
        low_muted = frets[0] is None or frets[1] is None
        middle_muted = frets[2] is None or frets[3] is None
        if low_muted and not middle_muted:
            points += 3
    return points


def _completeness(candidate: VoicingCandidate, chord_notes: Sequence[str]) -> int:
    played = {get_note_index(note) for note in candidate.notes_played}
    required = {get_note_index(note) for note in chord_notes}
    coverage = len(played) / len(required)
    if coverage >= 1:
        return 25
    if coverage >= 0.8:
        return 15
    if coverage >= 0.6:
        return 8
    return 2


def _sonority(candidate: VoicingCandidate) -> int:
    points = 0
    if candidate.played_strings >= 5:
        points += 5
    elif candidate.played_strings >= 4:
        points += 4
    elif candidate.played_strings >= 3:
        points += 2

    played = [string for string, fret in enumerate(candidate.frets) if fret is not None]
    if played:
        spread = played[-1] - played[0] + 1
        if spread >= 5:
            points += 5
        elif spread >= 4:
            points += 3
        elif spread >= 3:
            points += 2
    return points


# ── Public API ──────────────────────────────────────────────────────────────

def score_voicing(candidate: VoicingCandidate, chord_notes: Sequence[str]) -> VoicingScore:
    """
    Score a candidate; higher is better.

    Args:
        candidate:   Voicing to rate.
        chord_notes: Chord tones with the root first.

    Returns:
        VoicingScore whose total is the sum of its five components.
    """
    return VoicingScore(
        breakdown=ScoreBreakdown(
            playability=_playability(candidate),
            voice_leading=_voice_leading(candidate, chord_notes),
            ergonomics=_ergonomics(candidate),
            completeness=_completeness(candidate, chord_notes),
            sonority=_sonority(candidate),
        )
    )


def rank_voicings(
    candidates: Sequence[VoicingCandidate],
    chord_notes: Sequence[str],
    limit: int = 5,
) -> list[RankedVoicing]:
    """
    Score every candidate and return the best *limit*, highest total first.

    Equal totals keep their generation order.
    """
    scored = [RankedVoicing(candidate, score_voicing(candidate, chord_notes)) for candidate in candidates]
    scored.sort(key=lambda ranked: ranked.score.total, reverse=True)
    return scored[:limit]


def get_best_voicing(
    candidates: Sequence[VoicingCandidate],
    chord_notes: Sequence[str],
) -> RankedVoicing | None:
    """Highest scoring candidate, or None for an empty list."""
    ranked = rank_voicings(candidates, chord_notes, limit=1)
    return ranked[0] if ranked else None
