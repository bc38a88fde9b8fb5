"""Tests for chord-name parsing and the generate_chord facade."""

import logging

import pytest

from fretchord import chord_generator
from fretchord.chord_generator import (
    can_generate_chord,
    canonical_name,
    generate_chord,
    parse_chord_name,
    quality_category,
    reduce_chord_notes,
    to_fingering,
)
from fretchord.chord_models import BarrePosition, ChordFingering
from fretchord.fretboard import INSTRUMENT_TUNINGS
from fretchord.voicing_generator import VoicingCandidate, generate_voicings_with_fallback
from fretchord.voicing_scorer import RankedVoicing, rank_voicings


def _ranked(frets: tuple[int | None, ...], root: str, chord_notes: list[str]) -> RankedVoicing:
    return rank_voicings([VoicingCandidate.from_frets(frets, root)], chord_notes)[0]


# ── Parsing ─────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("name", "root", "quality"),
    [
        ("C", "C", "major"),
        ("Am", "A", "minor"),
        ("am", "A", "minor"),
        ("F#m7", "F#", "m7"),
        ("Bb7sus4", "A#", "7sus4"),
        ("Ebmaj7", "D#", "maj7"),
        ("CM7", "C", "maj7"),
        ("Gsus", "G", "sus4"),
        ("Bdim", "B", "diminished"),
        ("C+", "C", "augmented"),
        ("B♭m", "A#", "minor"),
        ("  D7  ", "D", "7"),
    ],
)
def test_parse_chord_name(name: str, root: str, quality: str) -> None:
    parsed = parse_chord_name(name)
    assert parsed is not None
    assert (parsed.root, parsed.quality) == (root, quality)


def test_unknown_suffix_is_guessed() -> None:
    assert parse_chord_name("Cwobble").quality == "major"
    assert parse_chord_name("Cmystery").quality == "minor"
    assert parse_chord_name("Cmajestic").quality == "major"


@pytest.mark.parametrize("name", ["", "   ", "H7", "7", "#m", "C" + "m" * 50, None, 42])
def test_parse_rejects_bad_input(name: object) -> None:
    assert parse_chord_name(name) is None  # type: ignore[arg-type]


def test_display_keeps_the_callers_spelling() -> None:
    assert parse_chord_name(" Bb7 ").display == " Bb7 "
    assert parse_chord_name("B♭m").display == "B♭m"
    assert generate_chord("B♭m").display == "B♭m"


def test_can_generate_chord() -> None:
    assert can_generate_chord("Am")
    assert can_generate_chord("Cmaj9")
    assert not can_generate_chord("")
    assert not can_generate_chord("Xm")


# ── Helpers ─────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    ("quality", "category"),
    [
        ("major", "major"),
        ("maj7", "major"),
        ("minor", "minor"),
        ("m7", "minor"),
        ("m7b5", "minor"),
        ("mMaj7", "minor"),
        ("diminished", "diminished"),
        ("dim7", "diminished"),
        ("augmented", "augmented"),
        ("aug7", "augmented"),
        ("sus4", "suspended"),
        ("7sus4", "suspended"),
        ("add9", "add"),
        ("madd9", "add"),
        ("7", "dominant"),
        ("13", "dominant"),
    ],
)
def test_quality_category(quality: str, category: str) -> None:
    assert quality_category(quality) == category


@pytest.mark.parametrize(
    ("root", "quality", "expected"),
    [
        ("C", "major", "C"),
        ("A#", "minor", "A#m"),
        ("B", "diminished", "Bdim"),
        ("G#", "augmented", "G#aug"),
        ("C", "maj7", "Cmaj7"),
    ],
)
def test_canonical_name(root: str, quality: str, expected: str) -> None:
    assert canonical_name(root, quality) == expected


def test_reduce_drops_the_fifth_first() -> None:
    assert reduce_chord_notes(["C", "E", "G", "A#", "D"], "C") == (["C", "E", "A#", "D"], ["5th"])


def test_reduce_without_a_fifth_keeps_four_notes() -> None:
    notes, omitted = reduce_chord_notes(["C", "E", "F#", "A#", "C#"], "C")
    assert notes == ["C", "E", "F#", "A#"]
    assert omitted == ["b9th"]


def test_reduce_leaves_small_chords_alone() -> None:
    assert reduce_chord_notes(["C", "E", "G"], "C") == (["C", "E", "G"], [])
    assert reduce_chord_notes(["C", "D#", "F#", "A"], "C") == (["C", "D#", "F#", "A"], [])


# ── Fingerings ──────────────────────────────────────────────────────────────

def test_open_a_minor_fingering() -> None:
    fingering = to_fingering(_ranked((None, 0, 2, 2, 1, 0), "A", ["A", "C", "E"]), 0)
    assert fingering.id == "gen-0"
    assert fingering.name == "Standard"
    assert fingering.difficulty == "easy"
    assert fingering.barres == (BarrePosition(2, 2, 3),)
    assert fingering.base_fret is None
    assert fingering.tab == "x02210"


def test_open_e_major_fingering() -> None:
    fingering = to_fingering(_ranked((0, 2, 2, 1, 0, 0), "E", ["E", "G#", "B"]), 1)
    assert fingering.name == "Open"
    assert fingering.difficulty == "easy"


def test_f_barre_fingering() -> None:
    fingering = to_fingering(_ranked((1, 3, 3, 2, 1, 1), "F", ["F", "A", "C"]), 3)
    assert fingering.id == "gen-3"
    assert fingering.name == "Barre"
    assert fingering.difficulty == "advanced"
    assert fingering.barres == (BarrePosition(3, 1, 2), BarrePosition(1, 4, 5))


def test_high_position_fingering() -> None:
    fingering = to_fingering(_ranked((None, 7, 9, 9, 8, 7), "E", ["E", "G", "B"]), 0)
    assert fingering.name == "Position 7"
    assert fingering.base_fret == 7
    assert fingering.tab == "x79987"


def test_tab_uses_commas_above_fret_nine() -> None:
    fingering = ChordFingering(
        id="gen-0", name="Position 10", frets=(None, 10, 12, 12, 11, 10), difficulty="advanced",
    )
    assert fingering.tab == "x,10,12,12,11,10"


# ── generate_chord ──────────────────────────────────────────────────────────

def test_generate_a_minor() -> None:
    chord = generate_chord("Am")
    assert chord is not None
    assert chord.canonical == "Am"
    assert chord.display == "Am"
    assert chord.root == "A"
    assert chord.quality == "minor"
    assert chord.notes == ("A", "C", "E")
    assert not chord.is_partial
    assert chord.voicings[0].frets == (None, 0, 2, 2, 1, 0)
    assert [v.id for v in chord.voicings] == [f"gen-{i}" for i in range(len(chord.voicings))]


def test_generate_e_major_prefers_the_open_shape() -> None:
    chord = generate_chord("E")
    assert chord is not None
    assert chord.voicings[0].frets == (0, 2, 2, 1, 0, 0)
    assert chord.voicings[0].name == "Open"


def test_generate_flat_chord() -> None:
    chord = generate_chord("Bb7sus4")
    assert chord is not None
    assert chord.canonical == "A#7sus4"
    assert chord.quality == "suspended"
    assert chord.notes == ("A#", "D#", "F", "G#")


def test_generate_limits_voicings() -> None:
    assert 1 <= len(generate_chord("G", 2).voicings) <= 2
    assert 1 <= len(generate_chord("G").voicings) <= 5


def test_generated_voicings_sound_only_chord_tones() -> None:
    chord = generate_chord("G7")
    assert chord is not None
    tones = set(chord.notes)
    for fingering in chord.voicings:
        candidate = VoicingCandidate.from_frets(fingering.frets, chord.root)
        assert set(candidate.notes_played) <= tones


def test_generate_on_ukulele() -> None:
    chord = generate_chord("C", tuning=INSTRUMENT_TUNINGS["ukulele"])
    assert chord is not None
    assert all(len(fingering.frets) == 4 for fingering in chord.voicings)


@pytest.mark.parametrize("name", ["", "H", "   ", "Q7"])
def test_generate_rejects_unparseable_names(name: str) -> None:
    assert generate_chord(name) is None


def test_partial_voicing_when_the_full_chord_has_none(monkeypatch: pytest.MonkeyPatch) -> None:
    def only_small_chords(chord_notes, root, constraints=None, tuning=None):
        if len(chord_notes) > 4:
            return []
        return generate_voicings_with_fallback(chord_notes, root)

    monkeypatch.setattr(chord_generator, "generate_voicings_with_fallback", only_small_chords)
    chord = generate_chord("C9")
    assert chord is not None
    assert chord.is_partial
    assert chord.omitted_notes == ("5th",)
    assert chord.notes == ("C", "E", "G", "A#", "D")
    assert chord.voicings


def test_no_voicing_logs_a_warning(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    monkeypatch.setattr(chord_generator, "generate_voicings_with_fallback", lambda *args, **kwargs: [])
    with caplog.at_level(logging.WARNING, logger="fretchord.chord_generator"):
        assert generate_chord("C9") is None
        assert generate_chord("Am") is None
    assert "No playable voicing" in caplog.text
